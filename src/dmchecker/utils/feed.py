"""Relay feed collecting Nostr DM events for a bounded window.

Opens one WebSocket per relay, sends a single ``REQ`` asking for DMs
addressed to and authored by the target key, and gathers matching
``EVENT`` messages until the shared window expires (or, optionally,
until every relay has signalled ``EOSE``).

Note:
    Fan-out runs under one ``asyncio.TaskGroup`` bounded by one
    ``asyncio.timeout(window)``. When the window expires every relay task
    is cancelled and each WebSocket is closed by its ``async with`` block
    before [collect_dm_events()][dmchecker.utils.feed.collect_dm_events]
    returns. A relay that fails to connect, drops the connection or sends
    garbage only loses its own contribution.

    Events are not de-duplicated: the same DM stored on two relays is
    counted twice, and the statistics reflect that.

See Also:
    [dmchecker.services.analyzer.Analyzer][dmchecker.services.analyzer.Analyzer]:
        The service that drives the feed.
    [dmchecker.models.event.RawEvent][dmchecker.models.event.RawEvent]:
        Event model built from ``EVENT`` messages.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import secrets
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from nostr_sdk import Filter, Kind, PublicKey

from dmchecker.core.exceptions import FeedUnavailableError, ParseError, RelayConnectionError
from dmchecker.models.constants import NetworkType
from dmchecker.models.event import RawEvent
from dmchecker.models.relay import Relay


logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 10.0
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass(slots=True)
class FeedStats:
    """Counters accumulated while collecting; mutated by the relay tasks."""

    relays_connected: int = 0
    relays_failed: int = 0
    relays_skipped: int = 0
    events_received: int = 0
    parse_errors: int = 0


@dataclass(frozen=True, slots=True)
class FeedResult:
    """Events gathered by [collect_dm_events()][dmchecker.utils.feed.collect_dm_events].

    Attributes:
        events: Matching events in arrival order, duplicates included.
        stats: Connection and message counters for the run.
    """

    events: tuple[RawEvent, ...]
    stats: FeedStats = field(default_factory=FeedStats)


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


def build_dm_filters(pubkey: str, kinds: Iterable[int]) -> list[dict[str, Any]]:
    """Build the two DM filters: addressed to ``pubkey`` and authored by it.

    Returns:
        ``[{"kinds": K, "#p": [pubkey]}, {"kinds": K, "authors": [pubkey]}]``
        as plain dicts ready for JSON encoding.
    """
    public_key = PublicKey.parse(pubkey)
    kind_list = [Kind(k) for k in kinds]
    inbound = Filter().kinds(kind_list).pubkey(public_key)
    outbound = Filter().kinds(kind_list).author(public_key)
    return [json.loads(f.as_json()) for f in (inbound, outbound)]


def build_request(subscription_id: str, filters: Sequence[dict[str, Any]]) -> str:
    return json.dumps(["REQ", subscription_id, *filters])


def parse_relay_message(raw: str) -> list[Any]:
    """Decode a relay-to-client message into a JSON array.

    Raises:
        ParseError: If ``raw`` is not JSON, or not an array whose first
            element is a string message type.
    """
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"Invalid JSON from relay: {e}") from e

    if not isinstance(message, list) or not message or not isinstance(message[0], str):
        raise ParseError(f"Unexpected relay message shape: {raw[:80]!r}")
    return message


def parse_event_message(message: list[Any]) -> RawEvent:
    """Build the event carried by an ``["EVENT", <sub_id>, <event>]`` message.

    Raises:
        ParseError: If the message has no event object or the object has
            the wrong top-level shape.
    """
    if len(message) < 3:
        raise ParseError("EVENT message without an event object")
    try:
        return RawEvent.from_dict(message[2])
    except (TypeError, ValueError) as e:
        raise ParseError(f"Malformed event: {e}") from e


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Subscription:
    subscription_id: str
    request: str
    pubkey: str
    kinds: frozenset[int]
    stop_on_eose: bool


async def collect_dm_events(  # noqa: PLR0913
    pubkey: str,
    relays: Iterable[Relay],
    *,
    kinds: Iterable[int] = (4,),
    window: float = DEFAULT_WINDOW,  # noqa: ASYNC109
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    stop_on_eose: bool = False,
    session: aiohttp.ClientSession | None = None,
) -> FeedResult:
    """Collect DM events involving ``pubkey`` from ``relays``.

    Args:
        pubkey: Target public key as 64-character lowercase hex.
        relays: Relays to query concurrently. Overlay relays (Tor, I2P,
            Lokinet) need a proxy and are skipped.
        kinds: Event kinds to request and accept.
        window: Total collection window in seconds, shared by all relays.
        connect_timeout: Per-relay WebSocket handshake timeout in seconds.
        stop_on_eose: Finish a relay as soon as it sends ``EOSE`` instead
            of listening for live events until the window expires.
        session: Optional session to open WebSockets with; a private one
            is created and closed when omitted.

    Returns:
        [FeedResult][dmchecker.utils.feed.FeedResult] with the collected
        events and counters.

    Raises:
        FeedUnavailableError: If no relay could be connected.
    """
    stats = FeedStats()
    targets: list[Relay] = []
    for relay in relays:
        if relay.network != NetworkType.CLEARNET:
            stats.relays_skipped += 1
            logger.info("relay_skipped relay=%s network=%s", relay.url, relay.network)
            continue
        targets.append(relay)

    if not targets:
        raise FeedUnavailableError("No clearnet relays configured")

    kind_set = frozenset(kinds)
    subscription_id = f"sub_{secrets.token_hex(6)}"
    subscription = _Subscription(
        subscription_id=subscription_id,
        request=build_request(subscription_id, build_dm_filters(pubkey, sorted(kind_set))),
        pubkey=pubkey,
        kinds=kind_set,
        stop_on_eose=stop_on_eose,
    )
    events: list[RawEvent] = []

    logger.info(
        "collection_started relays=%d window_s=%s subscription=%s",
        len(targets),
        window,
        subscription_id,
    )

    async with contextlib.AsyncExitStack() as stack:
        if session is None:
            session = await stack.enter_async_context(aiohttp.ClientSession())
        try:
            async with asyncio.timeout(window), asyncio.TaskGroup() as tg:
                for relay in targets:
                    tg.create_task(
                        _collect_from_relay(
                            session, relay, subscription, events, stats, connect_timeout
                        )
                    )
        except TimeoutError:
            logger.debug("collection_window_elapsed window_s=%s", window)

    logger.info(
        "collection_completed connected=%d failed=%d events=%d parse_errors=%d",
        stats.relays_connected,
        stats.relays_failed,
        stats.events_received,
        stats.parse_errors,
    )

    if stats.relays_connected == 0:
        raise FeedUnavailableError(f"Could not connect to any of {len(targets)} relays")
    return FeedResult(events=tuple(events), stats=stats)


async def _collect_from_relay(  # noqa: PLR0913
    session: aiohttp.ClientSession,
    relay: Relay,
    subscription: _Subscription,
    events: list[RawEvent],
    stats: FeedStats,
    connect_timeout: float,  # noqa: ASYNC109
) -> None:
    try:
        ws = await _connect(session, relay, connect_timeout)
    except RelayConnectionError as e:
        stats.relays_failed += 1
        logger.warning("relay_connect_failed relay=%s error=%s", relay.url, e)
        return

    stats.relays_connected += 1
    logger.debug("relay_connected relay=%s", relay.url)

    async with ws:
        try:
            await _consume(ws, relay, subscription, events, stats)
        except RelayConnectionError as e:
            logger.warning("relay_stream_failed relay=%s error=%s", relay.url, e)


async def _connect(
    session: aiohttp.ClientSession,
    relay: Relay,
    connect_timeout: float,  # noqa: ASYNC109
) -> aiohttp.ClientWebSocketResponse:
    """Open a WebSocket to ``relay``.

    Raises:
        RelayConnectionError: On handshake failure or timeout.
    """
    try:
        async with asyncio.timeout(connect_timeout):
            return await session.ws_connect(relay.url)
    except TimeoutError:
        raise RelayConnectionError(relay.url, f"connect timeout after {connect_timeout}s") from None
    except (aiohttp.ClientError, OSError) as e:
        raise RelayConnectionError(relay.url, str(e) or type(e).__name__) from e


async def _consume(
    ws: aiohttp.ClientWebSocketResponse,
    relay: Relay,
    subscription: _Subscription,
    events: list[RawEvent],
    stats: FeedStats,
) -> None:
    """Send the subscription and process messages until the relay is done.

    Raises:
        RelayConnectionError: If the socket errors out mid-stream.
    """
    try:
        await ws.send_str(subscription.request)
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise RelayConnectionError(relay.url, str(ws.exception()))
            if msg.type != aiohttp.WSMsgType.TEXT:
                continue
            if not _handle_message(msg.data, relay, subscription, events, stats):
                with contextlib.suppress(aiohttp.ClientError, OSError):
                    await ws.send_str(json.dumps(["CLOSE", subscription.subscription_id]))
                return
    except (aiohttp.ClientError, OSError) as e:
        raise RelayConnectionError(relay.url, str(e) or type(e).__name__) from e


def _handle_message(
    raw: str,
    relay: Relay,
    subscription: _Subscription,
    events: list[RawEvent],
    stats: FeedStats,
) -> bool:
    """Process one relay message. Returns ``False`` when the relay is done."""
    try:
        message = parse_relay_message(raw)
        if message[0] == "EVENT":
            event = parse_event_message(message)
        elif message[0] == "EOSE":
            logger.debug("relay_eose relay=%s", relay.url)
            return not subscription.stop_on_eose
        elif message[0] == "NOTICE":
            logger.info("relay_notice relay=%s message=%s", relay.url, message[1:])
            return True
        elif message[0] == "CLOSED":
            logger.warning("relay_closed_subscription relay=%s message=%s", relay.url, message[1:])
            return False
        else:
            return True
    except ParseError as e:
        stats.parse_errors += 1
        logger.warning("relay_message_discarded relay=%s error=%s", relay.url, e)
        return True

    if event.kind in subscription.kinds and event.involves(subscription.pubkey):
        events.append(event)
        stats.events_received += 1
        logger.debug("event_collected relay=%s event=%s", relay.url, event.short_id)
    return True
