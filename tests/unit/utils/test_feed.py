"""
Unit tests for utils.feed module.

Tests:
- Filter and REQ construction
- Relay message parsing and ParseError reporting
- collect_dm_events() fan-out over a fake aiohttp session:
  event filtering, duplicates, per-relay failures, EOSE/CLOSED handling,
  window expiry, socket cleanup, total unavailability
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp
import pytest

from dmchecker.core.exceptions import FeedUnavailableError, ParseError
from dmchecker.models import Relay
from dmchecker.utils.feed import (
    FeedResult,
    build_dm_filters,
    build_request,
    collect_dm_events,
    parse_event_message,
    parse_relay_message,
)


OTHER = "b" * 64

RELAY_A = Relay("wss://relay-a.example.com")
RELAY_B = Relay("wss://relay-b.example.com")
RELAY_C = Relay("wss://relay-c.example.com")


# ============================================================================
# Fakes
# ============================================================================


@dataclass
class FakeMessage:
    type: aiohttp.WSMsgType
    data: Any = None


class FakeWebSocket:
    """Scripted WebSocket: yields ``messages`` then optionally blocks forever."""

    def __init__(
        self,
        messages: list[str | FakeMessage] | None = None,
        *,
        hang: bool = False,
        error: BaseException | None = None,
    ) -> None:
        self.messages = messages or []
        self.hang = hang
        self.error = error
        self.sent: list[str] = []
        self.closed = False

    async def send_str(self, data: str) -> None:
        self.sent.append(data)

    def exception(self) -> BaseException | None:
        return self.error

    def __aiter__(self) -> Any:
        return self._iterate()

    async def _iterate(self) -> Any:
        for message in self.messages:
            if isinstance(message, FakeMessage):
                yield message
            else:
                yield FakeMessage(aiohttp.WSMsgType.TEXT, message)
        if self.hang:
            await asyncio.Event().wait()

    async def __aenter__(self) -> FakeWebSocket:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        self.closed = True


class FakeSession:
    """Maps relay URLs to sockets, exceptions, or a hanging handshake."""

    def __init__(self, targets: dict[str, FakeWebSocket | BaseException | None]) -> None:
        self.targets = targets
        self.dialed: list[str] = []

    async def ws_connect(self, url: str) -> FakeWebSocket:
        self.dialed.append(url)
        target = self.targets[url]
        if target is None:
            await asyncio.sleep(3600)
        if isinstance(target, BaseException):
            raise target
        assert isinstance(target, FakeWebSocket)
        return target


def event_msg(event_id: str, *, pubkey: str = OTHER, kind: int = 4, p: str | None = None) -> str:
    tags = [["p", p]] if p else []
    event = {"id": event_id, "pubkey": pubkey, "kind": kind, "tags": tags, "content": "x"}
    return json.dumps(["EVENT", "sub", event])


EOSE = json.dumps(["EOSE", "sub"])


async def collect(session: FakeSession, pubkey: str, relays: list[Relay], **kwargs: Any) -> FeedResult:
    kwargs.setdefault("window", 1.0)
    kwargs.setdefault("stop_on_eose", True)
    return await collect_dm_events(pubkey, relays, session=session, **kwargs)  # type: ignore[arg-type]


# ============================================================================
# Wire format
# ============================================================================


class TestBuildFilters:
    """nostr-sdk filter construction."""

    def test_inbound_and_outbound(self, pubkey: str) -> None:
        inbound, outbound = build_dm_filters(pubkey, [4])
        assert inbound == {"kinds": [4], "#p": [pubkey]}
        assert outbound == {"kinds": [4], "authors": [pubkey]}

    def test_multiple_kinds(self, pubkey: str) -> None:
        inbound, _ = build_dm_filters(pubkey, [4, 14])
        assert sorted(inbound["kinds"]) == [4, 14]

    def test_request(self, pubkey: str) -> None:
        request = json.loads(build_request("sub_1", build_dm_filters(pubkey, [4])))
        assert request[0] == "REQ"
        assert request[1] == "sub_1"
        assert len(request) == 4


class TestParseRelayMessage:
    """Relay-to-client message decoding."""

    def test_valid(self) -> None:
        assert parse_relay_message(EOSE) == ["EOSE", "sub"]

    @pytest.mark.parametrize("raw", ["not json", "{}", "[]", "[1, 2]", '"EVENT"'])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(ParseError):
            parse_relay_message(raw)

    def test_event(self, pubkey: str) -> None:
        event = parse_event_message(json.loads(event_msg("e1", p=pubkey)))
        assert event.id == "e1"
        assert event.is_addressed_to(pubkey)

    @pytest.mark.parametrize(
        "message",
        [
            ["EVENT", "sub"],
            ["EVENT", "sub", "not an object"],
            ["EVENT", "sub", {"id": "e1", "pubkey": OTHER}],
            ["EVENT", "sub", {"id": "e1", "pubkey": OTHER, "kind": "4"}],
            ["EVENT", "sub", {"id": "e1", "pubkey": OTHER, "kind": 4, "tags": "p"}],
        ],
    )
    def test_malformed_event(self, message: list[Any]) -> None:
        with pytest.raises(ParseError):
            parse_event_message(message)


# ============================================================================
# Collection
# ============================================================================


class TestCollect:
    """Fan-out over relays."""

    async def test_collects_inbound_and_outbound(self, pubkey: str) -> None:
        ws = FakeWebSocket([event_msg("in", p=pubkey), event_msg("out", pubkey=pubkey), EOSE])
        session = FakeSession({RELAY_A.url: ws})

        result = await collect(session, pubkey, [RELAY_A])

        assert [e.id for e in result.events] == ["in", "out"]
        assert result.stats.events_received == 2
        assert result.stats.relays_connected == 1

    async def test_sends_subscription(self, pubkey: str) -> None:
        ws = FakeWebSocket([EOSE])
        await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])

        request = json.loads(ws.sent[0])
        assert request[0] == "REQ"
        assert request[1].startswith("sub_")
        assert request[2:] == [
            {"kinds": [4], "#p": [pubkey]},
            {"kinds": [4], "authors": [pubkey]},
        ]

    async def test_close_sent_after_eose(self, pubkey: str) -> None:
        ws = FakeWebSocket([EOSE], hang=True)
        await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])

        subscription_id = json.loads(ws.sent[0])[1]
        assert json.loads(ws.sent[-1]) == ["CLOSE", subscription_id]

    async def test_unrelated_events_dropped(self, pubkey: str) -> None:
        ws = FakeWebSocket(
            [
                event_msg("wrong-kind", p=pubkey, kind=1),
                event_msg("stranger", pubkey=OTHER, p=OTHER),
                event_msg("ok", p=pubkey),
                EOSE,
            ]
        )
        result = await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])
        assert [e.id for e in result.events] == ["ok"]

    async def test_duplicates_across_relays_kept(self, pubkey: str) -> None:
        session = FakeSession(
            {
                RELAY_A.url: FakeWebSocket([event_msg("same", p=pubkey), EOSE]),
                RELAY_B.url: FakeWebSocket([event_msg("same", p=pubkey), EOSE]),
            }
        )
        result = await collect(session, pubkey, [RELAY_A, RELAY_B])
        assert [e.id for e in result.events] == ["same", "same"]

    async def test_parse_errors_counted_and_skipped(
        self, pubkey: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        ws = FakeWebSocket(
            [
                "garbage",
                "{}",
                json.dumps(["EVENT", "sub", {"id": "x"}]),
                event_msg("ok", p=pubkey),
                EOSE,
            ]
        )
        with caplog.at_level(logging.WARNING, logger="dmchecker.utils.feed"):
            result = await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])

        assert result.stats.parse_errors == 3
        assert [e.id for e in result.events] == ["ok"]
        assert any("relay_message_discarded" in r.getMessage() for r in caplog.records)

    async def test_notice_and_unknown_messages_ignored(self, pubkey: str) -> None:
        ws = FakeWebSocket(
            [
                json.dumps(["NOTICE", "rate limited"]),
                json.dumps(["AUTH", "challenge"]),
                event_msg("ok", p=pubkey),
                EOSE,
            ]
        )
        result = await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])
        assert [e.id for e in result.events] == ["ok"]
        assert result.stats.parse_errors == 0

    async def test_closed_ends_relay(self, pubkey: str) -> None:
        ws = FakeWebSocket(
            [json.dumps(["CLOSED", "sub", "blocked"]), event_msg("late", p=pubkey)], hang=True
        )
        result = await collect(
            FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A], stop_on_eose=False
        )
        assert result.events == ()
        assert ws.closed


class TestFailures:
    """Per-relay failures and total unavailability."""

    async def test_one_relay_failing_is_not_fatal(self, pubkey: str) -> None:
        session = FakeSession(
            {
                RELAY_A.url: aiohttp.ClientConnectionError("refused"),
                RELAY_B.url: OSError("unreachable"),
                RELAY_C.url: FakeWebSocket([event_msg("ok", p=pubkey), EOSE]),
            }
        )
        result = await collect(session, pubkey, [RELAY_A, RELAY_B, RELAY_C])

        assert result.stats.relays_failed == 2
        assert result.stats.relays_connected == 1
        assert [e.id for e in result.events] == ["ok"]

    async def test_connect_timeout(self, pubkey: str) -> None:
        session = FakeSession(
            {RELAY_A.url: None, RELAY_B.url: FakeWebSocket([EOSE])}
        )
        result = await collect(session, pubkey, [RELAY_A, RELAY_B], connect_timeout=0.01)
        assert result.stats.relays_failed == 1
        assert result.stats.relays_connected == 1

    async def test_all_relays_failing(self, pubkey: str) -> None:
        session = FakeSession(
            {
                RELAY_A.url: aiohttp.ClientConnectionError("refused"),
                RELAY_B.url: aiohttp.ClientConnectionError("refused"),
            }
        )
        with pytest.raises(FeedUnavailableError):
            await collect(session, pubkey, [RELAY_A, RELAY_B])

    async def test_stream_error_keeps_collected_events(self, pubkey: str) -> None:
        ws = FakeWebSocket(
            [event_msg("ok", p=pubkey), FakeMessage(aiohttp.WSMsgType.ERROR)],
            error=ConnectionResetError("reset"),
        )
        result = await collect(FakeSession({RELAY_A.url: ws}), pubkey, [RELAY_A])

        assert [e.id for e in result.events] == ["ok"]
        assert result.stats.relays_connected == 1
        assert result.stats.relays_failed == 0
        assert ws.closed

    async def test_overlay_relays_skipped(self, pubkey: str) -> None:
        tor = Relay("ws://abcdefghijklmnop.onion")
        session = FakeSession({RELAY_A.url: FakeWebSocket([EOSE])})

        result = await collect(session, pubkey, [tor, RELAY_A])

        assert session.dialed == [RELAY_A.url]
        assert result.stats.relays_skipped == 1

    async def test_only_overlay_relays(self, pubkey: str) -> None:
        session = FakeSession({})
        with pytest.raises(FeedUnavailableError, match="clearnet"):
            await collect(session, pubkey, [Relay("ws://relay.i2p")])
        assert session.dialed == []


class TestWindow:
    """Shared deadline."""

    async def test_window_expiry_returns_collected_events(self, pubkey: str) -> None:
        a = FakeWebSocket([event_msg("a1", p=pubkey), EOSE], hang=True)
        b = FakeWebSocket([event_msg("b1", p=pubkey)], hang=True)
        session = FakeSession({RELAY_A.url: a, RELAY_B.url: b})

        result = await collect(session, pubkey, [RELAY_A, RELAY_B], window=0.05, stop_on_eose=False)

        assert sorted(e.id for e in result.events) == ["a1", "b1"]
        assert a.closed
        assert b.closed

    async def test_window_bounds_hanging_handshake(self, pubkey: str) -> None:
        session = FakeSession({RELAY_A.url: None})
        with pytest.raises(FeedUnavailableError):
            await collect(session, pubkey, [RELAY_A], window=0.05, connect_timeout=10.0)
