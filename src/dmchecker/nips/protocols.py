"""
Encryption protocol detection for Nostr direct messages.

Given an event and the client label already assigned to it, returns a
best-guess protocol label. Labels are either catalog keys (``"NIP-04"``,
``"NIP-44"``, ...) or open-ended guesses (``"NIP-04 (Damus)"``,
``"Likely NIP-44"``, ``"Custom (aes)"``, ``"Encrypted (format unknown)"``).
Only exact catalog keys flagged secure count as secure; see
[is_secure()][dmchecker.models.protocol.is_secure].

Note:
    Every kind 4 event is settled by ``legacy_dm``, so the ``nip44_tag``
    rule that follows it can never fire: a kind 4 event carrying a
    ``nip44`` or ``protocol: NIP-44`` tag is still reported as NIP-04.
    This ordering is the established behaviour and is kept as is until
    product owners decide otherwise.

Examples:
    ```python
    event = RawEvent(id="ab" * 32, pubkey="cd" * 32, kind=4,
                     content="Zm9v?iv=YmFy")
    identify_protocol(event, "Damus")   # 'NIP-04 (Damus)'
    ```
"""

from __future__ import annotations

import re

from dmchecker.models.constants import UNKNOWN_LABEL, EventKind
from dmchecker.models.event import RawEvent, tag_name, tag_value

from .base import DetectionRule, first_match


_BASE64_CONTENT = re.compile(r"[A-Za-z0-9+/=]{10,}")

_NIP44_CONTENT_PREFIX = "nostr:"
_NIP44_CONTENT_MARKERS = ("?iv=", "?ct=")


def _legacy_variant(event: RawEvent, client: str) -> str | None:
    """Client-specific NIP-04 framing, if the client's markers are present."""
    if client == "Damus":
        if event.has_tag("nonce", "d-nonce", "damus"):
            return "NIP-04 (Damus)"
        if "?iv=" in event.content:
            return "NIP-04 (Damus)"

    if client == "Primal":
        primal = any(
            tag_name(tag) == "primal"
            or (tag_name(tag) == "p" and "primal" in (tag_value(tag) or ""))
            for tag in event.tags
        )
        if primal:
            return "NIP-04 (Primal)"

    if client == "Amethyst" and event.has_tag("alt", "amethyst"):
        return "NIP-04 (Amethyst)"
    return None


def detect_legacy_dm(event: RawEvent, client: str) -> str | None:
    """Kind 4 DMs are NIP-04, possibly qualified by the sending client."""
    if event.kind != EventKind.LEGACY_DM:
        return None
    return _legacy_variant(event, client) or "NIP-04"


def detect_nip44_tag(event: RawEvent, _client: str) -> str | None:
    """Kind 4 DMs with a ``nip44`` tag (shadowed by ``legacy_dm``)."""
    if event.kind == EventKind.LEGACY_DM and event.has_tag("nip44"):
        return "NIP-44"
    return None


def detect_group_dm(event: RawEvent, _client: str) -> str | None:
    if event.kind == EventKind.ENCRYPTED_GROUP_DM or event.has_tag("nip24"):
        return "NIP-24"
    return None


def detect_protocol_tag(event: RawEvent, _client: str) -> str | None:
    """Trust an explicit ``protocol`` tag verbatim."""
    tag = event.find_tag("protocol")
    return (tag_value(tag) or None) if tag is not None else None


def detect_encryption_tag(event: RawEvent, _client: str) -> str | None:
    tag = event.find_tag("encryption", "enc", "cipher")
    value = tag_value(tag) if tag is not None else None
    return f"Custom ({value})" if value else None


def detect_content_scheme(event: RawEvent, _client: str) -> str | None:
    content = event.content
    if not content:
        return None
    if content.startswith(_NIP44_CONTENT_PREFIX) or any(
        marker in content for marker in _NIP44_CONTENT_MARKERS
    ):
        return "Likely NIP-44"
    return None


def detect_base64_content(event: RawEvent, _client: str) -> str | None:
    if event.content and _BASE64_CONTENT.fullmatch(event.content):
        return "Encrypted (format unknown)"
    return None


PROTOCOL_RULES: tuple[DetectionRule[str], ...] = (
    DetectionRule("legacy_dm", detect_legacy_dm),
    DetectionRule("nip44_tag", detect_nip44_tag),
    DetectionRule("group_dm", detect_group_dm),
    DetectionRule("protocol_tag", detect_protocol_tag),
    DetectionRule("encryption_tag", detect_encryption_tag),
    DetectionRule("content_scheme", detect_content_scheme),
    DetectionRule("base64_content", detect_base64_content),
)


def identify_protocol(
    event: RawEvent,
    client: str,
    rules: tuple[DetectionRule[str], ...] = PROTOCOL_RULES,
) -> str:
    """Return the best-guess protocol label for ``event``; never raises.

    Args:
        event: The DM event.
        client: Label previously returned by
            [identify_client()][dmchecker.nips.clients.identify_client].

    Returns:
        A protocol label, or ``"Unknown"`` when no rule matches.
    """
    return first_match(rules, event, client, kind="protocol", default=UNKNOWN_LABEL)
