"""
Client detection for Nostr direct messages.

Infers which application produced a DM from its tags, its content and its
author. The rules run in a fixed order of decreasing confidence:

1. ``client_tag`` -- an explicit ``client`` tag.
2. ``tag_fingerprint`` -- a client name embedded in any tag name or value.
3. ``tag_shape`` -- tag names some clients are known to attach.
4. ``content_signature`` -- a ``"sent from <client>"`` phrase in the content.
5. ``known_pubkey`` -- the author is a known official client account.

Nothing here is authoritative: tags are self-reported by the sending
client and content is usually ciphertext, so results are best guesses.

Examples:
    ```python
    event = RawEvent(id="ab" * 32, pubkey="cd" * 32, kind=4,
                     tags=[["client", "Damus/1.2"]])
    identify_client(event)   # 'Damus'
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from dmchecker.models.constants import UNKNOWN_LABEL
from dmchecker.models.event import RawEvent, tag_name, tag_value

from .base import DetectionRule, first_match


# Substring -> label, checked in this order against a lower-cased client tag
KNOWN_CLIENTS: tuple[tuple[str, str], ...] = (
    ("damus", "Damus"),
    ("primal", "Primal"),
    ("amethyst", "Amethyst"),
    ("snort", "Snort"),
    ("iris", "Iris"),
    ("coracle", "Coracle"),
    ("nostros", "Nostros"),
    ("current", "Current"),
    ("nos2x", "nos2x"),
    ("gossip", "Gossip"),
)

CONTENT_SIGNATURES: tuple[tuple[str, str], ...] = (
    ("sent from damus", "Damus"),
    ("sent from primal", "Primal"),
    ("sent from amethyst", "Amethyst"),
    ("sent from snort", "Snort"),
    ("sent from iris", "Iris"),
)

KNOWN_CLIENT_PUBKEYS: Mapping[str, str] = MappingProxyType(
    {
        "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d": "Damus",
        "32e1827635450ebb3c5a7d12c1f8e7b2b514439ac10a67eef3d9fd9c5c68e245": "Primal",
    }
)

_DAMUS_TAG_NAMES = frozenset({"damus", "d-nonce", "nonce"})


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def detect_client_tag(event: RawEvent, _context: None = None) -> str | None:
    """Map the first ``client`` tag to a known label, or echo it capitalized.

    A value whose name part is empty (``"/1.0"``) yields ``None`` so the
    later rules still get a chance; an empty label is never reported.
    """
    tag = event.find_tag("client")
    value = tag_value(tag) if tag is not None else None
    if not value:
        return None

    client = value.lower()
    for needle, label in KNOWN_CLIENTS:
        if needle in client:
            return label

    # "name/version" style tags
    name = client.split("/")[0]
    return _capitalize(name) if name else None


def detect_tag_fingerprint(event: RawEvent, _context: None = None) -> str | None:
    """Look for ``primal``/``damus`` in any tag name or value, tag by tag."""
    for tag in event.tags:
        name = tag_name(tag)
        if name:
            name = name.lower()
            if "primal" in name:
                return "Primal"
            if name in _DAMUS_TAG_NAMES:
                return "Damus"

        value = tag_value(tag)
        if value:
            value = value.lower()
            if "primal" in value:
                return "Primal"
            if "damus" in value:
                return "Damus"
    return None


def detect_tag_shape(event: RawEvent, _context: None = None) -> str | None:
    """Recognize tag layouts typical of Damus and Primal."""

    def value_contains(tag: tuple[object, ...], needle: str) -> bool:
        value = tag_value(tag)
        return value is not None and needle in value

    damus = any(
        tag_name(tag) in ("nonce", "d", "damus")
        or (tag_name(tag) in ("client", "proxy") and value_contains(tag, "damus"))
        for tag in event.tags
    )
    if damus:
        return "Damus"

    primal = any(
        tag_name(tag) == "primal"
        or (tag_name(tag) in ("client", "proxy", "p") and value_contains(tag, "primal"))
        for tag in event.tags
    )
    if primal:
        return "Primal"
    return None


def detect_content_signature(event: RawEvent, _context: None = None) -> str | None:
    """Match ``"sent from <client>"`` phrases, case-insensitively."""
    if not event.content:
        return None
    content = event.content.lower()
    for phrase, label in CONTENT_SIGNATURES:
        if phrase in content:
            return label
    return None


def detect_known_pubkey(event: RawEvent, _context: None = None) -> str | None:
    """Attribute DMs authored by official client accounts."""
    return KNOWN_CLIENT_PUBKEYS.get(event.pubkey)


CLIENT_RULES: tuple[DetectionRule[None], ...] = (
    DetectionRule("client_tag", detect_client_tag),
    DetectionRule("tag_fingerprint", detect_tag_fingerprint),
    DetectionRule("tag_shape", detect_tag_shape),
    DetectionRule("content_signature", detect_content_signature),
    DetectionRule("known_pubkey", detect_known_pubkey),
)


def identify_client(
    event: RawEvent,
    rules: tuple[DetectionRule[None], ...] = CLIENT_RULES,
) -> str:
    """Return the best-guess client label for ``event``; never raises.

    Returns:
        A client label, or ``"Unknown"`` when no rule matches.
    """
    return first_match(rules, event, None, kind="client", default=UNKNOWN_LABEL)
