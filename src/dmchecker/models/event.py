"""
Immutable raw Nostr event as received from a relay.

[RawEvent][dmchecker.models.event.RawEvent] is deliberately lenient about
tags: relays forward whatever clients publish, so tag entries may be
short, empty, or carry non-string elements. Such tags are preserved as
received and the classifiers treat them as non-matching. The top-level
shape (id, pubkey, kind, content, tags container) is validated strictly.

No signature or id verification is performed: the analysis is heuristic
and never needs to trust the event.

See Also:
    [dmchecker.nips.clients][]: Client classification rules reading tags.
    [dmchecker.utils.feed][]: Builds events from relay ``EVENT`` messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ._validation import freeze_tags, validate_instance, validate_int, validate_str_no_null


Tag = tuple[Any, ...]


def tag_name(tag: Tag) -> str | None:
    """Return the tag's first element if it is a string, else ``None``."""
    if len(tag) > 0 and isinstance(tag[0], str):
        return tag[0]
    return None


def tag_value(tag: Tag) -> str | None:
    """Return the tag's second element if it is a string, else ``None``."""
    if len(tag) > 1 and isinstance(tag[1], str):
        return tag[1]
    return None


@dataclass(frozen=True, slots=True)
class RawEvent:
    """Immutable Nostr event with lenient tag handling.

    Attributes:
        id: Event id as a hex string.
        pubkey: Author public key as a 64-character hex string.
        kind: Integer event kind (``4`` for NIP-04 DMs).
        tags: Ordered tag records; each an ordered tuple whose first
            element is conventionally the tag name.
        content: Opaque content string, usually ciphertext.
        created_at: Unix timestamp, ``0`` when absent.
        sig: Signature hex string, kept verbatim and never verified.

    Raises:
        TypeError: If a top-level field has the wrong type.

    Examples:
        ```python
        event = RawEvent.from_dict({
            "id": "ab" * 32,
            "pubkey": "cd" * 32,
            "kind": 4,
            "tags": [["p", "ef" * 32], ["client", "damus"]],
            "content": "c2VjcmV0?iv=aXY=",
        })
        event.find_tag("client")   # ('client', 'damus')
        ```
    """

    id: str
    pubkey: str
    kind: int
    tags: tuple[Tag, ...] = field(default=())
    content: str = ""
    created_at: int = 0
    sig: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        validate_str_no_null(self.id, "id")
        validate_str_no_null(self.pubkey, "pubkey")
        validate_int(self.kind, "kind")
        validate_instance(self.content, str, "content")
        validate_int(self.created_at, "created_at")
        validate_instance(self.sig, str, "sig")
        if isinstance(self.tags, str) or not isinstance(self.tags, list | tuple):
            raise TypeError(f"tags must be a list, got {type(self.tags).__name__}")
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    @property
    def short_id(self) -> str:
        """First eight characters of the id, for trace output."""
        return self.id[:8] if self.id else "unknown"

    def find_tag(self, *names: str) -> Tag | None:
        """Return the first tag whose name is one of ``names``."""
        for tag in self.tags:
            if tag_name(tag) in names:
                return tag
        return None

    def has_tag(self, *names: str) -> bool:
        return self.find_tag(*names) is not None

    def is_addressed_to(self, pubkey: str) -> bool:
        """Whether a ``p`` tag references ``pubkey``."""
        return any(tag_name(tag) == "p" and tag_value(tag) == pubkey for tag in self.tags)

    def involves(self, pubkey: str) -> bool:
        """Whether the event is authored by or addressed to ``pubkey``."""
        return self.pubkey == pubkey or self.is_addressed_to(pubkey)

    @classmethod
    def from_dict(cls, data: Any) -> RawEvent:
        """Build an event from a decoded Nostr JSON object.

        Raises:
            TypeError: If ``data`` is not a mapping or a field has the wrong type.
            ValueError: If a required field is missing.
        """
        if not isinstance(data, dict):
            raise TypeError(f"event must be an object, got {type(data).__name__}")
        missing = [key for key in ("id", "pubkey", "kind") if key not in data]
        if missing:
            raise ValueError(f"event is missing {', '.join(missing)}")
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            kind=data["kind"],
            tags=data.get("tags", []),
            content=data.get("content", ""),
            created_at=data.get("created_at", 0),
            sig=data.get("sig", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }
