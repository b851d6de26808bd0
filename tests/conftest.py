"""
Pytest configuration and shared fixtures for dmchecker tests.

Provides:
- Well-known public keys (NIP-19 test vector)
- A RawEvent factory with sensible defaults
- Sample DM events covering the main client/protocol combinations
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest

from dmchecker.models import RawEvent


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Keys
# ============================================================================

# NIP-19 test vector
NPUB = "npub180cvv07tjdrrgpa0j7j7tmnyl2yr6yr7l8j4s3evf6u64th6gkwsyjh6w6"
PUBKEY_HEX = "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d"

OTHER_PUBKEY = "b" * 64


@pytest.fixture
def pubkey() -> str:
    return PUBKEY_HEX


@pytest.fixture
def npub() -> str:
    return NPUB


# ============================================================================
# Events
# ============================================================================

EventFactory = Callable[..., RawEvent]


@pytest.fixture
def make_event() -> EventFactory:
    """Build a RawEvent; unspecified fields get neutral defaults."""
    counter = 0

    def factory(
        kind: int = 4,
        tags: list[Any] | None = None,
        content: str = "",
        pubkey: str = OTHER_PUBKEY,
        **kwargs: Any,
    ) -> RawEvent:
        nonlocal counter
        counter += 1
        return RawEvent(
            id=kwargs.pop("id", f"{counter:064x}"),
            pubkey=pubkey,
            kind=kind,
            tags=tags if tags is not None else [],
            content=content,
            **kwargs,
        )

    return factory


@pytest.fixture
def damus_event(make_event: EventFactory) -> RawEvent:
    """Kind 4 DM from Damus with the classic ?iv= ciphertext."""
    return make_event(
        tags=[["p", PUBKEY_HEX], ["client", "damus/1.2"]],
        content="abc?iv=xyz",
    )


@pytest.fixture
def group_event(make_event: EventFactory) -> RawEvent:
    """Kind 14 group DM without any markers."""
    return make_event(kind=14)


@pytest.fixture
def event_dict() -> dict[str, Any]:
    """A raw relay event object as decoded from JSON."""
    return {
        "id": "ab" * 32,
        "pubkey": OTHER_PUBKEY,
        "created_at": 1700000000,
        "kind": 4,
        "tags": [["p", PUBKEY_HEX], ["client", "Amethyst"]],
        "content": "c2VjcmV0bWVzc2FnZQ==?iv=aXZpdml2aXZpdg==",
        "sig": "cd" * 64,
    }
