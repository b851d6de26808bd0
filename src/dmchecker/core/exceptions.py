"""dmchecker exception hierarchy.

Separates the errors that end an analysis run from the ones that are
recorded and skipped.

Exception hierarchy:

```text
DmCheckerError (base -- never raised directly)
├── ConfigurationError         -- config validation, bad YAML
├── IdentityError              -- fatal: caller-supplied identity rejected
│   ├── InvalidFormatError     -- not a 64-hex key or npub1 address
│   └── InvalidCharacterError  -- symbol outside the bech32 alphabet
├── ConnectivityError          -- relay/network failures
│   ├── RelayConnectionError   -- non-fatal: one relay contributes nothing
│   └── FeedUnavailableError   -- fatal: no relay could be reached
└── ParseError                 -- non-fatal: malformed relay message
```

Only ``IdentityError`` and ``FeedUnavailableError`` reach the caller of
[Analyzer.analyze()][dmchecker.services.analyzer.Analyzer.analyze];
``RelayConnectionError`` and ``ParseError`` are logged by the feed and the
run continues. Classifier rules never raise: malformed tags are non-matches.
"""

from __future__ import annotations


class DmCheckerError(Exception):
    """Base exception for all dmchecker errors.

    Never raised directly -- always use a specific subclass.
    """


class ConfigurationError(DmCheckerError):
    """Invalid or missing configuration (YAML, CLI flags)."""


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class IdentityError(DmCheckerError, ValueError):
    """Base for identity validation failures raised before any relay is contacted."""


class InvalidFormatError(IdentityError):
    """Identity is neither a 64-character hex key nor an ``npub1`` address."""


class InvalidCharacterError(IdentityError):
    """An ``npub1`` address contains a character outside the bech32 alphabet.

    Attributes:
        character: The offending character.
        position: Index of the character within the address.
    """

    def __init__(self, character: str, position: int) -> None:
        super().__init__(f"Invalid character {character!r} at position {position}")
        self.character = character
        self.position = position


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(DmCheckerError):
    """Base for all relay/network connectivity errors."""


class RelayConnectionError(ConnectivityError):
    """A single relay could not be reached or dropped the connection.

    Attributes:
        relay_url: URL of the relay that failed.
    """

    def __init__(self, relay_url: str, reason: str) -> None:
        super().__init__(f"{relay_url}: {reason}")
        self.relay_url = relay_url


class FeedUnavailableError(ConnectivityError):
    """None of the configured relays could be reached."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseError(DmCheckerError):
    """A relay sent a message that is not valid Nostr JSON."""
