"""Shared constants for the models layer.

Defines enumerations and other constants used across multiple model
modules. Placing them here avoids circular dependencies between the
models and the layers above.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class NetworkType(StrEnum):
    """Network type enum for relay classification.

    Each relay URL is classified into exactly one network type during
    [Relay][dmchecker.models.relay.Relay] construction.

    Attributes:
        CLEARNET: Public internet relay using ``wss://`` (TLS required).
        TOR: Tor hidden service identified by a ``.onion`` hostname.
        I2P: I2P eepsite identified by a ``.i2p`` hostname.
        LOKI: Lokinet service identified by a ``.loki`` hostname.
        LOCAL: Private or reserved IP address (rejected during validation).
        UNKNOWN: Hostname that could not be classified (rejected during validation).

    Note:
        The relay feed only dials ``CLEARNET`` relays; overlay relays are
        accepted in configuration but skipped at collection time.
    """

    CLEARNET = "clearnet"
    TOR = "tor"
    I2P = "i2p"
    LOKI = "loki"
    LOCAL = "local"
    UNKNOWN = "unknown"


class ServiceName(StrEnum):
    """Canonical service identifiers used in logging."""

    ANALYZER = "analyzer"
    CLI = "cli"


class EventKind(IntEnum):
    """Nostr event kinds relevant to direct messages.

    Attributes:
        LEGACY_DM: Kind 4 -- NIP-04 encrypted direct message.
        ENCRYPTED_GROUP_DM: Kind 14 -- chat message of the encrypted
            group/private DM variant.
    """

    LEGACY_DM = 4
    ENCRYPTED_GROUP_DM = 14


EVENT_KIND_MAX = 65_535

PUBKEY_HEX_LENGTH = 64

UNKNOWN_LABEL = "Unknown"
