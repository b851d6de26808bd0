"""Pure frozen dataclasses with zero I/O for DM events and analysis results.

The models layer is the foundation of the diamond DAG. It has **no
dependencies** on any other dmchecker package. Every model uses
``@dataclass(frozen=True, slots=True)``; all validation happens in
``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    RawEvent: A Nostr event as received from a relay, with lenient tags.
    Relay: Validated relay URL with network type detection.
    ProtocolInfo: Display metadata and security flag for a protocol label.
    ClientStats: Per-client usage counts and monotone security flag.
    AnalysisResult: Totals and per-client statistics of one run.
    AnalysisReport: Result plus recommendations and feed counters.
"""

from .constants import (
    EVENT_KIND_MAX,
    PUBKEY_HEX_LENGTH,
    UNKNOWN_LABEL,
    EventKind,
    NetworkType,
    ServiceName,
)
from .event import RawEvent, Tag, tag_name, tag_value
from .protocol import PROTOCOL_CATALOG, ProtocolInfo, get_protocol_info, is_secure
from .relay import Relay
from .stats import AnalysisReport, AnalysisResult, ClientStats


__all__ = [
    "EVENT_KIND_MAX",
    "PROTOCOL_CATALOG",
    "PUBKEY_HEX_LENGTH",
    "UNKNOWN_LABEL",
    "AnalysisReport",
    "AnalysisResult",
    "ClientStats",
    "EventKind",
    "NetworkType",
    "ProtocolInfo",
    "RawEvent",
    "Relay",
    "ServiceName",
    "Tag",
    "get_protocol_info",
    "is_secure",
    "tag_name",
    "tag_value",
]
