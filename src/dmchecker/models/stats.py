"""
Aggregate statistics produced by one analysis run.

Both models are frozen and hold read-only mappings, so a result handed
to a caller cannot be modified. New results are derived with
[fold()][dmchecker.services.analyzer.aggregate.fold].

Mappings keep first-seen insertion order; display order (descending
count, ties by first seen) is computed on demand by
[AnalysisResult.sorted_clients()][dmchecker.models.stats.AnalysisResult.sorted_clients].
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ._validation import deep_freeze, validate_count, validate_mapping, validate_str_no_null


def _percentage(part: int, total: int) -> int:
    """Percentage rounded half up (12.5 -> 13), 0 when ``total`` is 0."""
    return math.floor(part / total * 100 + 0.5) if total > 0 else 0


@dataclass(frozen=True, slots=True)
class ClientStats:
    """Usage statistics for one client label.

    Attributes:
        name: Client label.
        count: Number of DMs attributed to the client.
        protocols: Protocol label -> number of DMs, in first-seen order.
        secure: True once any DM from this client used a secure protocol.
    """

    name: str
    count: int = 0
    protocols: Mapping[str, int] = field(default_factory=dict)
    secure: bool = False

    def __post_init__(self) -> None:
        validate_str_no_null(self.name, "name")
        validate_count(self.count, "count")
        validate_mapping(self.protocols, "protocols")
        object.__setattr__(self, "protocols", deep_freeze(self.protocols))

    def sorted_protocols(self) -> list[tuple[str, int]]:
        """Protocols by descending usage, ties in first-seen order."""
        return sorted(self.protocols.items(), key=lambda item: -item[1])

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "protocols": dict(self.protocols),
            "secure": self.secure,
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Totals and per-client statistics for an analysis run.

    Attributes:
        total_dms: Number of DM events analyzed.
        secure_dms: DMs whose protocol is flagged secure.
        insecure_dms: All other DMs, including unknown protocols.
        clients: Client label -> [ClientStats][dmchecker.models.stats.ClientStats].

    Raises:
        ValueError: If a count is negative or
            ``total_dms != secure_dms + insecure_dms``.
    """

    total_dms: int = 0
    secure_dms: int = 0
    insecure_dms: int = 0
    clients: Mapping[str, ClientStats] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_count(self.total_dms, "total_dms")
        validate_count(self.secure_dms, "secure_dms")
        validate_count(self.insecure_dms, "insecure_dms")
        if self.total_dms != self.secure_dms + self.insecure_dms:
            raise ValueError(
                f"total_dms ({self.total_dms}) must equal secure_dms + insecure_dms "
                f"({self.secure_dms} + {self.insecure_dms})"
            )
        validate_mapping(self.clients, "clients")
        object.__setattr__(self, "clients", MappingProxyType(dict(self.clients)))

    @classmethod
    def empty(cls) -> AnalysisResult:
        return cls()

    @property
    def secure_percentage(self) -> int:
        return _percentage(self.secure_dms, self.total_dms)

    @property
    def insecure_percentage(self) -> int:
        return _percentage(self.insecure_dms, self.total_dms)

    def client_share(self, name: str) -> int:
        """Rounded percentage of all DMs attributed to client ``name``."""
        stats = self.clients.get(name)
        return _percentage(stats.count, self.total_dms) if stats else 0

    def sorted_clients(self) -> list[ClientStats]:
        """Clients by descending count; ties keep first-seen order."""
        return sorted(self.clients.values(), key=lambda stats: -stats.count)

    def insecure_clients(self) -> list[str]:
        """Names of clients never seen using a secure protocol, in display order."""
        return [stats.name for stats in self.sorted_clients() if not stats.secure]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_dms": self.total_dms,
            "secure_dms": self.secure_dms,
            "insecure_dms": self.insecure_dms,
            "secure_percentage": self.secure_percentage,
            "insecure_percentage": self.insecure_percentage,
            "clients": [stats.to_dict() for stats in self.sorted_clients()],
        }


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Everything an analysis run hands to the presentation layer.

    Attributes:
        identity: Hex public key that was analyzed.
        result: Aggregated statistics.
        recommendations: Ordered advisory strings.
        relays_connected: Relays that accepted the subscription.
        relays_failed: Relays that could not be reached.
        events_received: DM events collected, duplicates included.
        parse_errors: Relay messages discarded as malformed.
    """

    identity: str
    result: AnalysisResult
    recommendations: tuple[str, ...] = ()
    relays_connected: int = 0
    relays_failed: int = 0
    events_received: int = 0
    parse_errors: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "relays_connected": self.relays_connected,
            "relays_failed": self.relays_failed,
            "events_received": self.events_received,
            "parse_errors": self.parse_errors,
            **self.result.to_dict(),
            "recommendations": list(self.recommendations),
        }
