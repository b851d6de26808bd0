"""
Catalog of known DM encryption protocols.

The catalog is the single source of truth for whether a protocol label
counts as secure. Matching is exact: labels produced by the heuristic
classifier that are not catalog keys (``"NIP-04 (Damus)"``,
``"Likely NIP-44"``, ``"Custom (aes)"``, ``"NIP-24"``, ...) are reported
as unknown and counted as insecure. Extending the catalog is the only way
to change that.

See Also:
    [dmchecker.nips.protocols][]: Produces the labels looked up here.
    [dmchecker.services.analyzer.aggregate][]: Uses
        [is_secure()][dmchecker.models.protocol.is_secure] to split totals.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class ProtocolInfo:
    """Display metadata for a protocol label.

    Attributes:
        name: Display name.
        description: One-line description shown next to the name.
        secure: Whether DMs using this protocol count as secure.
    """

    name: str
    description: str
    secure: bool


PROTOCOL_CATALOG: Mapping[str, ProtocolInfo] = MappingProxyType(
    {
        "NIP-04": ProtocolInfo("NIP-04", "Basic encryption (less secure)", secure=False),
        "NIP-17": ProtocolInfo("NIP-17", "Improved encryption with nonce", secure=True),
        "NIP-44": ProtocolInfo("NIP-44", "Modern encryption with forward secrecy", secure=True),
        "Unknown": ProtocolInfo("Unknown", "Could not determine encryption protocol", secure=False),
    }
)


def get_protocol_info(label: str) -> ProtocolInfo:
    """Return catalog metadata for ``label``, or an insecure placeholder."""
    info = PROTOCOL_CATALOG.get(label)
    if info is None:
        return ProtocolInfo(label, "Unknown protocol", secure=False)
    return info


def is_secure(label: str) -> bool:
    """Whether ``label`` is exactly a catalog key flagged secure."""
    info = PROTOCOL_CATALOG.get(label)
    return info is not None and info.secure
