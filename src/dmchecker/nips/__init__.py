"""Heuristic classification of Nostr DM events.

Attributes:
    base: [DetectionRule][dmchecker.nips.base.DetectionRule] and the
        first-match evaluator shared by both classifiers.
    clients: Which application produced a DM
        ([identify_client()][dmchecker.nips.clients.identify_client]).
    protocols: Which encryption scheme a DM used
        ([identify_protocol()][dmchecker.nips.protocols.identify_protocol]).

Note:
    Classification is inference only. No content is decrypted and no
    signature is checked.
"""

from .base import DetectionRule, first_match
from .clients import CLIENT_RULES, identify_client
from .protocols import PROTOCOL_RULES, identify_protocol


__all__ = [
    "CLIENT_RULES",
    "PROTOCOL_RULES",
    "DetectionRule",
    "first_match",
    "identify_client",
    "identify_protocol",
]
