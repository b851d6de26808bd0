"""Folding classified DMs into an [AnalysisResult][dmchecker.models.stats.AnalysisResult].

Each step returns a new result; the input is never modified. Counts do
not depend on the order events are folded in, only the first-seen order
of the client and protocol mappings does.
"""

from __future__ import annotations

from collections.abc import Iterable

from dmchecker.models import AnalysisResult, ClientStats, RawEvent, is_secure


Classified = tuple[RawEvent, str, str]


def fold(result: AnalysisResult, event: RawEvent, client: str, protocol: str) -> AnalysisResult:
    """Add one classified DM to ``result``.

    Args:
        result: Statistics accumulated so far.
        event: The DM event (kept for symmetry with the classifiers; the
            counts only depend on the labels).
        client: Client label from
            [identify_client()][dmchecker.nips.clients.identify_client].
        protocol: Protocol label from
            [identify_protocol()][dmchecker.nips.protocols.identify_protocol].

    Returns:
        A new result with ``total_dms`` incremented, the secure or insecure
        counter incremented, and the client's stats updated. A client's
        ``secure`` flag is set by its first secure DM and never cleared.
    """
    secure = is_secure(protocol)

    previous = result.clients.get(client) or ClientStats(name=client)
    protocols = dict(previous.protocols)
    protocols[protocol] = protocols.get(protocol, 0) + 1
    updated = ClientStats(
        name=client,
        count=previous.count + 1,
        protocols=protocols,
        secure=previous.secure or secure,
    )

    clients = dict(result.clients)
    clients[client] = updated

    return AnalysisResult(
        total_dms=result.total_dms + 1,
        secure_dms=result.secure_dms + (1 if secure else 0),
        insecure_dms=result.insecure_dms + (0 if secure else 1),
        clients=clients,
    )


def aggregate(classified: Iterable[Classified]) -> AnalysisResult:
    """Fold every ``(event, client, protocol)`` triple, starting from empty."""
    result = AnalysisResult.empty()
    for event, client, protocol in classified:
        result = fold(result, event, client, protocol)
    return result
