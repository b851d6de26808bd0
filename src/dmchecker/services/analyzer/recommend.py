"""Advisory text derived from an analysis result."""

from __future__ import annotations

from dmchecker.models import AnalysisResult


NIP44_ADVISORY = (
    "Use clients that support NIP-44: The most secure encryption protocol for Nostr DMs."
)
PROTOCOL_RANKING = (
    "Protocol security ranking: "
    "1. NIP-44 (Most secure) 2. NIP-17 (Improved security) 3. NIP-04 (Basic security)"
)


def recommend(result: AnalysisResult) -> tuple[str, ...]:
    """Return the ordered recommendations for ``result``.

    Always includes the NIP-44 advisory and the protocol ranking. When any
    client was never seen using a secure protocol, a line naming those
    clients (in display order) is inserted between them.
    """
    recommendations = [NIP44_ADVISORY]

    insecure = result.insecure_clients()
    if insecure:
        recommendations.append(f"Consider alternatives to: {', '.join(insecure)}")

    recommendations.append(PROTOCOL_RANKING)
    return tuple(recommendations)
