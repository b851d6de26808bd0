"""Service layer: the analysis pipeline wired to the relay feed.

Services are the top layer of the diamond DAG, depending on
[dmchecker.core][dmchecker.core], [dmchecker.nips][dmchecker.nips],
[dmchecker.utils][dmchecker.utils], and [dmchecker.models][dmchecker.models].
Each service extends [BaseService][dmchecker.core.base_service.BaseService].

Attributes:
    Analyzer: One-shot DM analysis for a single public key: collect from
        relays, classify clients and protocols, aggregate, recommend.

Examples:
    ```python
    from dmchecker.services import Analyzer

    async with Analyzer() as analyzer:
        report = await analyzer.analyze("npub1...")
    ```
"""

from .analyzer import Analyzer, AnalyzerConfig


__all__ = [
    "Analyzer",
    "AnalyzerConfig",
]
