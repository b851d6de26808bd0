"""Analyzer service for dmchecker.

Collects a user's direct messages from relays and reports which clients
sent them and how they were encrypted.

The pipeline is:

1. Validate the caller's identity (hex or ``npub1``) before any network
   activity ([normalize_identity()][dmchecker.utils.keys.normalize_identity]).
2. Collect DM events from the configured relays for a bounded window
   ([collect_dm_events()][dmchecker.utils.feed.collect_dm_events]).
3. Classify each event's client, then its protocol.
4. Fold the classifications into an
   [AnalysisResult][dmchecker.models.stats.AnalysisResult].
5. Derive recommendations.

Note:
    A run either yields a complete
    [AnalysisReport][dmchecker.models.stats.AnalysisReport] or raises.
    Per-relay and per-message failures are absorbed by the feed; only an
    invalid identity or a feed with no reachable relay abort the run.

See Also:
    [AnalyzerConfig][dmchecker.services.analyzer.AnalyzerConfig]: Relay
        list, kinds and timeouts.
    [dmchecker.nips][dmchecker.nips]: The client and protocol classifiers.

Examples:
    ```python
    from dmchecker.services import Analyzer

    analyzer = Analyzer.from_yaml("config/analyzer.yaml")
    async with analyzer:
        report = await analyzer.analyze("npub1...")
    print(report.result.secure_percentage)
    ```
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, ClassVar

from dmchecker.core.base_service import BaseService
from dmchecker.models import AnalysisReport, AnalysisResult, RawEvent, ServiceName
from dmchecker.nips import identify_client, identify_protocol
from dmchecker.utils.feed import collect_dm_events
from dmchecker.utils.keys import normalize_identity

from .aggregate import Classified, aggregate
from .configs import AnalyzerConfig
from .recommend import recommend


if TYPE_CHECKING:
    import aiohttp


class Analyzer(BaseService[AnalyzerConfig]):
    """DM client and encryption protocol analyzer.

    The synchronous half ([classify()][dmchecker.services.analyzer.Analyzer.classify],
    [analyze_events()][dmchecker.services.analyzer.Analyzer.analyze_events])
    works on events from any source. [analyze()][dmchecker.services.analyzer.Analyzer.analyze]
    adds the relay feed in front of it.
    """

    SERVICE_NAME: ClassVar[ServiceName] = ServiceName.ANALYZER
    CONFIG_CLASS: ClassVar[type[AnalyzerConfig]] = AnalyzerConfig

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(config=config)
        self._session = session

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def classify(self, event: RawEvent) -> tuple[str, str]:
        """Return ``(client, protocol)`` labels for one event."""
        client = identify_client(event)
        protocol = identify_protocol(event, client)
        self._logger.debug(
            "event_classified", event=event.short_id, client=client, protocol=protocol
        )
        return client, protocol

    def _classified(self, events: Iterable[RawEvent]) -> Iterator[Classified]:
        for event in events:
            client, protocol = self.classify(event)
            yield event, client, protocol

    def analyze_events(self, events: Iterable[RawEvent]) -> AnalysisResult:
        """Classify and aggregate already collected events."""
        return aggregate(self._classified(events))

    # -------------------------------------------------------------------------
    # Full Run
    # -------------------------------------------------------------------------

    async def analyze(self, identity: str) -> AnalysisReport:
        """Analyze the DMs of ``identity`` as seen on the configured relays.

        Args:
            identity: 64-character hex public key or ``npub1`` address.

        Returns:
            The complete [AnalysisReport][dmchecker.models.stats.AnalysisReport].

        Raises:
            InvalidFormatError: If ``identity`` is not a valid key.
            InvalidCharacterError: If an ``npub1`` address has a bad symbol.
            FeedUnavailableError: If no relay could be connected.
        """
        pubkey = normalize_identity(identity)
        log = self._logger.bind(pubkey=pubkey)
        log.info(
            "analysis_started",
            relays=len(self._config.relays),
            window_s=self._config.timeouts.window,
        )
        start_time = time.monotonic()

        feed = await collect_dm_events(
            pubkey,
            self._config.relay_models(),
            kinds=self._config.kinds,
            window=self._config.timeouts.window,
            connect_timeout=self._config.timeouts.connect,
            stop_on_eose=self._config.stop_on_eose,
            session=self._session,
        )

        result = self.analyze_events(feed.events)
        report = AnalysisReport(
            identity=pubkey,
            result=result,
            recommendations=recommend(result),
            relays_connected=feed.stats.relays_connected,
            relays_failed=feed.stats.relays_failed,
            events_received=feed.stats.events_received,
            parse_errors=feed.stats.parse_errors,
        )

        log.info(
            "analysis_completed",
            total_dms=result.total_dms,
            secure_dms=result.secure_dms,
            insecure_dms=result.insecure_dms,
            clients=len(result.clients),
            duration_s=round(time.monotonic() - start_time, 2),
        )
        return report
