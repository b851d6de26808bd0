"""Analyzer service configuration models.

See Also:
    [Analyzer][dmchecker.services.analyzer.Analyzer]: The service class
        that consumes these configurations.
    [BaseServiceConfig][dmchecker.core.base_service.BaseServiceConfig]:
        Base class providing the ``json_logs`` field.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from dmchecker.core.base_service import BaseServiceConfig
from dmchecker.models import EVENT_KIND_MAX, Relay


DEFAULT_RELAYS: tuple[str, ...] = (
    "wss://relay.damus.io",
    "wss://relay.snort.social",
    "wss://nos.lol",
    "wss://nostr.wine",
    "wss://relay.current.fyi",
    "wss://relay.nostr.band",
)


class TimeoutsConfig(BaseModel):
    """Collection timing, in seconds.

    Attributes:
        window: Total time spent listening to relays; shared by all of them.
        connect: Per-relay WebSocket handshake timeout.
    """

    window: float = Field(default=10.0, gt=0.0, le=300.0)
    connect: float = Field(default=10.0, gt=0.0, le=120.0)


class AnalyzerConfig(BaseServiceConfig):
    """Analyzer service configuration.

    Attributes:
        relays: Relay URLs to query.
        kinds: DM event kinds to request and accept.
        timeouts: Collection window and connect timeout.
        stop_on_eose: Finish each relay at ``EOSE`` instead of listening
            for live events until the window closes.
    """

    relays: list[str] = Field(default_factory=lambda: list(DEFAULT_RELAYS), min_length=1)
    kinds: list[int] = Field(default_factory=lambda: [4], min_length=1)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    stop_on_eose: bool = False

    @field_validator("relays")
    @classmethod
    def validate_relay_urls(cls, v: list[str]) -> list[str]:
        """Validate that all relay URLs are valid WebSocket URLs."""
        for url in v:
            try:
                Relay(url)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid relay URL '{url}': {e}") from e
        return v

    @field_validator("kinds")
    @classmethod
    def validate_kinds(cls, v: list[int]) -> list[int]:
        for kind in v:
            if not 0 <= kind <= EVENT_KIND_MAX:
                raise ValueError(f"Event kind {kind} out of range 0..{EVENT_KIND_MAX}")
        return v

    def relay_models(self) -> list[Relay]:
        """The configured relays as validated [Relay][dmchecker.models.relay.Relay] objects."""
        return [Relay(url) for url in self.relays]
