"""Unit tests for services.analyzer.configs."""

import pytest
from pydantic import ValidationError

from dmchecker.models import NetworkType, Relay
from dmchecker.services.analyzer.configs import DEFAULT_RELAYS, AnalyzerConfig, TimeoutsConfig


class TestTimeoutsConfig:
    """Collection timing."""

    def test_defaults(self) -> None:
        config = TimeoutsConfig()
        assert config.window == 10.0
        assert config.connect == 10.0

    @pytest.mark.parametrize("window", [0, -1, 301])
    def test_window_bounds(self, window: float) -> None:
        with pytest.raises(ValidationError):
            TimeoutsConfig(window=window)


class TestAnalyzerConfig:
    """Analyzer configuration."""

    def test_defaults(self) -> None:
        config = AnalyzerConfig()
        assert config.relays == list(DEFAULT_RELAYS)
        assert config.kinds == [4]
        assert config.stop_on_eose is False
        assert config.json_logs is False

    def test_default_relays(self) -> None:
        assert DEFAULT_RELAYS == (
            "wss://relay.damus.io",
            "wss://relay.snort.social",
            "wss://nos.lol",
            "wss://nostr.wine",
            "wss://relay.current.fyi",
            "wss://relay.nostr.band",
        )

    def test_defaults_not_shared(self) -> None:
        a = AnalyzerConfig()
        a.relays.append("wss://extra.example.com")
        assert AnalyzerConfig().relays == list(DEFAULT_RELAYS)

    def test_nested_timeouts_from_dict(self) -> None:
        config = AnalyzerConfig(**{"timeouts": {"window": 2.5}})
        assert config.timeouts.window == 2.5
        assert config.timeouts.connect == 10.0

    def test_invalid_relay(self) -> None:
        with pytest.raises(ValidationError, match="Invalid relay URL"):
            AnalyzerConfig(relays=["https://relay.damus.io"])

    def test_local_relay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalyzerConfig(relays=["ws://127.0.0.1:7777"])

    def test_empty_relays_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalyzerConfig(relays=[])

    @pytest.mark.parametrize("kinds", [[], [-1], [70000]])
    def test_invalid_kinds(self, kinds: list[int]) -> None:
        with pytest.raises(ValidationError):
            AnalyzerConfig(kinds=kinds)

    def test_relay_models(self) -> None:
        config = AnalyzerConfig(relays=["wss://nos.lol/", "ws://abcdefghijklmnop.onion"])
        relays = config.relay_models()
        assert all(isinstance(r, Relay) for r in relays)
        assert relays[0].url == "wss://nos.lol"
        assert relays[1].network == NetworkType.TOR
