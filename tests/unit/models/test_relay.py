"""
Unit tests for models.relay module.

Tests:
- URL parsing and normalization (wss/ws, with/without ports)
- Network detection (clearnet, tor, i2p, loki)
- Rejection of local addresses and malformed URLs
"""

from dataclasses import FrozenInstanceError

import pytest

from dmchecker.models import NetworkType, Relay


class TestParsing:
    """URL parsing and normalization."""

    def test_wss_clearnet(self):
        r = Relay("wss://relay.damus.io")
        assert r.url == "wss://relay.damus.io"
        assert r.network == NetworkType.CLEARNET

    def test_ws_clearnet_upgraded_to_wss(self):
        assert Relay("ws://nos.lol").url == "wss://nos.lol"

    def test_explicit_port(self):
        assert Relay("wss://relay.example.com:8080").url == "wss://relay.example.com:8080"

    def test_default_port_omitted(self):
        assert Relay("wss://relay.example.com:443").url == "wss://relay.example.com"

    def test_trailing_slash_removed(self):
        assert Relay("wss://relay.damus.io/").url == "wss://relay.damus.io"

    def test_path_preserved(self):
        assert Relay("wss://relay.example.com//nostr//").url == "wss://relay.example.com/nostr"

    def test_whitespace_stripped(self):
        assert Relay("  wss://nos.lol  ").url == "wss://nos.lol"

    def test_str(self):
        assert str(Relay("wss://nos.lol")) == "wss://nos.lol"

    def test_ipv6(self):
        r = Relay("wss://[2001:4860:4860::8888]")
        assert r.network == NetworkType.CLEARNET
        assert r.url == "wss://[2001:4860:4860::8888]"

    def test_only_url_and_network_exposed(self):
        r = Relay("wss://relay.example.com:8080")
        assert not hasattr(r, "host")
        assert not hasattr(r, "port")

    def test_frozen(self):
        r = Relay("wss://nos.lol")
        with pytest.raises(FrozenInstanceError):
            r.url = "wss://other.example"  # type: ignore[misc]


class TestNetworkDetection:
    """Overlay network detection."""

    @pytest.mark.parametrize(
        ("url", "network"),
        [
            ("ws://abcdefghijklmnop.onion", NetworkType.TOR),
            ("ws://relay.i2p", NetworkType.I2P),
            ("ws://relay.loki", NetworkType.LOKI),
        ],
    )
    def test_overlay(self, url: str, network: NetworkType):
        r = Relay(url)
        assert r.network == network
        assert r.url.startswith("ws://")

    def test_overlay_wss_downgraded(self):
        assert Relay("wss://abcdefghijklmnop.onion").url == "ws://abcdefghijklmnop.onion"


class TestRejection:
    """Invalid relay URLs."""

    @pytest.mark.parametrize(
        "url",
        [
            "wss://localhost",
            "wss://127.0.0.1",
            "wss://192.168.1.10",
            "wss://10.0.0.1",
            "wss://[::1]",
        ],
    )
    def test_local_addresses(self, url: str):
        with pytest.raises(ValueError, match="Local"):
            Relay(url)

    def test_http_scheme(self):
        with pytest.raises(ValueError, match="scheme"):
            Relay("https://relay.damus.io")

    def test_query_string(self):
        with pytest.raises(ValueError, match="query"):
            Relay("wss://relay.damus.io?x=1")

    def test_null_bytes(self):
        with pytest.raises(ValueError, match="null"):
            Relay("wss://relay\x00.damus.io")

    def test_single_label_host(self):
        with pytest.raises(ValueError, match="Invalid host"):
            Relay("wss://relay")
