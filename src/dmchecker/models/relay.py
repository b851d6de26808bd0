"""
Validated Nostr relay URL with network type detection.

Parses, normalizes, and validates WebSocket relay URLs (``ws://`` or
``wss://``), detecting the network type (clearnet, Tor, I2P, Lokinet) and
enforcing the correct scheme for each network. Local and private IP
addresses are rejected so a configuration file cannot point the feed at
internal services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import Any, ClassVar

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator

from .constants import NetworkType


@dataclass(frozen=True, slots=True)
class Relay:
    """Immutable representation of a Nostr relay endpoint.

    The scheme is enforced per network:

    * **clearnet** -- ``wss://`` (TLS required on the public internet)
    * **tor / i2p / loki** -- ``ws://`` (encryption handled by the overlay)

    Attributes:
        url: Fully normalized URL including scheme.
        network: Detected ``NetworkType`` enum value.

    Raises:
        ValueError: If the URL is malformed, uses an unsupported scheme,
            resolves to a local/private address, or contains null bytes.

    Examples:
        ```python
        relay = Relay("wss://relay.damus.io/")
        relay.url       # 'wss://relay.damus.io'
        relay.network   # NetworkType.CLEARNET
        ```
    """

    raw_url: str = field(repr=False)

    url: str = field(init=False)
    network: NetworkType = field(init=False)

    _PORT_WS: ClassVar[int] = 80
    _PORT_WSS: ClassVar[int] = 443

    _NETWORK_TLDS: ClassVar[dict[str, NetworkType]] = {
        ".onion": NetworkType.TOR,
        ".i2p": NetworkType.I2P,
        ".loki": NetworkType.LOKI,
    }

    # IANA private/reserved ranges:
    #   https://www.iana.org/assignments/iana-ipv4-special-registry/
    #   https://www.iana.org/assignments/iana-ipv6-special-registry/
    _LOCAL_NETWORKS: ClassVar[list[IPv4Network | IPv6Network]] = [
        ip_network("0.0.0.0/8"),
        ip_network("10.0.0.0/8"),
        ip_network("100.64.0.0/10"),
        ip_network("127.0.0.0/8"),
        ip_network("169.254.0.0/16"),
        ip_network("172.16.0.0/12"),
        ip_network("192.168.0.0/16"),
        ip_network("224.0.0.0/4"),
        ip_network("240.0.0.0/4"),
        ip_network("::1/128"),
        ip_network("::/128"),
        ip_network("fc00::/7"),
        ip_network("fe80::/10"),
        ip_network("ff00::/8"),
    ]

    def __post_init__(self) -> None:
        if "\x00" in self.raw_url:
            raise ValueError("Relay URL contains null bytes")

        parsed = self._parse(self.raw_url)

        if parsed["network"] == NetworkType.LOCAL:
            raise ValueError("Local addresses not allowed")
        if parsed["network"] == NetworkType.UNKNOWN:
            raise ValueError(f"Invalid host: '{parsed['host']}'")

        object.__setattr__(self, "url", parsed["url"])
        object.__setattr__(self, "network", parsed["network"])

    def __str__(self) -> str:
        return self.url

    @staticmethod
    def _detect_network(host: str) -> NetworkType:
        if not host:
            return NetworkType.UNKNOWN

        host_bare = host.lower().strip("[]")

        for tld, network in Relay._NETWORK_TLDS.items():
            if host_bare.endswith(tld):
                return network

        if host_bare in ("localhost", "localhost.localdomain"):
            return NetworkType.LOCAL

        try:
            ip = ip_address(host_bare)
        except ValueError:
            pass
        else:
            is_local = any(ip in net for net in Relay._LOCAL_NETWORKS)
            return NetworkType.LOCAL if is_local else NetworkType.CLEARNET

        if "." not in host_bare:
            return NetworkType.UNKNOWN

        labels = host_bare.split(".")
        valid = all(
            label and not label.startswith("-") and not label.endswith("-") for label in labels
        )
        return NetworkType.CLEARNET if valid else NetworkType.UNKNOWN

    @staticmethod
    def _parse(raw: str) -> dict[str, Any]:
        """Parse and normalize a raw relay URL string.

        Raises:
            ValueError: If the scheme is not ``ws``/``wss`` or the URI is invalid.
        """
        uri = uri_reference(raw.strip()).normalize()

        validator = (
            Validator()
            .require_presence_of("scheme", "host")
            .allow_schemes("ws", "wss")
            .check_validity_of("scheme", "host", "port", "path")
        )

        try:
            validator.validate(uri)
        except UnpermittedComponentError:
            raise ValueError("Invalid scheme: must be ws or wss") from None
        except ValidationError as e:
            raise ValueError(f"Invalid URL: {e}") from None

        if uri.query:
            raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
        if uri.fragment:
            raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")

        port = int(uri.port) if uri.port else None
        host = uri.host.strip("[]")

        path = uri.path or ""
        while "//" in path:
            path = path.replace("//", "/")
        path = path.rstrip("/")

        network = Relay._detect_network(host)
        scheme = "wss" if network == NetworkType.CLEARNET else "ws"

        formatted_host = f"[{host}]" if ":" in host else host
        default_port = Relay._PORT_WSS if scheme == "wss" else Relay._PORT_WS
        if port and port != default_port:
            url = f"{scheme}://{formatted_host}:{port}{path}"
        else:
            url = f"{scheme}://{formatted_host}{path}"

        return {"url": url, "network": network, "host": host}
