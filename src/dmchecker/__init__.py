r"""dmchecker -- Nostr direct message client and encryption protocol analyzer.

Collects a user's encrypted direct messages from Nostr relays, infers
which client produced each one and which encryption protocol it used, and
reports per-client statistics with security recommendations.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         Analysis pipeline and relay feed wiring
             /   |   \
          core  nips  utils    Infrastructure, classifiers, codec/transport
             \   |   /
              models           Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Pure frozen dataclasses. Zero I/O.
    core: Base service, exceptions, logging, YAML loading.
    nips: Client and protocol classification rules.
    utils: ``npub`` codec and the WebSocket relay feed.
    services: The [Analyzer][dmchecker.services.analyzer.Analyzer].

Note:
    For lightweight usage, import directly from subpackages::

        from dmchecker.models import RawEvent
        from dmchecker.nips import identify_client

    Top-level imports (``from dmchecker import Analyzer``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("dmchecker")

__all__ = [
    "AnalysisReport",
    "AnalysisResult",
    "Analyzer",
    "AnalyzerConfig",
    "BaseService",
    "ClientStats",
    "DmCheckerError",
    "Logger",
    "ProtocolInfo",
    "RawEvent",
    "Relay",
    "decode_npub",
    "identify_client",
    "identify_protocol",
    "normalize_identity",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "BaseService": ("dmchecker.core", "BaseService"),
    "DmCheckerError": ("dmchecker.core", "DmCheckerError"),
    "Logger": ("dmchecker.core", "Logger"),
    "AnalysisReport": ("dmchecker.models", "AnalysisReport"),
    "AnalysisResult": ("dmchecker.models", "AnalysisResult"),
    "ClientStats": ("dmchecker.models", "ClientStats"),
    "ProtocolInfo": ("dmchecker.models", "ProtocolInfo"),
    "RawEvent": ("dmchecker.models", "RawEvent"),
    "Relay": ("dmchecker.models", "Relay"),
    "identify_client": ("dmchecker.nips", "identify_client"),
    "identify_protocol": ("dmchecker.nips", "identify_protocol"),
    "decode_npub": ("dmchecker.utils.keys", "decode_npub"),
    "normalize_identity": ("dmchecker.utils.keys", "normalize_identity"),
    "Analyzer": ("dmchecker.services", "Analyzer"),
    "AnalyzerConfig": ("dmchecker.services", "AnalyzerConfig"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'dmchecker' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
