"""Core layer providing the foundation for dmchecker services.

Sits in the middle of the diamond DAG -- depends only on
``dmchecker.models`` and is depended upon by ``dmchecker.services``.

Attributes:
    BaseService: Abstract generic base class with typed configuration,
        factory methods and lifecycle logging.
        See [BaseService][dmchecker.core.base_service.BaseService].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][dmchecker.core.logger.Logger].
    YAML: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][dmchecker.core.yaml.load_yaml].
    exceptions: The dmchecker error taxonomy.
"""

from .base_service import BaseService, BaseServiceConfig, ConfigT
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    DmCheckerError,
    FeedUnavailableError,
    IdentityError,
    InvalidCharacterError,
    InvalidFormatError,
    ParseError,
    RelayConnectionError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .yaml import load_yaml


__all__ = [
    "BaseService",
    "BaseServiceConfig",
    "ConfigT",
    "ConfigurationError",
    "ConnectivityError",
    "DmCheckerError",
    "FeedUnavailableError",
    "IdentityError",
    "InvalidCharacterError",
    "InvalidFormatError",
    "Logger",
    "ParseError",
    "RelayConnectionError",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
]
