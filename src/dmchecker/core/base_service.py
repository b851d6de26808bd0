"""
Abstract base class for dmchecker services.

``BaseService[ConfigT]`` provides what every service shares: a typed
pydantic configuration, structured logging via
[Logger][dmchecker.core.logger.Logger], factory methods
([from_yaml()][dmchecker.core.base_service.BaseService.from_yaml],
[from_dict()][dmchecker.core.base_service.BaseService.from_dict]) and an
async context manager marking the service lifetime.

See Also:
    [Analyzer][dmchecker.services.analyzer.Analyzer]: The DM analysis
        service built on this class.
"""

from __future__ import annotations

from abc import ABC
from pathlib import Path
from types import TracebackType
from typing import Any, ClassVar, Generic, Self, TypeVar, cast

from pydantic import BaseModel, ValidationError

from dmchecker.models.constants import ServiceName

from .exceptions import ConfigurationError
from .logger import Logger
from .yaml import load_yaml


class BaseServiceConfig(BaseModel):
    """Base configuration shared by all services.

    Subclass this to add service-specific fields.
    """

    json_logs: bool = False


# Bound TypeVar ensuring all service configs inherit from BaseServiceConfig
ConfigT = TypeVar("ConfigT", bound=BaseServiceConfig)


class BaseService(ABC, Generic[ConfigT]):
    """Abstract base class for all dmchecker services.

    Subclasses must set ``SERVICE_NAME`` and ``CONFIG_CLASS``.

    Attributes:
        SERVICE_NAME: Unique service identifier used in logging.
        CONFIG_CLASS: Pydantic model class used by factory methods to parse
            configuration from YAML/dict sources.
        _config: Typed service configuration (defaults from ``CONFIG_CLASS``).
        _logger: [Logger][dmchecker.core.logger.Logger] named after the service.
    """

    SERVICE_NAME: ClassVar[ServiceName]
    CONFIG_CLASS: ClassVar[type[BaseServiceConfig]]

    def __init__(self, config: ConfigT | None = None) -> None:
        self._config: ConfigT = (
            config if config is not None else cast("ConfigT", self.CONFIG_CLASS())
        )
        self._logger = Logger(self.SERVICE_NAME, json_output=self._config.json_logs)

    @property
    def config(self) -> ConfigT:
        """The typed service configuration (read-only)."""
        return self._config

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, config_path: str | Path, **kwargs: Any) -> Self:
        """Create a service instance from a YAML configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the YAML is invalid or fails validation.
        """
        return cls.from_dict(load_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> Self:
        """Create a service instance from a configuration dictionary.

        Raises:
            ConfigurationError: If ``data`` does not validate against
                ``CONFIG_CLASS``.
        """
        try:
            config = cast("ConfigT", cls.CONFIG_CLASS(**data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid {cls.SERVICE_NAME} configuration: {e}") from e
        return cls(config=config, **kwargs)

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        self._logger.info("service_started")
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        self._logger.info("service_stopped")
