"""
Unit tests for core.base_service module.

Tests:
- Default configuration when none is given
- from_dict / from_yaml factories and validation errors
- Async context manager lifecycle logging
"""

import logging
from pathlib import Path
from typing import ClassVar

import pytest

from dmchecker.core.base_service import BaseService, BaseServiceConfig
from dmchecker.core.exceptions import ConfigurationError
from dmchecker.models.constants import ServiceName


class DummyConfig(BaseServiceConfig):
    threshold: int = 3


class DummyService(BaseService[DummyConfig]):
    SERVICE_NAME: ClassVar[ServiceName] = ServiceName.ANALYZER
    CONFIG_CLASS: ClassVar[type[DummyConfig]] = DummyConfig


class TestInit:
    """Construction and configuration."""

    def test_default_config(self) -> None:
        service = DummyService()
        assert isinstance(service.config, DummyConfig)
        assert service.config.threshold == 3
        assert service.config.json_logs is False

    def test_explicit_config(self) -> None:
        service = DummyService(config=DummyConfig(threshold=9))
        assert service.config.threshold == 9

    def test_logger_named_after_service(self) -> None:
        assert DummyService()._logger.name == "analyzer"

    def test_json_logs_propagates(self) -> None:
        service = DummyService(config=DummyConfig(json_logs=True))
        assert service._logger._json_output is True


class TestFactories:
    """from_dict / from_yaml."""

    def test_from_dict(self) -> None:
        service = DummyService.from_dict({"threshold": 5})
        assert service.config.threshold == 5

    def test_from_dict_invalid(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid analyzer configuration"):
            DummyService.from_dict({"threshold": "many"})

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "dummy.yaml"
        path.write_text("threshold: 7\njson_logs: true\n")
        service = DummyService.from_yaml(path)
        assert service.config.threshold == 7
        assert service.config.json_logs is True

    def test_from_yaml_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            DummyService.from_yaml(tmp_path / "missing.yaml")


class TestContextManager:
    """Lifecycle logging."""

    async def test_logs_start_and_stop(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="analyzer"):
            async with DummyService() as service:
                assert isinstance(service, DummyService)

        messages = [r.getMessage() for r in caplog.records if r.name == "analyzer"]
        assert messages == ["service_started", "service_stopped"]

    async def test_exception_propagates(self) -> None:
        with pytest.raises(RuntimeError):
            async with DummyService():
                raise RuntimeError("boom")
