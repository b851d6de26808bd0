"""YAML configuration loading for dmchecker.

Used by [BaseService.from_yaml()][dmchecker.core.base_service.BaseService.from_yaml]
and the CLI to load analyzer configuration files.

Examples:
    ```python
    from dmchecker.core.yaml import load_yaml

    config = load_yaml("config/analyzer.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file with ``yaml.safe_load``.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a dictionary. Returns an empty dict if the
        file exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.

    Warning:
        The structure of the returned dictionary is not validated here;
        pass it to [AnalyzerConfig][dmchecker.services.analyzer.AnalyzerConfig].
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping")
    return data
