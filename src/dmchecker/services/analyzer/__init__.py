"""Analyzer service package.

Re-exports all public symbols::

    from dmchecker.services.analyzer import Analyzer, AnalyzerConfig
"""

from .aggregate import aggregate, fold
from .configs import DEFAULT_RELAYS, AnalyzerConfig, TimeoutsConfig
from .recommend import recommend
from .service import Analyzer


__all__ = [
    "DEFAULT_RELAYS",
    "Analyzer",
    "AnalyzerConfig",
    "TimeoutsConfig",
    "aggregate",
    "fold",
    "recommend",
]
