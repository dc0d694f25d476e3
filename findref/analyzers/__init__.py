"""Analysis passes run over an extracted component."""

from __future__ import annotations

from typing import List

from .base import Analyzer, ComponentDocument
from .filters import FilterClassifier
from .overrides import OverrideAnalyzer
from .statistics import StatisticsAggregator, aggregate_statistics, diff_statistics
from .usages import UsageResolver


def default_analyzers() -> List[Analyzer]:
    """Return the passes in execution order; statistics read what the others produce."""
    return [OverrideAnalyzer(), UsageResolver(), StatisticsAggregator()]


__all__ = [
    "Analyzer",
    "ComponentDocument",
    "FilterClassifier",
    "OverrideAnalyzer",
    "StatisticsAggregator",
    "UsageResolver",
    "aggregate_statistics",
    "default_analyzers",
    "diff_statistics",
]
