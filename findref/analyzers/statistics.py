"""Per-file counters and their aggregation across files and revisions."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping

from ..models import AnalysisResult
from .base import Analyzer, ComponentDocument

STATISTIC_KEYS = (
    "style_block_count",
    "css_import_count",
    "variable_count",
    "import_count",
    "css_override_count",
    "css_selector_count",
    "used_css_selectors",
    "unused_css_selectors",
    "js_function_count",
    "used_js_functions",
    "unused_js_functions",
    "component_import_count",
    "used_components",
    "unused_components",
    "total_lines",
)


def compute_statistics(result: AnalysisResult, text: str) -> Dict[str, int]:
    """Raw counters for one file; used/unused splits ignore report-time filters."""
    used_selectors = sum(1 for selector in result.css_selectors if selector.html_usages)
    used_functions = sum(1 for function in result.functions if function.usages)
    used_components = sum(1 for component in result.component_imports if component.is_used)
    return {
        "style_block_count": len(result.styles),
        "css_import_count": len(result.css_imports),
        "variable_count": len(result.variables),
        "import_count": len(result.imports),
        "css_override_count": len(result.css_overrides),
        "css_selector_count": len(result.css_selectors),
        "used_css_selectors": used_selectors,
        "unused_css_selectors": len(result.css_selectors) - used_selectors,
        "js_function_count": len(result.functions),
        "used_js_functions": used_functions,
        "unused_js_functions": len(result.functions) - used_functions,
        "component_import_count": len(result.component_imports),
        "used_components": used_components,
        "unused_components": len(result.component_imports) - used_components,
        "total_lines": text.count("\n") + 1,
    }


class StatisticsAggregator(Analyzer):
    def supports(self, document: ComponentDocument) -> bool:
        return True

    def analyze(self, document: ComponentDocument) -> None:
        document.result.statistics = compute_statistics(document.result, document.text)


def aggregate_statistics(results: Iterable[AnalysisResult]) -> Dict[str, int]:
    """Sum per-file statistics; ``total_files`` counts the results."""
    totals: Dict[str, int] = {"total_files": 0}
    totals.update({key: 0 for key in STATISTIC_KEYS})
    for result in results:
        totals["total_files"] += 1
        for key, value in result.statistics.items():
            totals[key] = totals.get(key, 0) + value
    return totals


def diff_statistics(before: Mapping[str, int], after: Mapping[str, int]) -> Dict[str, int]:
    """Per-key ``after - before``; keys missing on one side count as zero."""
    keys = list(before) + [key for key in after if key not in before]
    return {key: after.get(key, 0) - before.get(key, 0) for key in keys}


__all__ = [
    "STATISTIC_KEYS",
    "StatisticsAggregator",
    "aggregate_statistics",
    "compute_statistics",
    "diff_statistics",
]
