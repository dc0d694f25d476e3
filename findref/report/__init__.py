"""Refactoring issue collection and report rendering."""

from ..config import OUTPUT_FORMATS
from .formatters import (
    render_analysis,
    render_commit,
    render_comparison,
    render_issues,
    render_scan,
)
from .issues import FILTER_MODES, FileIssues, collect_issues, count_opportunities

__all__ = [
    "FILTER_MODES",
    "FileIssues",
    "OUTPUT_FORMATS",
    "collect_issues",
    "count_opportunities",
    "render_analysis",
    "render_commit",
    "render_comparison",
    "render_issues",
    "render_scan",
]
