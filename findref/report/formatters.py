"""Text, JSON and CSV renderers for analysis results and issue reports."""

from __future__ import annotations

import csv
import io
import json
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from ..analyzers.filters import FilterClassifier
from ..config import OUTPUT_FORMATS
from ..models import AnalysisResult, Position, Usage
from .issues import FILTER_MODES, FileIssues, collect_issues

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..orchestrator import CommitAnalysis, CommitComparison, ScanReport

FILE_SEPARATOR = "\n" + "=" * 80 + "\n"

_ISSUE_CSV_HEADER = ["File", "IssueType", "SelectorType", "Name", "Line", "Column", "Details"]
_ANALYSIS_CSV_HEADER = ["File", "Type", "Name", "Line", "Column", "Details"]
_SELECTOR_PREFIX = {"class": ".", "id": "#"}


def _check_format(fmt: str) -> str:
    fmt = fmt.lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format '{fmt}'")
    return fmt


def _at(position: Position) -> str:
    return f"[{position.line}:{position.column}]"


def _usage_list(usages: Sequence[Usage], with_element: bool = False) -> str:
    parts = []
    for usage in usages:
        location = _at(usage.position)
        parts.append(f"{usage.element} {location}" if with_element and usage.element else location)
    return ", ".join(parts)


def _csv_text(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2)


# Full analysis ---------------------------------------------------------------


def render_analysis(result: AnalysisResult, fmt: str = "text") -> str:
    fmt = _check_format(fmt)
    if fmt == "json":
        return _dumps(result.to_dict())
    if fmt == "csv":
        return _csv_text(_ANALYSIS_CSV_HEADER, _analysis_rows(result))
    return _analysis_text(result)


def _analysis_rows(result: AnalysisResult) -> List[List[Any]]:
    path = result.file_path
    rows: List[List[Any]] = []
    for variable in result.variables:
        rows.append([path, "Variable", variable.name, variable.position.line, variable.position.column, variable.kind])
    for function in result.functions:
        rows.append([path, "Function", function.name, function.position.line, function.position.column, function.kind])
    for statement in result.imports:
        rows.append([path, "Import", statement.module_path, statement.position.line, statement.position.column, statement.kind])
    for component in result.component_imports:
        rows.append(
            [path, "Component", component.component_name, component.position.line, component.position.column, component.module_path]
        )
    for selector in result.css_selectors:
        rows.append([path, "CSSSelector", selector.name, selector.position.line, selector.position.column, selector.kind])
    for override in result.css_overrides:
        rows.append(
            [path, "CSSOverride", override.property, override.position.line, override.position.column, override.conflicts_with]
        )
    return rows


def _analysis_text(result: AnalysisResult) -> str:
    lines: List[str] = [f"Title: {result.file_path}", "", "CSS Analysis:"]
    lines.append(f"- <style> declaration count: {len(result.styles)}")
    if result.styles:
        lines.append("- Style blocks:")
        for number, region in enumerate(result.styles, start=1):
            scope = "Scoped" if region.is_scoped else "Global"
            entry = f"  {number}. "
            if region.start_position is not None and region.end_position is not None:
                start, end = region.start_position, region.end_position
                entry += f"[Range {start.line}:{start.column} - {end.line}:{end.column}] - "
            entry += f"{scope} styles"
            if region.language and region.language != "css":
                entry += f" (lang: {region.language})"
            lines.append(entry)

    lines.append(f"- Count of imported CSS: {len(result.css_imports)}")
    if result.css_imports:
        lines.append("- List of imported CSS:")
        for number, css_import in enumerate(result.css_imports, start=1):
            position = css_import.position
            lines.append(f"  {number}. {css_import.path} [imported at {position.line}:{position.column}]")

    if result.css_overrides:
        lines.extend(["", "CSS Override Analysis:"])
        lines.append(f"- Property conflicts detected: {len(result.css_overrides)}")
        for number, override in enumerate(result.css_overrides, start=1):
            lines.append(
                f"  {number}. '{override.property}' property overridden at {_at(override.position)} "
                f"(specificity: {override.specificity})"
            )
            lines.append(f"     {override.conflicts_with}")

    if result.css_selectors:
        lines.extend(["", "CSS Selector Usage Analysis:"])
        lines.extend(_selector_section(result, "class", "Classes", "Unused CSS class"))
        lines.extend(_selector_section(result, "id", "IDs", "Unused CSS ID"))
        lines.extend(_selector_section(result, "element", "Element Selectors", None))
        lines.extend(_selector_section(result, "attribute", "Attribute Selectors", None))
        lines.extend(_selector_section(result, "descendant", "Descendant Selectors", None))

    lines.extend(["", "Reference Analysis:", ""])
    plain = [v for kind in ("let", "const", "var") for v in result.variables if v.kind == kind]
    if plain:
        lines.append("Variables:")
        for variable in plain:
            lines.append(f"- '{variable.name}' ({variable.kind}) declared at {_at(variable.position)}")
            if variable.usages:
                lines.append(f"  Used at: {_usage_list(variable.usages)}")
    reactive = [v for v in result.variables if v.kind == "reactive"]
    if reactive:
        lines.extend(["", "Reactive Variables:"])
        for variable in reactive:
            lines.append(f"- '{variable.name}' (reactive) declared at {_at(variable.position)}")
            if variable.dependencies:
                lines.append(f"  Dependencies: {', '.join(variable.dependencies)}")
            if variable.usages:
                lines.append(f"  Used at: {_usage_list(variable.usages)}")
    props = [v for v in result.variables if v.kind == "prop"]
    if props:
        lines.extend(["", "Component Props:"])
        for variable in props:
            lines.append(f"- '{variable.name}' (export let) declared at {_at(variable.position)}")
            if variable.usages:
                lines.append(f"  Used at: {_usage_list(variable.usages)}")
    if result.functions:
        lines.extend(["", "Functions:"])
        for function in result.functions:
            qualifiers = [function.kind]
            if function.is_async:
                qualifiers.append("async")
            if function.is_exported:
                qualifiers.append("exported")
            lines.append(
                f"- '{function.name}()' ({', '.join(qualifiers)}) declared at {_at(function.position)}"
            )
            if function.usages:
                lines.append(f"  Called at: {_usage_list(function.usages)}")

    lines.extend(["", "Import Analysis:", ""])
    es6 = [statement for statement in result.imports if statement.kind == "es6"]
    if es6:
        lines.append("ES6 Imports:")
        for statement in es6:
            position = statement.position
            lines.append(
                f"- '{', '.join(statement.symbols)}' from '{statement.module_path}' "
                f"[imported at {position.line}:{position.column}]"
            )
            if statement.usages:
                lines.append(f"  Used at: {_usage_list(statement.usages)}")
    dynamic = [statement for statement in result.imports if statement.kind == "dynamic"]
    if dynamic:
        lines.extend(["", "Dynamic Imports:"])
        for statement in dynamic:
            position = statement.position
            lines.append(f"- '{statement.module_path}' [imported at {position.line}:{position.column}]")
    if result.component_imports:
        lines.extend(["", "Component Imports:"])
        for component in result.component_imports:
            position = component.position
            lines.append(
                f"- '{component.component_name}' from '{component.module_path}' "
                f"[imported at {position.line}:{position.column}]"
            )
            if component.usages:
                lines.append(f"  Used at: {_usage_list(component.usages)}")
            else:
                lines.append("   Unused component")

    lines.extend(["", "Statistics:"])
    for key, value in result.statistics.items():
        lines.append(f"- {key}: {value}")
    return "\n".join(lines) + "\n"


def _selector_section(
    result: AnalysisResult, kind: str, title: str, unused_label: Optional[str]
) -> List[str]:
    selectors = [selector for selector in result.css_selectors if selector.kind == kind]
    if not selectors:
        return []
    lines = ["", f"{title}:"]
    prefix = _SELECTOR_PREFIX.get(kind, "")
    for selector in selectors:
        name = f"{prefix}{selector.name}" if prefix else selector.selector_text
        lines.append(f"- '{name}' declared at {_at(selector.position)} in {selector.source_block}")
        if selector.properties:
            lines.append(f"  Properties: {', '.join(selector.properties)}")
        if selector.html_usages:
            lines.append(
                f"  Used in HTML at: {_usage_list(selector.html_usages, with_element=kind in _SELECTOR_PREFIX)}"
            )
        elif unused_label:
            lines.append(f"   {unused_label}")
    return lines


# Issue reports ----------------------------------------------------------------


def render_issues(issues: FileIssues, mode: str, fmt: str = "text") -> str:
    """Render one file's issues for a filter mode; empty when there is nothing to report."""
    fmt = _check_format(fmt)
    restricted = issues.restrict(mode)
    if restricted.is_empty():
        return ""
    if fmt == "json":
        return _dumps(restricted.to_dict())
    if fmt == "csv":
        return _csv_text(_ISSUE_CSV_HEADER, _issue_rows(restricted))
    if mode == "css":
        return _css_issues_text(restricted)
    if mode == "dead-code":
        return _dead_code_text(restricted)
    if mode == "components":
        return _components_text(restricted)
    return _all_issues_text(restricted)


def _issue_rows(issues: FileIssues) -> List[List[Any]]:
    path = issues.file_path
    rows: List[List[Any]] = []
    for selector in issues.unused_selectors:
        rows.append(
            [path, "UnusedSelector", selector.kind, selector.name, selector.position.line, selector.position.column, "Never used in HTML"]
        )
    for override in issues.css_overrides:
        rows.append(
            [path, "PropertyConflict", "property", override.property, override.position.line, override.position.column, override.conflicts_with]
        )
    if issues.no_css:
        rows.append([path, "NoCSS", "", "", "", "", "No <style> blocks or CSS imports detected"])
    for function in issues.dead_functions:
        rows.append(
            [path, "UnusedFunction", function.kind, function.name, function.position.line, function.position.column, "Never called"]
        )
    for variable in issues.dead_variables:
        rows.append(
            [path, "UnusedVariable", variable.kind, variable.name, variable.position.line, variable.position.column, "Never used"]
        )
    for statement in issues.unused_imports:
        rows.append(
            [path, "UnusedImport", statement.kind, ", ".join(statement.symbols), statement.position.line, statement.position.column, statement.module_path]
        )
    for component in issues.unused_components:
        rows.append(
            [path, "UnusedComponent", "component", component.component_name, component.position.line, component.position.column, component.module_path]
        )
    return rows


def _css_issues_text(issues: FileIssues) -> str:
    if not issues.has_css_issues():
        return ""
    lines = [f" CSS Issues in: {issues.file_path}", ""]
    if issues.unused_selectors:
        lines.append(" Unused CSS Classes/IDs:")
        for selector in issues.unused_selectors:
            prefix = _SELECTOR_PREFIX.get(selector.kind, "")
            name = f"{prefix}{selector.name}" if prefix else selector.selector_text
            lines.append(f"- '{name}' declared at {_at(selector.position)}")
            lines.append("   Never used in HTML")
        lines.append("")
    if issues.css_overrides:
        lines.append(" CSS Property Conflicts:")
        for override in issues.css_overrides:
            lines.append(f"- '{override.property}' overridden at {_at(override.position)}")
            lines.append(f"  {override.conflicts_with}")
        lines.append("")
    if issues.no_css:
        lines.append(" No CSS Found:")
        lines.append("- No <style> blocks or CSS imports detected")
        lines.append("  Consider adding styles or importing CSS")
        lines.append("")
    return "\n".join(lines) + "\n"


def _dead_code_text(issues: FileIssues) -> str:
    if not issues.has_dead_code():
        return ""
    lines = [f" Dead Code in: {issues.file_path}", ""]
    if issues.dead_functions:
        lines.append(" Unused Functions:")
        for function in issues.dead_functions:
            lines.append(f"- '{function.name}()' declared at {_at(function.position)}")
            lines.append("   Never called")
        lines.append("")
    if issues.dead_variables:
        lines.append(" Unused Variables:")
        for variable in issues.dead_variables:
            lines.append(f"- '{variable.name}' declared at {_at(variable.position)}")
            lines.append("   Never used")
        lines.append("")
    if issues.unused_imports:
        lines.append(" Unused Imports:")
        for statement in issues.unused_imports:
            lines.append(
                f"- '{', '.join(statement.symbols)}' from '{statement.module_path}' "
                f"imported at {_at(statement.position)}"
            )
            lines.append("   Never used")
        lines.append("")
    return "\n".join(lines) + "\n"


def _components_text(issues: FileIssues) -> str:
    if not issues.has_unused_components():
        return ""
    lines = [f" Unused Components in: {issues.file_path}", "", " Imported but Never Used:"]
    for component in issues.unused_components:
        lines.append(f"- '{component.component_name}' from '{component.module_path}'")
        lines.append("   Remove import")
    return "\n".join(lines) + "\n"


def _all_issues_text(issues: FileIssues) -> str:
    sections = [_css_issues_text(issues), _dead_code_text(issues), _components_text(issues)]
    body = [section for section in sections if section]
    if not body:
        return ""
    text = f" REFACTORING REPORT: {issues.file_path}\n{'=' * 80}\n\n"
    text += "".join(section + "\n" for section in body)
    text += f" SUMMARY: {issues.opportunity_count} refactoring opportunities found\n"
    return text


# Multi-file runs --------------------------------------------------------------


def render_scan(
    report: ScanReport,
    fmt: str = "text",
    mode: Optional[str] = None,
    classifier: Optional[FilterClassifier] = None,
) -> str:
    """Render a scan run.

    Without ``mode`` a file's full analysis is shown only when it has at least
    one refactoring opportunity; with a filter mode only that mode's issues are.
    """
    fmt = _check_format(fmt)
    if mode is not None and mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode '{mode}'")
    classifier = classifier or FilterClassifier()

    if mode is None:
        selected = [
            result for result in report.results
            if collect_issues(result, classifier).opportunity_count > 0
        ]
        if fmt == "json":
            return _dumps([result.to_dict() for result in selected])
        if fmt == "csv":
            rows = [row for result in selected for row in _analysis_rows(result)]
            return _csv_text(_ANALYSIS_CSV_HEADER, rows)
        return FILE_SEPARATOR.join(_analysis_text(result) for result in selected)

    restricted = [
        collect_issues(result, classifier).restrict(mode) for result in report.results
    ]
    restricted = [issues for issues in restricted if not issues.is_empty()]
    if fmt == "json":
        return _dumps([issues.to_dict() for issues in restricted])
    if fmt == "csv":
        rows = [row for issues in restricted for row in _issue_rows(issues)]
        return _csv_text(_ISSUE_CSV_HEADER, rows)
    rendered = [render_issues(issues, mode, fmt) for issues in restricted]
    return FILE_SEPARATOR.join(text for text in rendered if text.strip())


def _commit_lines(title: str, analysis: CommitAnalysis) -> List[str]:
    commit = analysis.commit
    return [
        title,
        f"- Hash: {commit.hash}",
        f"- Message: {commit.message}",
        f"- Date: {commit.date}",
        f"- Author: {commit.author}",
    ]


def _statistics_lines(statistics: Dict[str, int]) -> List[str]:
    return [f"- {key}: {value}" for key, value in statistics.items()]


def _project_text(analysis: CommitAnalysis) -> str:
    lines = ["Project Statistics:"]
    lines.extend(_statistics_lines(analysis.statistics))
    text = "\n".join(lines) + "\n"
    if analysis.results:
        text += "\n" + FILE_SEPARATOR.join(_analysis_text(result) for result in analysis.results)
    return text


def render_commit(analysis: CommitAnalysis, fmt: str = "text") -> str:
    fmt = _check_format(fmt)
    if fmt == "json":
        return _dumps(analysis.to_dict())
    if fmt == "csv":
        rows = [row + [analysis.commit.hash] for result in analysis.results for row in _analysis_rows(result)]
        return _csv_text(_ANALYSIS_CSV_HEADER + ["Commit"], rows)

    lines = ["Git Commit Analysis", "=" * 50, ""]
    lines.extend(_commit_lines("Commit Information:", analysis))
    lines.append(f"- Modified Files: {len(analysis.modified_files)}")
    if analysis.modified_files:
        lines.extend(["", "Modified Component Files:"])
        lines.extend(f"  {number}. {path}" for number, path in enumerate(analysis.modified_files, start=1))
    lines.extend(["", "Project Analysis at this Commit:", "-" * 40])
    return "\n".join(lines) + "\n" + _project_text(analysis)


def _change_label(key: str) -> str:
    return key.replace("_", " ").capitalize()


def render_comparison(comparison: CommitComparison, fmt: str = "text") -> str:
    fmt = _check_format(fmt)
    if fmt == "json":
        return _dumps(comparison.to_dict())
    before_stats = comparison.before.statistics
    after_stats = comparison.after.statistics
    if fmt == "csv":
        before_hash = comparison.before.commit.hash
        after_hash = comparison.after.commit.hash
        rows = [
            [key, before_stats.get(key, 0), after_stats.get(key, 0), change, before_hash, after_hash]
            for key, change in comparison.differences.items()
        ]
        return _csv_text(
            ["Metric", "Commit1_Value", "Commit2_Value", "Change", "Commit1_Hash", "Commit2_Hash"], rows
        )

    lines = ["Git Commit Comparison Analysis", "=" * 50, ""]
    lines.extend(_commit_lines("Commit 1 (Before):", comparison.before))
    lines.append("")
    lines.extend(_commit_lines("Commit 2 (After):", comparison.after))
    lines.extend(["", "Changes Summary:", "-" * 30])
    for key, change in comparison.differences.items():
        sign = "+" if change > 0 else ""
        lines.append(f"- {_change_label(key)}: {sign}{change}")
    for title, paths in (
        ("Modified Files:", comparison.modified_files),
        ("Added Files:", comparison.added_files),
        ("Removed Files:", comparison.removed_files),
    ):
        if paths:
            lines.extend(["", title])
            lines.extend(f"  {number}. {path}" for number, path in enumerate(paths, start=1))

    text = "\n".join(lines) + "\n\n"
    for label, analysis in (("BEFORE", comparison.before), ("AFTER", comparison.after)):
        text += "=" * 50 + "\n"
        text += f"{label} ({analysis.commit.hash}):\n"
        text += "=" * 50 + "\n"
        text += _project_text(analysis) + "\n"
    return text


__all__ = [
    "FILE_SEPARATOR",
    "render_analysis",
    "render_commit",
    "render_comparison",
    "render_issues",
    "render_scan",
]
