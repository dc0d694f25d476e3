"""Tests for the text, JSON and CSV renderers."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

import pytest

from tests._fixtures.component_builder import component

from findref import report
from findref.config import OUTPUT_FORMATS
from findref.engine import analyze
from findref.git.snapshots import CommitInfo
from findref.orchestrator import CommitAnalysis, CommitComparison, ScanReport
from findref.report.formatters import (
    FILE_SEPARATOR,
    render_analysis,
    render_commit,
    render_comparison,
    render_issues,
    render_scan,
)
from findref.report.issues import collect_issues

SOURCE = component(
    """
    <script>
      import Card from './Card.svelte';
      import { helper } from './helpers.js';
      let orphan = 1;
      function neverCalled() {}
    </script>

    <div class="used"></div>

    <style>
      .used { color: red; }
      .used { color: blue; }
      .stale { color: green; }
    </style>
    """
)
CLEAN = component(
    """
    <p class="lead">Hello</p>
    <style>
      .lead { color: red; }
    </style>
    """
)


def _rows(text: str):
    return list(csv.reader(io.StringIO(text)))


def test_render_analysis_text_sections() -> None:
    text = render_analysis(analyze(SOURCE, "Card.svelte"))
    lines = text.splitlines()

    assert lines[0] == "Title: Card.svelte"
    assert "- <style> declaration count: 1" in lines
    assert "  1. [Range 10:1 - 14:9] - Scoped styles" in lines
    assert "- '.stale' declared at [13:3] in Scoped Block 1" in lines
    assert "   Unused CSS class" in lines
    assert "  1. 'color' property overridden at [12:11] (specificity: 10)" in lines
    assert "- 'neverCalled()' (function) declared at [5:12]" in lines
    assert "- 'orphan' (let) declared at [4:7]" in lines
    assert "   Unused component" in lines
    assert "- total_lines: 15" in lines


def test_render_analysis_csv_has_one_row_per_entity() -> None:
    rows = _rows(render_analysis(analyze(SOURCE, "Card.svelte"), "csv"))

    assert rows[0] == ["File", "Type", "Name", "Line", "Column", "Details"]
    assert ["Card.svelte", "Function", "neverCalled", "5", "12", "function"] in rows
    assert ["Card.svelte", "Component", "Card", "2", "3", "./Card.svelte"] in rows


def test_render_analysis_json_round_trips_the_result() -> None:
    result = analyze(SOURCE, "Card.svelte")

    assert json.loads(render_analysis(result, "json")) == json.loads(json.dumps(result.to_dict()))


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        render_analysis(analyze(CLEAN, "Clean.svelte"), "xml")


def test_every_configurable_format_renders() -> None:
    result = analyze(CLEAN, "Clean.svelte")

    assert report.OUTPUT_FORMATS is OUTPUT_FORMATS
    for fmt in OUTPUT_FORMATS:
        assert isinstance(render_analysis(result, fmt.upper()), str)


def test_css_issue_text() -> None:
    issues = collect_issues(analyze(SOURCE, "Card.svelte"))

    assert render_issues(issues, "css") == (
        " CSS Issues in: Card.svelte\n"
        "\n"
        " Unused CSS Classes/IDs:\n"
        "- '.stale' declared at [13:3]\n"
        "   Never used in HTML\n"
        "\n"
        " CSS Property Conflicts:\n"
        "- 'color' overridden at [12:11]\n"
        "  Previous declaration at [11:11]\n"
        "\n"
    )


def test_component_issue_text() -> None:
    issues = collect_issues(analyze(SOURCE, "Card.svelte"))

    assert render_issues(issues, "components") == (
        " Unused Components in: Card.svelte\n"
        "\n"
        " Imported but Never Used:\n"
        "- 'Card' from './Card.svelte'\n"
        "   Remove import\n"
    )


def test_all_mode_wraps_sections_with_a_summary() -> None:
    text = render_issues(collect_issues(analyze(SOURCE, "Card.svelte")), "all")

    assert text.startswith(" REFACTORING REPORT: Card.svelte\n" + "=" * 80 + "\n")
    assert " Dead Code in: Card.svelte" in text
    assert "- 'helper' from './helpers.js' imported at [3:3]" in text
    assert text.endswith(" SUMMARY: 6 refactoring opportunities found\n")


def test_issue_csv_rows() -> None:
    rows = _rows(render_issues(collect_issues(analyze(SOURCE, "Card.svelte")), "all", "csv"))

    assert rows[0] == ["File", "IssueType", "SelectorType", "Name", "Line", "Column", "Details"]
    assert [row[1] for row in rows[1:]] == [
        "UnusedSelector",
        "PropertyConflict",
        "UnusedFunction",
        "UnusedVariable",
        "UnusedImport",
        "UnusedComponent",
    ]


def test_empty_issue_report_renders_nothing() -> None:
    issues = collect_issues(analyze(CLEAN, "Clean.svelte"))

    assert render_issues(issues, "dead-code") == ""
    assert render_issues(issues, "all", "json") == ""


def test_no_css_issue() -> None:
    issues = collect_issues(analyze("<p>hi</p>", "Plain.svelte"))

    text = render_issues(issues, "css")
    assert " No CSS Found:" in text
    rows = _rows(render_issues(issues, "css", "csv"))
    assert rows[1][:2] == ["Plain.svelte", "NoCSS"]


def test_render_scan_shows_only_files_with_opportunities() -> None:
    report = ScanReport(
        root=Path("."),
        results=[analyze(CLEAN, "Clean.svelte"), analyze(SOURCE, "Card.svelte")],
    )

    text = render_scan(report)
    assert text.startswith("Title: Card.svelte")
    assert "Clean.svelte" not in text
    assert [item["file_path"] for item in json.loads(render_scan(report, "json"))] == ["Card.svelte"]


def test_render_scan_joins_files_with_a_separator() -> None:
    report = ScanReport(
        root=Path("."),
        results=[analyze(SOURCE, "A.svelte"), analyze(SOURCE, "B.svelte")],
    )

    text = render_scan(report, mode="components")

    assert text.count(FILE_SEPARATOR) == 1
    assert " Unused Components in: A.svelte" in text
    assert " Unused Components in: B.svelte" in text


def _commit(revision: str, results) -> CommitAnalysis:
    info = CommitInfo(
        hash=f"{revision}00000000",
        author="Dev",
        date="2024-01-01 10:00:00 +0000",
        message=f"commit {revision}",
    )
    return CommitAnalysis(commit=info, results=list(results), modified_files=["src/Card.svelte"])


def test_render_commit_text() -> None:
    analysis = _commit("abc", [analyze(SOURCE, "src/Card.svelte")])

    text = render_commit(analysis)

    assert text.startswith("Git Commit Analysis\n" + "=" * 50 + "\n")
    assert "- Hash: abc00000000" in text
    assert "- Modified Files: 1" in text
    assert "  1. src/Card.svelte" in text
    assert "Project Statistics:\n- total_files: 1" in text
    assert "Title: src/Card.svelte" in text


def test_render_commit_csv_adds_the_commit_column() -> None:
    analysis = _commit("abc", [analyze(SOURCE, "src/Card.svelte")])

    rows = _rows(render_commit(analysis, "csv"))

    assert rows[0][-1] == "Commit"
    assert all(row[-1] == "abc00000000" for row in rows[1:])


def test_render_comparison_summarises_changes() -> None:
    before = _commit("aaa", [analyze(CLEAN, "src/Card.svelte")])
    after = _commit("bbb", [analyze(SOURCE, "src/Card.svelte")])
    comparison = CommitComparison(
        before=before,
        after=after,
        differences={"css_selector_count": 1, "total_lines": 10, "css_import_count": 0},
        modified_files=["src/Card.svelte"],
        added_files=["src/New.svelte"],
    )

    text = render_comparison(comparison)

    assert "Commit 1 (Before):\n- Hash: aaa00000000" in text
    assert "- Css selector count: +1" in text
    assert "- Css import count: 0" in text
    assert "Added Files:\n  1. src/New.svelte" in text
    assert "Removed Files:" not in text
    assert "BEFORE (aaa00000000):" in text
    assert "AFTER (bbb00000000):" in text

    rows = _rows(render_comparison(comparison, "csv"))
    assert rows[0] == ["Metric", "Commit1_Value", "Commit2_Value", "Change", "Commit1_Hash", "Commit2_Hash"]
    assert rows[1] == ["css_selector_count", "1", "2", "1", "aaa00000000", "bbb00000000"]
