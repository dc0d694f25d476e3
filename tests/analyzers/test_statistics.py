"""Tests for per-file counters and cross-file aggregation."""

from __future__ import annotations

from tests._fixtures.component_builder import component

from findref.analyzers.statistics import (
    STATISTIC_KEYS,
    aggregate_statistics,
    diff_statistics,
)
from findref.engine import analyze

SOURCE = component(
    """
    <script>
      import Card from './Card.svelte';
      let count = 0;
      function increment() {
        count += 1;
      }
      function unused() {}
    </script>

    <Card />
    <button class="btn" on:click={increment}>{count}</button>

    <style>
      @import 'base.css';
      .btn { color: red; }
      .btn { color: blue; }
      .ghost { color: green; }
    </style>
    """
)


def test_compute_statistics_counts_everything_extracted() -> None:
    statistics = analyze(SOURCE, "Counter.svelte").statistics

    assert list(statistics) == list(STATISTIC_KEYS)
    assert statistics == {
        "style_block_count": 1,
        "css_import_count": 1,
        "variable_count": 1,
        "import_count": 1,
        "css_override_count": 1,
        "css_selector_count": 2,
        "used_css_selectors": 1,
        "unused_css_selectors": 1,
        "js_function_count": 2,
        "used_js_functions": 1,
        "unused_js_functions": 1,
        "component_import_count": 1,
        "used_components": 1,
        "unused_components": 0,
        "total_lines": 19,
    }


def test_aggregate_statistics_sums_per_file_values() -> None:
    first = analyze(SOURCE, "A.svelte")
    second = analyze("<p>plain</p>", "B.svelte")

    totals = aggregate_statistics([first, second])

    assert totals["total_files"] == 2
    assert totals["total_lines"] == 20
    assert totals["css_selector_count"] == 2


def test_aggregate_of_nothing_is_all_zero() -> None:
    totals = aggregate_statistics([])

    assert totals["total_files"] == 0
    assert all(totals[key] == 0 for key in STATISTIC_KEYS)


def test_diff_statistics_subtracts_and_treats_missing_as_zero() -> None:
    before = {"css_selector_count": 4, "total_lines": 10}
    after = {"css_selector_count": 2, "total_lines": 10, "total_files": 1}

    assert diff_statistics(before, after) == {
        "css_selector_count": -2,
        "total_lines": 0,
        "total_files": 1,
    }
