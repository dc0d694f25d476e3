"""Tests for the FastAPI service mode."""

from __future__ import annotations

from fastapi.testclient import TestClient

from findref.engine import analyze
from findref.models import AnalysisOptions
from findref.service.app import create_app

SOURCE = """<script>
  let orphan = 1;
  function neverCalled() {}
</script>
<p class="lead"></p>
<style>
  .lead { color: red; }
  #app { margin: 0; }
</style>
"""


class _RecordingAnalyzer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, AnalysisOptions]] = []

    def __call__(self, source: str, file_path: str, options: AnalysisOptions):
        self.calls.append((file_path, options))
        return analyze(source, file_path, options)


def test_health_endpoint() -> None:
    client = TestClient(create_app())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_endpoint_returns_issues_and_result() -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"source": SOURCE, "file_path": "Lead.svelte"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["file_path"] == "Lead.svelte"
    assert payload["statistics"]["css_selector_count"] == 2
    assert [item["name"] for item in payload["issues"]["dead_functions"]] == ["neverCalled"]
    assert [item["name"] for item in payload["issues"]["unused_selectors"]] == ["app"]
    assert payload["opportunity_count"] == 3
    assert payload["result"]["file_path"] == "Lead.svelte"


def test_analyze_endpoint_forwards_options() -> None:
    recorder = _RecordingAnalyzer()
    client = TestClient(create_app(lambda: recorder))

    response = client.post(
        "/analyze",
        json={
            "source": SOURCE,
            "options": {"extra_builtin_methods": ["neverCalled"], "global_ids": ["shell"]},
        },
    )

    assert response.status_code == 200
    file_path, options = recorder.calls[0]
    assert file_path == "Component.svelte"
    assert options.extra_builtin_methods == ("neverCalled",)
    assert options.global_ids == ("shell",)
    assert response.json()["opportunity_count"] == 2


def test_analyze_endpoint_validates_payload() -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"file_path": "Missing.svelte"})

    assert response.status_code == 422
