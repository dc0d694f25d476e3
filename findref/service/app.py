"""FastAPI application entrypoint for findref service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from pydantic import BaseModel

from ..analyzers.filters import FilterClassifier
from ..engine import analyze
from ..logging import get_logger
from ..models import AnalysisOptions, AnalysisResult
from ..report.issues import collect_issues

logger = get_logger("service")


class AnalysisSettings(BaseModel):
    scan_markup_for_variables: bool = True
    global_ids: Optional[List[str]] = None
    extra_builtin_methods: List[str] = []

    def to_options(self) -> AnalysisOptions:
        overrides: Dict[str, Any] = {}
        if self.global_ids is not None:
            overrides["global_ids"] = tuple(self.global_ids)
        return AnalysisOptions(
            scan_markup_for_variables=self.scan_markup_for_variables,
            extra_builtin_methods=tuple(self.extra_builtin_methods),
            **overrides,
        )


class AnalyzeRequest(BaseModel):
    source: str
    file_path: str = "Component.svelte"
    options: Optional[AnalysisSettings] = None


class AnalyzeResponse(BaseModel):
    file_path: str
    statistics: Dict[str, int]
    issues: Dict[str, Any]
    opportunity_count: int
    result: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str


AnalyzeFn = Callable[[str, str, AnalysisOptions], AnalysisResult]


def _default_analyzer() -> AnalyzeFn:
    return analyze


def create_app(
    analyzer_factory: Callable[[], AnalyzeFn] = _default_analyzer,
) -> FastAPI:
    """Create the FastAPI application exposing component analysis."""

    app = FastAPI(title="findref Service", version="1.0.0")

    async def get_analyzer() -> AnalyzeFn:
        return analyzer_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze_component(
        payload: AnalyzeRequest,
        analyzer: AnalyzeFn = Depends(get_analyzer),
    ) -> AnalyzeResponse:
        settings = payload.options or AnalysisSettings()
        options = settings.to_options()

        def _run_analysis() -> AnalysisResult:
            return analyzer(payload.source, payload.file_path, options)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover
            result = _run_analysis()
        else:
            result = await loop.run_in_executor(None, _run_analysis)

        issues = collect_issues(result, FilterClassifier(options.extra_builtin_methods))
        logger.debug("Analysed %s via service", payload.file_path)
        return AnalyzeResponse(
            file_path=result.file_path,
            statistics=dict(result.statistics),
            issues=issues.to_dict(),
            opportunity_count=issues.opportunity_count,
            result=result.to_dict(),
        )

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["AnalyzeRequest", "AnalyzeResponse", "create_app", "run_service"]
