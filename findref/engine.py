"""Single-file analysis entry point."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional

from .analyzers import Analyzer, ComponentDocument, default_analyzers
from .logging import get_logger
from .models import AnalysisOptions, AnalysisResult
from .parsing.css import parse_stylesheet
from .parsing.positions import PositionIndex
from .parsing.regions import MarkupView, RegionSplitter
from .parsing.scripts import DeclarationExtractor, component_imports
from .parsing.styles import SelectorExtractor, extract_css_imports

logger = get_logger("engine")


def analyze(
    source_text: str,
    file_path: str,
    options: Optional[AnalysisOptions] = None,
    analyzers: Optional[Iterable[Analyzer]] = None,
) -> AnalysisResult:
    """Analyse one component's text.

    Pure and deterministic: the text is never read from or written to disk,
    and any string yields a result.
    """
    options = options or AnalysisOptions()
    text = source_text or ""
    index = PositionIndex(text)
    result = AnalysisResult(file_path=file_path)

    scripts, styles = RegionSplitter().split(text)
    styles = [
        replace(
            region,
            start_position=index.position(region.element_start),
            end_position=index.position(region.element_end),
        )
        for region in styles
    ]
    result.scripts = scripts
    result.styles = styles

    declarations = DeclarationExtractor(text, index)
    for region in scripts:
        found = declarations.extract(region)
        result.variables.extend(found.variables)
        result.functions.extend(found.functions)
        result.imports.extend(found.imports)
    result.component_imports = component_imports(result.imports)

    sheets = [parse_stylesheet(text[region.start : region.end]) for region in styles]
    selectors = SelectorExtractor(text, index)
    for region, sheet in zip(styles, sheets):
        result.css_imports.extend(extract_css_imports(text, region, index, sheet))
        result.css_selectors.extend(selectors.extract(region, sheet))

    document = ComponentDocument(
        text=text,
        index=index,
        markup=MarkupView.from_regions(text, scripts, styles),
        result=result,
        sheets=sheets,
        options=options,
    )
    passes: List[Analyzer] = list(analyzers) if analyzers is not None else default_analyzers()
    for analyzer in passes:
        if analyzer.supports(document):
            analyzer.analyze(document)

    logger.debug(
        "Analysed %s: %d selectors, %d functions, %d variables",
        file_path,
        len(result.css_selectors),
        len(result.functions),
        len(result.variables),
    )
    return result


__all__ = ["analyze"]
