"""Source-aware scanners for single-file components."""

from .positions import PositionIndex, line_context
from .regions import MarkupView, RegionSplitter
from .scripts import DeclarationExtractor, ScriptDeclarations
from .styles import SelectorExtractor, extract_css_imports

__all__ = [
    "DeclarationExtractor",
    "MarkupView",
    "PositionIndex",
    "RegionSplitter",
    "ScriptDeclarations",
    "SelectorExtractor",
    "extract_css_imports",
    "line_context",
]
