"""Base classes for the analysis passes run over one component."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..models import AnalysisOptions, AnalysisResult
from ..parsing.css import StyleSheet
from ..parsing.positions import PositionIndex
from ..parsing.regions import MarkupView


@dataclass
class ComponentDocument:
    """One component file after region splitting and declaration extraction."""

    text: str
    index: PositionIndex
    markup: MarkupView
    result: AnalysisResult
    sheets: List[StyleSheet] = field(default_factory=list)
    options: AnalysisOptions = field(default_factory=AnalysisOptions)


class Analyzer(ABC):
    """Contract for passes that enrich an :class:`AnalysisResult` in place."""

    @abstractmethod
    def supports(self, document: ComponentDocument) -> bool:
        """Return True when this pass has anything to look at."""

    @abstractmethod
    def analyze(self, document: ComponentDocument) -> None:
        """Fill the fields of ``document.result`` this pass owns."""


__all__ = ["Analyzer", "ComponentDocument"]
