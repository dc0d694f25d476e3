"""CSS property overrides within a single selector."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..models import CSSOverride, StyleRegion
from ..parsing.css import StyleSheet, parse_stylesheet
from ..parsing.positions import PositionIndex
from ..parsing.styles import split_selector_list
from .base import Analyzer, ComponentDocument

_COMBINATORS = re.compile(r"[\s>+~]+")


def specificity(selector: str) -> int:
    """Simplified cascade weight: ids x100, classes/attributes/pseudos x10, elements x1.

    ``!important`` is not part of the score.
    """
    ids = selector.count("#")
    qualifiers = selector.count(".") + selector.count("[") + selector.count(":")
    elements = sum(1 for part in _COMBINATORS.split(selector) if part[:1].isalpha())
    return ids * 100 + qualifiers * 10 + elements


@dataclass(frozen=True)
class _Occurrence:
    offset: int
    important: bool


class OverrideAnalyzer(Analyzer):
    """Reports every re-declaration of a property inside the same selector text.

    Declarations are grouped by ``(conditional at-rule, selector, property)``,
    so the same property on two different selectors is never a conflict.
    """

    def supports(self, document: ComponentDocument) -> bool:
        return bool(document.result.styles)

    def analyze(self, document: ComponentDocument) -> None:
        sheets = document.sheets or [
            parse_stylesheet(document.text[region.start : region.end])
            for region in document.result.styles
        ]
        document.result.css_overrides = find_overrides(
            document.index, list(zip(document.result.styles, sheets))
        )


def find_overrides(
    index: PositionIndex, blocks: Sequence[Tuple[StyleRegion, StyleSheet]]
) -> List[CSSOverride]:
    groups: Dict[Tuple[str, str, str], List[_Occurrence]] = {}
    for region, sheet in blocks:
        for rule in sheet.rules:
            selectors = [
                " ".join(part.split())
                for part, _ in split_selector_list(rule.raw_text or rule.selector_text)
            ]
            for declaration in rule.declarations:
                occurrence = _Occurrence(region.start + declaration.offset, declaration.important)
                for selector in selectors:
                    key = (rule.context, selector, declaration.property)
                    groups.setdefault(key, []).append(occurrence)

    overrides: List[Tuple[int, CSSOverride]] = []
    for (_, selector, property_name), occurrences in groups.items():
        if len(occurrences) < 2:
            continue
        occurrences.sort(key=lambda occurrence: occurrence.offset)
        weight = specificity(selector)
        for previous, current in zip(occurrences, occurrences[1:]):
            overrides.append(
                (
                    current.offset,
                    CSSOverride(
                        property=property_name,
                        selector=selector,
                        position=index.position(current.offset),
                        specificity=weight,
                        important=current.important,
                        previous=index.position(previous.offset),
                    ),
                )
            )
    overrides.sort(key=lambda item: (item[0], item[1].selector))
    return [override for _, override in overrides]


__all__ = ["OverrideAnalyzer", "find_overrides", "specificity"]
