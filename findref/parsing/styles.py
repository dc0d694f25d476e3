"""Selector and ``@import`` extraction for style regions."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from ..models import CSSImport, CSSSelector, SelectorKind, StyleRegion, Usage
from .css import CSSRule, StyleSheet, parse_stylesheet
from .positions import PositionIndex

# characters that end a selector name
_NAME_STOP = set(" :>+~[,(")
_GLOBAL_WRAPPER = re.compile(r":global\((.*)\)\s*$")
_ALWAYS_PRESENT = {"html", "body", "*", ":root"}
_IMPORT_PATH = re.compile(r"""@import\s+(?:url\(\s*)?(['"]?)([^'")\s;]+)\1""", re.IGNORECASE)

AUTO_USED_CONTEXTS = {
    "descendant": "descendant selector auto-detected as used",
    "attribute": "attribute selector auto-detected as used",
    "global": "global selector auto-detected as used",
}


def split_selector_list(text: str) -> List[Tuple[str, int]]:
    """Split a selector list on top-level commas, returning each part and its offset."""
    parts: List[Tuple[str, int]] = []
    depth = 0
    start = 0
    for index, char in enumerate(text + ","):
        if char in "([":
            depth += 1
        elif char in ")]":
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            raw = text[start:index]
            stripped = raw.strip()
            if stripped:
                parts.append((stripped, start + len(raw) - len(raw.lstrip())))
            start = index + 1
    return parts


def selector_name(selector: str) -> str:
    """Leading name of a selector, without its ``.``/``#`` marker."""
    if selector[:1] in (".", "#"):
        selector = selector[1:]
    end = 0
    while end < len(selector) and selector[end] not in _NAME_STOP:
        end += 1
    return selector[:end]


def classify_selector(selector: str) -> Tuple[SelectorKind, str, Optional[str]]:
    """Return ``(kind, name, auto_used_attribute)`` for one selector.

    ``auto_used_attribute`` is set for selectors that are assumed used without
    looking at the markup.
    """
    is_global = False
    while ":global" in selector:
        is_global = True
        wrapped = _GLOBAL_WRAPPER.match(selector) if selector.startswith(":global(") else None
        if wrapped:
            selector = wrapped.group(1).strip()
        else:
            selector = selector.split(":global", 1)[0].strip() or "*"
    if is_global:
        kind, name, _ = _classify_local(selector)
        return kind, name, "global"
    return _classify_local(selector)


def _classify_local(selector: str) -> Tuple[SelectorKind, str, Optional[str]]:
    if " " in selector and not any(char in selector for char in ":>+~"):
        last = selector.split()[-1]
        return "descendant", selector_name(last), "descendant"
    if selector.startswith("."):
        return "class", selector_name(selector), None
    if selector.startswith("#"):
        return "id", selector_name(selector), None
    if "[" in selector:
        head = selector.split("[", 1)[0]
        if head:
            name = selector_name(head)
        else:
            name = re.split(r"[=~|^$*\]\s]", selector[1:], maxsplit=1)[0]
        return "attribute", name, "attribute"

    name = selector_name(selector) or selector
    if name in _ALWAYS_PRESENT or selector in _ALWAYS_PRESENT:
        return "element", name, "global"
    return "element", name, None


class SelectorExtractor:
    """Produces one :class:`CSSSelector` per distinct selector text of a style region."""

    def __init__(self, text: str, index: Optional[PositionIndex] = None) -> None:
        self._text = text
        self._index = index or PositionIndex(text)

    def extract(self, region: StyleRegion, sheet: Optional[StyleSheet] = None) -> List[CSSSelector]:
        if sheet is None:
            sheet = parse_stylesheet(self._text[region.start : region.end])
        selectors: Dict[str, CSSSelector] = {}
        for rule in sheet.rules:
            if rule.context.startswith("@"):
                # rules under @media and friends are not extracted
                continue
            for part, relative in split_selector_list(rule.raw_text or rule.selector_text):
                selector = self._selector(region, rule, " ".join(part.split()), relative)
                if selector is None:
                    continue
                existing = selectors.get(selector.selector_text)
                if existing is None:
                    selectors[selector.selector_text] = selector
                else:
                    existing.properties.extend(selector.properties)
        return list(selectors.values())

    def _selector(
        self, region: StyleRegion, rule: CSSRule, part: str, relative: int
    ) -> Optional[CSSSelector]:
        if "&" in part or part == ":global":
            return None
        kind, name, auto_used = classify_selector(part)
        if not name:
            return None
        if auto_used is None and any(
            ancestor.selector_text.startswith(":global") for ancestor in rule.ancestors()
        ):
            auto_used = "global"
        position = self._index.position(region.start + rule.offset + relative)
        selector = CSSSelector(
            selector_text=part,
            kind=kind,
            name=name,
            position=position,
            source_block=region.label,
            properties=[declaration.property for declaration in rule.declarations],
        )
        if auto_used is not None:
            selector.html_usages.append(
                Usage(
                    position=position,
                    context=AUTO_USED_CONTEXTS[auto_used],
                    attribute=auto_used,
                )
            )
        return selector


def extract_css_imports(
    text: str, region: StyleRegion, index: PositionIndex, sheet: Optional[StyleSheet] = None
) -> List[CSSImport]:
    """``@import`` statements of a style region."""
    if sheet is None:
        sheet = parse_stylesheet(text[region.start : region.end])
    imports: List[CSSImport] = []
    for statement in sheet.statements:
        if statement.name != "import":
            continue
        match = _IMPORT_PATH.match(statement.prelude)
        if not match:
            continue
        imports.append(
            CSSImport(path=match.group(2), position=index.position(region.start + statement.offset))
        )
    return imports


__all__ = [
    "AUTO_USED_CONTEXTS",
    "SelectorExtractor",
    "classify_selector",
    "extract_css_imports",
    "selector_name",
    "split_selector_list",
]
