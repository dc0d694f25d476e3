"""Usage resolution for declarations, selectors and component imports.

Every lookup is a textual probe with a kind-specific set of patterns. An
empty usage list means no evidence was found, nothing more. Where a pattern
is ambiguous the resolver leans towards recording a usage, so dynamically
built class names and callbacks are not reported as unused.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..models import (
    ComponentImport,
    ComponentUsage,
    CSSSelector,
    Function,
    ImportStatement,
    ScriptRegion,
    Usage,
    Variable,
)
from ..parsing.positions import line_context
from ..parsing.text import find_all, find_matching, find_tokens, is_identifier_char, is_whole_token
from .base import Analyzer, ComponentDocument

_CLASS_ATTRIBUTE = re.compile(r"(?<![\w:-])class\s*=\s*")
_ID_ATTRIBUTE = re.compile(r"""(?<![\w:-])id\s*=\s*(["'])(.*?)\1""", re.DOTALL)
_COMPONENT_TAG = re.compile(r"<([A-Z][A-Za-z0-9_]*)")
_COMPONENT_THIS = re.compile(r"\bthis\s*=\s*\{\s*([A-Z][\w$]*)\s*\}")
_TAG_OPEN = re.compile(r"<([A-Za-z][\w:.-]*)")

# characters allowed right after a tag or directive name
_TAG_NAME_END = set(" \t\r\n>/")
_LISTENER_WINDOW = 100
_LISTENER_CALLS = ("addEventListener(", "removeEventListener(")
# (prefix, suffix) probes wrapped around a function name
_FUNCTION_PROBES: Tuple[Tuple[str, str], ...] = (
    ("", "("),
    ("{", "}"),
    ("on:", ""),
    ("use:", ""),
    ("$: ", ""),
    ("[", "]"),
    (", ", ")"),
    ("(", ","),
    (" ", " "),
)


class _ClassAttribute:
    __slots__ = ("offset", "value", "value_offset", "end")

    def __init__(self, offset: int, value: str, value_offset: int, end: int) -> None:
        self.offset = offset
        self.value = value
        self.value_offset = value_offset
        self.end = end

    @property
    def is_dynamic(self) -> bool:
        return "{" in self.value


class UsageResolver(Analyzer):
    """Populates the ``usages``/``html_usages`` lists of everything extracted from a file."""

    def supports(self, document: ComponentDocument) -> bool:
        return bool(document.text)

    def analyze(self, document: ComponentDocument) -> None:
        result = document.result
        for variable in result.variables:
            variable.usages = self.variable_usages(document, variable)
        for function in result.functions:
            function.usages = self.function_usages(document, function)
        for statement in result.imports:
            statement.usages = self.import_usages(document, statement)

        result.component_usages = self.component_usages(document)
        link_component_usages(result.component_imports, result.component_usages)

        class_attributes = _class_attributes(document.markup.text)
        for selector in result.css_selectors:
            if selector.html_usages:
                continue
            selector.html_usages = self.selector_usages(document, selector, class_attributes)

    # -- script declarations -------------------------------------------

    def variable_usages(self, document: ComponentDocument, variable: Variable) -> List[Usage]:
        """Whole-token hits in the owning script, minus the declaring token itself.

        With ``scan_markup_for_variables`` enabled, hits inside markup ``{...}``
        expressions and ``bind:``/``class:`` directives count as well.
        """
        text = document.text
        region = _owning_script(document.result.scripts, variable.name_offset)
        offsets: List[int] = []
        if region is not None:
            offsets.extend(
                offset
                for offset in find_tokens(text, variable.name, region.start, region.end)
                if offset != variable.name_offset
            )
            # store auto-subscriptions read the store through a $-prefixed name
            offsets.extend(find_tokens(text, "$" + variable.name, region.start, region.end))
        if document.options.scan_markup_for_variables:
            markup = document.markup.text
            for candidate in (variable.name, "$" + variable.name):
                for offset in find_tokens(markup, candidate):
                    if _in_markup_expression(markup, offset) or _after_directive(markup, offset):
                        offsets.append(document.markup.source_offset(offset))
        return [_usage(document, offset) for offset in sorted(set(offsets))]

    def function_usages(self, document: ComponentDocument, function: Function) -> List[Usage]:
        text = document.text
        name = function.name
        declaration_line = function.position.line
        offsets: Set[int] = set()

        for prefix, suffix in _FUNCTION_PROBES:
            needle = f"{prefix}{name}{suffix}"
            for hit in find_all(text, needle):
                start = hit + len(prefix)
                if not is_whole_token(text, start, start + len(name)):
                    continue
                offsets.add(hit)

        for call in _LISTENER_CALLS:
            for hit in find_all(text, call):
                window_start = hit + len(call)
                window = text[window_start : window_start + _LISTENER_WINDOW]
                if find_tokens(window, name):
                    offsets.add(hit)

        usages: List[Usage] = []
        for offset in sorted(offsets):
            if document.index.line(offset) == declaration_line:
                continue
            usages.append(_usage(document, offset))
        return usages

    def import_usages(self, document: ComponentDocument, statement: ImportStatement) -> List[Usage]:
        text = document.text
        offsets: Set[int] = set()
        for symbol in statement.symbols:
            for offset in find_tokens(text, symbol):
                if statement.offset <= offset < statement.end_offset:
                    continue
                offsets.add(offset)
        return [_usage(document, offset) for offset in sorted(offsets)]

    # -- components ----------------------------------------------------

    def component_usages(self, document: ComponentDocument) -> List[ComponentUsage]:
        markup = document.markup.text
        found: List[Tuple[int, str]] = []
        for match in _COMPONENT_TAG.finditer(markup):
            if markup.find(">", match.end()) == -1:
                continue
            found.append((match.start(), match.group(1)))
        for match in _COMPONENT_THIS.finditer(markup):
            found.append((match.start(1), match.group(1)))

        usages: List[ComponentUsage] = []
        for markup_offset, name in sorted(found):
            offset = document.markup.source_offset(markup_offset)
            usages.append(
                ComponentUsage(
                    component_name=name,
                    position=document.index.position(offset),
                    context=line_context(document.text, offset),
                )
            )
        return usages

    # -- selectors -----------------------------------------------------

    def selector_usages(
        self,
        document: ComponentDocument,
        selector: CSSSelector,
        class_attributes: Optional[Sequence[_ClassAttribute]] = None,
    ) -> List[Usage]:
        if class_attributes is None:
            class_attributes = _class_attributes(document.markup.text)
        if selector.kind == "class":
            return self._class_usages(document, selector, class_attributes)
        if selector.kind == "id":
            return self._id_usages(document, selector)
        if selector.kind == "element":
            return self._element_usages(document, selector)
        return []

    def _class_usages(
        self,
        document: ComponentDocument,
        selector: CSSSelector,
        class_attributes: Sequence[_ClassAttribute],
    ) -> List[Usage]:
        markup = document.markup.text
        name = selector.name
        usages: List[Tuple[int, Usage]] = []

        for attribute in class_attributes:
            offset = _static_class_offset(attribute, name)
            if offset is None and attribute.is_dynamic and _dynamic_class_match(
                attribute.value, markup, name
            ):
                offset = attribute.offset
            if offset is not None:
                usages.append((offset, self._markup_usage(document, offset, "class")))

        directive = f"class:{name.split('.')[1] if '.' in name else name}"
        for hit in find_all(markup, directive):
            after = hit + len(directive)
            if hit > 0 and is_identifier_char(markup[hit - 1]):
                continue
            if after < len(markup) and markup[after] not in _TAG_NAME_END and markup[after] != "=":
                continue
            usages.append((hit, self._markup_usage(document, hit, "class:directive")))

        spans = [(attribute.offset, attribute.end) for attribute in class_attributes]
        for quote in ("'", '"'):
            for hit in find_all(markup, f"{quote}{name}{quote}"):
                if any(start <= hit < end for start, end in spans):
                    continue
                usages.append((hit, self._markup_usage(document, hit, "dynamic")))

        usages.sort(key=lambda item: item[0])
        return [usage for _, usage in usages]

    def _id_usages(self, document: ComponentDocument, selector: CSSSelector) -> List[Usage]:
        if selector.is_global and selector.name in document.options.global_ids:
            return [
                Usage(
                    position=selector.position,
                    context="global ID auto-detected as used",
                    element="global",
                    attribute="id",
                )
            ]
        markup = document.markup.text
        return [
            self._markup_usage(document, match.start(), "id")
            for match in _ID_ATTRIBUTE.finditer(markup)
            if match.group(2).strip() == selector.name
        ]

    def _element_usages(self, document: ComponentDocument, selector: CSSSelector) -> List[Usage]:
        markup = document.markup.text
        needle = f"<{selector.name}"
        usages: List[Usage] = []
        for hit in find_all(markup, needle):
            after = hit + len(needle)
            if after < len(markup) and markup[after] not in _TAG_NAME_END:
                continue
            usages.append(
                self._markup_usage(document, hit, "element", element=selector.name)
            )
        return usages

    def _markup_usage(
        self,
        document: ComponentDocument,
        markup_offset: int,
        attribute: str,
        element: Optional[str] = None,
    ) -> Usage:
        offset = document.markup.source_offset(markup_offset)
        return Usage(
            position=document.index.position(offset),
            context=line_context(document.text, offset),
            element=element or enclosing_element(document.markup.text, markup_offset),
            attribute=attribute,
        )


def link_component_usages(
    imports: Iterable[ComponentImport], usages: Sequence[ComponentUsage]
) -> None:
    by_name: Dict[str, List[ComponentUsage]] = {}
    for usage in usages:
        by_name.setdefault(usage.component_name, []).append(usage)
    for component in imports:
        component.usages = [
            Usage(position=usage.position, context=usage.context, element=usage.component_name)
            for usage in by_name.get(component.component_name, [])
        ]


def enclosing_element(markup: str, offset: int) -> str:
    """Name of the tag whose opening ``<`` most recently precedes ``offset``."""
    start = markup.rfind("<", 0, offset + 1)
    if start == -1:
        return "unknown"
    match = _TAG_OPEN.match(markup, start)
    return match.group(1) if match else "unknown"


def _usage(document: ComponentDocument, offset: int) -> Usage:
    return Usage(
        position=document.index.position(offset),
        context=line_context(document.text, offset),
    )


def _owning_script(scripts: Sequence[ScriptRegion], offset: int) -> Optional[ScriptRegion]:
    for region in scripts:
        if region.start <= offset < region.end:
            return region
    return None


def _in_markup_expression(markup: str, offset: int) -> bool:
    opening = markup.rfind("{", 0, offset)
    return opening != -1 and markup.rfind("}", 0, offset) < opening


def _after_directive(markup: str, offset: int) -> bool:
    return markup.endswith(("bind:", "class:"), 0, offset)


def _class_attributes(markup: str) -> List[_ClassAttribute]:
    attributes: List[_ClassAttribute] = []
    for match in _CLASS_ATTRIBUTE.finditer(markup):
        start = match.end()
        if start >= len(markup):
            break
        opener = markup[start]
        if opener in "\"'":
            close = markup.find(opener, start + 1)
            if close == -1:
                continue
            attributes.append(
                _ClassAttribute(match.start(), markup[start + 1 : close], start + 1, close + 1)
            )
        elif opener == "{":
            close = find_matching(markup, start, "{", "}")
            if close == -1:
                continue
            attributes.append(
                _ClassAttribute(match.start(), markup[start : close + 1], start, close + 1)
            )
    return attributes


def _static_class_offset(attribute: _ClassAttribute, name: str) -> Optional[int]:
    """Offset of ``name`` among the whitespace-separated classes of a class attribute."""
    parts = name.split(".")
    value = attribute.value
    tokens = value.split()
    if not all(part in tokens for part in parts):
        return None
    for match in re.finditer(r"\S+", value):
        if match.group(0) == parts[0]:
            return attribute.value_offset + match.start()
    return attribute.offset


def _dynamic_class_match(value: str, markup: str, name: str) -> bool:
    """Heuristics for class names composed inside a ``{...}`` attribute value."""
    for quote in ("'", '"'):
        for separator in ("? ", ": "):
            if f"{separator}{quote}{name}{quote}" in value:
                return True

    if "-" in name:
        prefix = name.split("-", 1)[0]
        if f"{prefix}-{{" in value:
            return True
        if f"'{prefix}-' + " in markup or f'"{prefix}-" + ' in markup:
            return True
        if f"{prefix}-${{" in value:
            return True
        for opener in ("`", '"', "'"):
            if f"{opener}{prefix}-${{" in markup:
                return True

    if "." in name:
        parts = name.split(".")
        base = parts[0]
        if f"{base}.{{" in value:
            return True
        if len(parts) == 2 and " {" in value.strip() and base in value:
            return True
    return False


__all__ = ["UsageResolver", "enclosing_element", "link_component_usages"]
