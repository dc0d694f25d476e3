"""Brace-driven scanner for the body of a style region.

The scanner walks a comment-masked copy of the stylesheet and cuts it into
rule blocks, declarations and at-rule statements. Offsets are relative to the
scanned text so callers can translate them with their region's start offset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# at-rules whose bodies never contain selectors
SKIPPED_AT_RULES = (
    "keyframes",
    "font-face",
    "page",
    "counter-style",
    "property",
    "font-feature-values",
)
# at-rules whose bodies hold ordinary rules under a condition
CONDITIONAL_AT_RULES = ("media", "supports", "container", "layer", "document", "scope")

_PROPERTY_NAME = re.compile(r"^(?:--|-?[A-Za-z_])[\w-]*$")
_IMPORTANT = re.compile(r"!\s*important\b", re.IGNORECASE)
_AT_NAME = re.compile(r"@(-?[A-Za-z][\w-]*)")


@dataclass(frozen=True)
class CSSDeclaration:
    property: str
    offset: int
    value: str
    important: bool = False


@dataclass
class CSSRule:
    """A selector list with the declarations written directly inside its braces."""

    selector_text: str
    offset: int
    raw_text: str = ""
    context: str = ""
    parent: Optional["CSSRule"] = None
    declarations: List[CSSDeclaration] = field(default_factory=list)

    def ancestors(self) -> List["CSSRule"]:
        chain: List[CSSRule] = []
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        return chain


@dataclass(frozen=True)
class CSSStatement:
    """A bodiless at-rule such as ``@import "x.css";``."""

    name: str
    prelude: str
    offset: int


@dataclass
class StyleSheet:
    rules: List[CSSRule] = field(default_factory=list)
    statements: List[CSSStatement] = field(default_factory=list)


def at_rule_name(header: str) -> str:
    """Return the lower-cased at-rule name with any vendor prefix removed."""
    match = _AT_NAME.match(header)
    if not match:
        return ""
    name = match.group(1).lower()
    if name.startswith("-"):
        name = name.split("-", 2)[-1]
    return name


def mask_css_comments(text: str) -> str:
    """Blank out ``/* */`` comments and ``//`` lines, keeping offsets intact."""
    chars = list(text)
    length = len(text)
    index = 0
    while index < length:
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            end = length if end == -1 else end + 2
        elif text.startswith("//", index) and _at_line_start(text, index):
            end = text.find("\n", index)
            end = length if end == -1 else end
        else:
            index += 1
            continue
        for position in range(index, end):
            if chars[position] != "\n":
                chars[position] = " "
        index = end
    return "".join(chars)


def _at_line_start(text: str, index: int) -> bool:
    return not text[text.rfind("\n", 0, index) + 1 : index].strip()


def parse_stylesheet(source: str) -> StyleSheet:
    """Cut ``source`` into rules and statements; never raises."""
    scanner = _Scanner(mask_css_comments(source))
    scanner.scan()
    return scanner.sheet


# (resume position, stop, conditional context, enclosing rule)
_Frame = Tuple[int, int, str, Optional[CSSRule]]


class _Scanner:
    """Walks nested blocks with an explicit frame stack, so nesting depth is unbounded."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.sheet = StyleSheet()
        self._closing = _brace_pairs(text)

    def scan(self) -> None:
        text = self.text
        frames: List[_Frame] = [(0, len(text), "", None)]
        while frames:
            position, stop, context, parent = frames.pop()
            while position < stop:
                while position < stop and text[position].isspace():
                    position += 1
                if position >= stop:
                    break
                delimiter, char = self._next_delimiter(position, stop)
                segment = text[position:delimiter]

                if char == "{":
                    close = min(self._closing.get(delimiter, stop), stop)
                    header = " ".join(segment.split())
                    child: Optional[_Frame] = None
                    if header.startswith("@"):
                        name = at_rule_name(header)
                        if name not in SKIPPED_AT_RULES:
                            nested_context = header if name in CONDITIONAL_AT_RULES else context
                            child = (delimiter + 1, close, nested_context, parent)
                    elif header:
                        rule = CSSRule(
                            selector_text=header,
                            offset=position,
                            raw_text=segment.rstrip(),
                            context=context,
                            parent=parent,
                        )
                        self.sheet.rules.append(rule)
                        child = (delimiter + 1, close, context, rule)
                    position = close + 1
                    if child is not None:
                        # finish the block before the rest of this level
                        frames.append((position, stop, context, parent))
                        frames.append(child)
                        break
                    continue

                stripped = segment.strip()
                if stripped.startswith("@"):
                    self.sheet.statements.append(
                        CSSStatement(name=at_rule_name(stripped), prelude=stripped, offset=position)
                    )
                elif parent is not None:
                    declaration = _parse_declaration(segment, position)
                    if declaration is not None:
                        parent.declarations.append(declaration)
                position = delimiter + 1

    def _next_delimiter(self, start: int, stop: int) -> Tuple[int, str]:
        """Offset and character of the next ``{``, ``;`` or ``}`` outside quotes and brackets."""
        text = self.text
        depth = 0
        quote: Optional[str] = None
        index = start
        while index < stop:
            char = text[index]
            if quote:
                if char == "\\":
                    index += 2
                    continue
                if char == quote:
                    quote = None
            elif char in "'\"":
                quote = char
            elif char in "([":
                depth += 1
            elif char in ")]":
                depth = max(0, depth - 1)
            elif depth == 0 and char in "{;}":
                return index, char
            index += 1
        return stop, ""


def _brace_pairs(text: str) -> Dict[int, int]:
    """Map each ``{`` offset to its closing ``}``; unterminated blocks are left out."""
    pairs: Dict[int, int] = {}
    openers: List[int] = []
    quote: Optional[str] = None
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "{":
            openers.append(index)
        elif char == "}" and openers:
            pairs[openers.pop()] = index
        index += 1
    return pairs


def _parse_declaration(segment: str, offset: int) -> Optional[CSSDeclaration]:
    colon = segment.find(":")
    if colon == -1:
        return None
    raw_property = segment[:colon]
    name = raw_property.strip()
    if not _PROPERTY_NAME.match(name):
        return None
    value = segment[colon + 1 :].strip()
    leading = len(raw_property) - len(raw_property.lstrip())
    return CSSDeclaration(
        property=name.lower() if not name.startswith("--") else name,
        offset=offset + leading,
        value=value,
        important=_IMPORTANT.search(value) is not None,
    )


__all__ = [
    "CONDITIONAL_AT_RULES",
    "CSSDeclaration",
    "CSSRule",
    "CSSStatement",
    "SKIPPED_AT_RULES",
    "StyleSheet",
    "at_rule_name",
    "mask_css_comments",
    "parse_stylesheet",
]
