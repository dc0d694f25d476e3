"""Splits a component file into script, style and markup regions."""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..logging import get_logger
from ..models import ScriptRegion, StyleRegion

_ATTRIBUTE = re.compile(r"""([A-Za-z_:][\w:.-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?""")
_GLOBAL_TOKEN = re.compile(r"(?<![\w-])global(?![\w-])")
_TAG_NAME_END = set(" \t\r\n>/")

logger = get_logger("parsing.regions")


@dataclass(frozen=True)
class _ElementSpan:
    element_start: int
    tag_end: int
    close_start: int
    element_end: int


class RegionSplitter:
    """Locates ``<script>`` and ``<style>`` elements without nesting awareness."""

    def split(self, text: str) -> Tuple[List[ScriptRegion], List[StyleRegion]]:
        script_spans = _scan_elements(text, "script")
        style_spans = [
            span for span in _scan_elements(text, "style") if not _inside(span, script_spans)
        ]

        scripts: List[ScriptRegion] = []
        for span in script_spans:
            tag = text[span.element_start : span.tag_end + 1]
            attributes = parse_attributes(tag, "script")
            scripts.append(
                ScriptRegion(
                    start=span.tag_end + 1,
                    end=span.close_start,
                    element_start=span.element_start,
                    element_end=span.element_end,
                    language=attributes.get("lang"),
                    is_module_context=attributes.get("context") == "module" or "module" in attributes,
                    attributes=attributes,
                )
            )

        styles: List[StyleRegion] = []
        for index, span in enumerate(style_spans):
            tag = text[span.element_start : span.tag_end + 1]
            attributes = parse_attributes(tag, "style")
            styles.append(
                StyleRegion(
                    start=span.tag_end + 1,
                    end=span.close_start,
                    element_start=span.element_start,
                    element_end=span.element_end,
                    index=index,
                    language=attributes.get("lang") or "css",
                    is_scoped=_GLOBAL_TOKEN.search(tag) is None,
                    attributes=attributes,
                )
            )

        logger.debug("Found %d script and %d style regions", len(scripts), len(styles))
        return scripts, styles


def _scan_elements(text: str, tag_name: str) -> List[_ElementSpan]:
    open_token = f"<{tag_name}"
    close_token = f"</{tag_name}>"
    spans: List[_ElementSpan] = []
    cursor = 0
    while True:
        start = text.find(open_token, cursor)
        if start == -1:
            break
        after = start + len(open_token)
        if after < len(text) and text[after] not in _TAG_NAME_END:
            # <scripts>, <styled-box> and friends are not region tags
            cursor = after
            continue
        tag_end = text.find(">", after)
        if tag_end == -1:
            logger.debug("Unterminated <%s> tag at offset %d; abandoning scan", tag_name, start)
            break
        close_start = text.find(close_token, tag_end)
        if close_start == -1:
            logger.debug("Missing %s after offset %d; abandoning scan", close_token, tag_end)
            break
        element_end = close_start + len(close_token)
        spans.append(_ElementSpan(start, tag_end, close_start, element_end))
        cursor = element_end
    return spans


def _inside(span: _ElementSpan, containers: Sequence[_ElementSpan]) -> bool:
    return any(
        container.element_start <= span.element_start < container.element_end
        for container in containers
    )


def parse_attributes(tag: str, tag_name: str) -> Dict[str, str]:
    """Return attributes of an opening tag; bare attributes map to an empty string."""
    body = tag[len(tag_name) + 1 :]
    if body.endswith(">"):
        body = body[:-1]
    attributes: Dict[str, str] = {}
    for match in _ATTRIBUTE.finditer(body):
        name = match.group(1)
        value = next((group for group in match.groups()[1:] if group is not None), "")
        attributes.setdefault(name, value)
    return attributes


class MarkupView:
    """The file text with every script and style element removed.

    Offsets inside :attr:`text` map back to source offsets through
    :meth:`source_offset`.
    """

    def __init__(self, source: str, removed: Sequence[Tuple[int, int]]) -> None:
        pieces: List[str] = []
        self._markup_starts: List[int] = []
        self._source_starts: List[int] = []
        cursor = 0
        length = 0
        for start, end in sorted(removed):
            if start > cursor:
                self._markup_starts.append(length)
                self._source_starts.append(cursor)
                pieces.append(source[cursor:start])
                length += start - cursor
            cursor = max(cursor, end)
        if cursor < len(source) or not self._markup_starts:
            self._markup_starts.append(length)
            self._source_starts.append(cursor)
            pieces.append(source[cursor:])
        self.text = "".join(pieces)

    @classmethod
    def from_regions(
        cls, source: str, scripts: Sequence[ScriptRegion], styles: Sequence[StyleRegion]
    ) -> "MarkupView":
        removed = [(region.element_start, region.element_end) for region in scripts]
        removed.extend((region.element_start, region.element_end) for region in styles)
        return cls(source, removed)

    def source_offset(self, markup_offset: int) -> int:
        segment = max(0, bisect_right(self._markup_starts, markup_offset) - 1)
        return self._source_starts[segment] + (markup_offset - self._markup_starts[segment])


__all__ = ["MarkupView", "RegionSplitter", "parse_attributes"]
