"""Character-level helpers shared by the region, script and markup scans."""

from __future__ import annotations

from typing import Iterator, List


def is_identifier_char(char: str) -> bool:
    """Return True for characters that may appear inside a script identifier."""
    return char.isalnum() or char == "_" or char == "$"


def read_identifier(text: str, start: int) -> int:
    """Return the end offset of the identifier run beginning at ``start``."""
    index = start
    length = len(text)
    while index < length and is_identifier_char(text[index]):
        index += 1
    return index


def read_identifier_backwards(text: str, end: int) -> int:
    """Return the start offset of the identifier run ending right before ``end``."""
    index = end
    while index > 0 and is_identifier_char(text[index - 1]):
        index -= 1
    return index


def skip_whitespace(text: str, index: int) -> int:
    length = len(text)
    while index < length and text[index].isspace():
        index += 1
    return index


def skip_whitespace_backwards(text: str, index: int) -> int:
    """Return the offset of the last non-whitespace character at or before ``index``."""
    while index >= 0 and text[index].isspace():
        index -= 1
    return index


def is_whole_token(text: str, start: int, end: int) -> bool:
    """Return True when ``text[start:end]`` is not glued to identifier characters."""
    if start > 0 and is_identifier_char(text[start - 1]):
        return False
    if end < len(text) and is_identifier_char(text[end]):
        return False
    return True


def find_all(text: str, needle: str, start: int = 0, end: int | None = None) -> Iterator[int]:
    """Yield every offset of ``needle`` in ``text`` (overlapping matches included)."""
    if not needle:
        return
    limit = len(text) if end is None else end
    position = text.find(needle, start, limit)
    while position != -1:
        yield position
        position = text.find(needle, position + 1, limit)


def find_tokens(text: str, name: str, start: int = 0, end: int | None = None) -> List[int]:
    """Return offsets where ``name`` occurs as a whole identifier token."""
    return [
        position
        for position in find_all(text, name, start, end)
        if is_whole_token(text, position, position + len(name))
    ]


def find_matching(text: str, open_index: int, opener: str, closer: str) -> int:
    """Return the offset of the bracket closing ``text[open_index]``, or -1."""
    depth = 0
    quote: str | None = None
    for index in range(open_index, len(text)):
        char = text[index]
        if quote:
            if char == quote and text[index - 1] != "\\":
                quote = None
            continue
        if char in "'\"`" and index != open_index:
            quote = char
            continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
    return -1


def mask_comments(text: str) -> str:
    """Blank out ``//`` and ``/* */`` comments while keeping every offset and newline."""
    chars = list(text)
    length = len(text)
    index = 0
    quote: str | None = None
    while index < length:
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote or (char == "\n" and quote != "`"):
                quote = None
            index += 1
            continue
        if char in "'\"`":
            quote = char
            index += 1
            continue
        if text.startswith("//", index):
            end = text.find("\n", index)
            end = length if end == -1 else end
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            end = length if end == -1 else end + 2
        else:
            index += 1
            continue
        for position in range(index, end):
            if chars[position] != "\n":
                chars[position] = " "
        index = end
    return "".join(chars)


def line_end(text: str, index: int) -> int:
    """Return the offset of the newline ending the line at ``index`` (or ``len(text)``)."""
    end = text.find("\n", index)
    return len(text) if end == -1 else end


__all__ = [
    "find_all",
    "find_matching",
    "find_tokens",
    "is_identifier_char",
    "is_whole_token",
    "line_end",
    "mask_comments",
    "read_identifier",
    "read_identifier_backwards",
    "skip_whitespace",
    "skip_whitespace_backwards",
]
