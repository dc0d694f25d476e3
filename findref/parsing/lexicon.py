"""Name lists and look-arounds that tell real declarations from lookalikes.

These are allowlists and textual checks, not semantic analysis, and are
approximate by nature.
"""

from __future__ import annotations

from typing import FrozenSet

from .text import skip_whitespace, skip_whitespace_backwards

CONTROL_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "if",
        "while",
        "for",
        "switch",
        "catch",
        "try",
        "with",
        "do",
        # reserved words that precede parentheses in expressions
        "function",
        "return",
        "await",
        "typeof",
        "new",
        "else",
    }
)

BUILTIN_METHODS: FrozenSet[str] = frozenset(
    {
        # DOM
        "contains",
        "closest",
        "querySelector",
        "querySelectorAll",
        "getElementById",
        "getElementsByClassName",
        "getElementsByTagName",
        "addEventListener",
        "removeEventListener",
        "appendChild",
        "removeChild",
        "insertBefore",
        "cloneNode",
        "setAttribute",
        "getAttribute",
        "removeAttribute",
        "focus",
        "blur",
        "click",
        "submit",
        "reset",
        # String
        "trim",
        "startsWith",
        "endsWith",
        "includes",
        "indexOf",
        "lastIndexOf",
        "substring",
        "substr",
        "slice",
        "split",
        "replace",
        "replaceAll",
        "toLowerCase",
        "toUpperCase",
        "charAt",
        "charCodeAt",
        # Array
        "push",
        "pop",
        "shift",
        "unshift",
        "splice",
        "concat",
        "join",
        "reverse",
        "sort",
        "filter",
        "map",
        "reduce",
        "forEach",
        "find",
        "findIndex",
        "some",
        "every",
        # Object
        "keys",
        "values",
        "entries",
        "hasOwnProperty",
        "toString",
        "valueOf",
        # globals
        "isArray",
        "parseInt",
        "parseFloat",
        "isNaN",
        "isFinite",
        "encodeURIComponent",
        "decodeURIComponent",
        "setTimeout",
        "clearTimeout",
        "setInterval",
        "clearInterval",
    }
)

GEOMETRY_IDENTIFIERS: FrozenSet[str] = frozenset(
    {"x", "y", "z", "width", "height", "top", "left", "right", "bottom"}
)

TYPE_KEYWORDS = (
    "number",
    "string",
    "boolean",
    "object",
    "any",
    "void",
    "null",
    "undefined",
    "unknown",
    "never",
)


def is_control_keyword(name: str) -> bool:
    return name in CONTROL_KEYWORDS


def starts_with_type_keyword(text: str) -> bool:
    stripped = text.lstrip()
    for keyword in TYPE_KEYWORDS:
        if stripped.startswith(keyword):
            rest = stripped[len(keyword) : len(keyword) + 1]
            if not rest or not (rest.isalnum() or rest in "_$"):
                return True
    return False


def looks_like_type_annotation(content: str, name_start: int, name_end: int) -> bool:
    """Return True when the identifier at ``name_start`` sits in a type annotation.

    Evidence is either a ``:`` immediately before the name, or a geometry-ish
    name inside a ``{ ... : ... }`` type literal.
    """
    before = skip_whitespace_backwards(content, name_start - 1)
    if before >= 0 and content[before] == ":":
        return True

    window = content[max(0, name_start - 10) : name_start]
    if "{" in window and ":" in window:
        return True

    if content[name_start:name_end] not in GEOMETRY_IDENTIFIERS:
        return False
    if inside_type_literal(content, name_start):
        return True
    after = skip_whitespace(content, name_end)
    return (
        after < len(content)
        and content[after] in ":?"
        and starts_with_type_keyword(content[after + 1 : after + 16].lstrip("?:"))
    )


def inside_type_literal(content: str, offset: int) -> bool:
    """Return True when the innermost unclosed ``{`` before ``offset`` opens a type literal."""
    depth = 0
    for index in range(offset - 1, -1, -1):
        char = content[index]
        if char == "}":
            depth += 1
        elif char == "{":
            if depth == 0:
                return _opens_type_literal(content, index)
            depth -= 1
    return False


def _opens_type_literal(content: str, brace: int) -> bool:
    before = skip_whitespace_backwards(content, brace - 1)
    if before < 0:
        return False
    if content[before] in ":<|&":
        return True
    line_start = content.rfind("\n", 0, brace) + 1
    head = content[line_start:brace].strip()
    return head.startswith(("type ", "interface ", "export type ", "export interface "))


__all__ = [
    "BUILTIN_METHODS",
    "CONTROL_KEYWORDS",
    "GEOMETRY_IDENTIFIERS",
    "TYPE_KEYWORDS",
    "inside_type_literal",
    "is_control_keyword",
    "looks_like_type_annotation",
    "starts_with_type_keyword",
]
