"""Declaration extraction for script regions.

Each region is scanned with regular expressions and bracket matching over a
comment-masked copy of its text. Nothing here builds a syntax tree; shapes
that merely look like declarations are filtered with the helpers in
:mod:`findref.parsing.lexicon`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from .lexicon import (
    inside_type_literal,
    is_control_keyword,
    looks_like_type_annotation,
    starts_with_type_keyword,
)
from ..models import ComponentImport, Function, ImportStatement, Position, ScriptRegion, Variable
from .positions import PositionIndex
from .text import (
    find_matching,
    find_tokens,
    is_identifier_char,
    is_whole_token,
    line_end,
    mask_comments,
    read_identifier,
    read_identifier_backwards,
    skip_whitespace,
    skip_whitespace_backwards,
)

_IDENT = r"[A-Za-z_$][\w$]*"

_PROP = re.compile(rf"(?<![\w$.])export\s+(?:let|var)\s+({_IDENT})")
_RUNES_PROPS = re.compile(r"(?<![\w$.])(?:let|const)\s*(\{)")
_DECLARATION = re.compile(r"(?<![\w$.])(let|const|var)\s+(?=[A-Za-z_${\[])")
_REACTIVE = re.compile(rf"^[ \t]*\$:\s*({_IDENT})\s*=(?![=>])", re.MULTILINE)

_FUNCTION = re.compile(
    rf"(?<![\w$.])(?:(export)\s+)?(?:(async)\s+)?function\b\s*\*?\s*({_IDENT})\s*\("
)
_BINDING = re.compile(rf"(?<![\w$.])(?:(export)\s+)?(?:const|let|var)\s+({_IDENT})\s*")
_OBJECT_METHOD = re.compile(rf"(?<![\w$.?])({_IDENT})\s*:(?!:)")
_CALL_SHAPE = re.compile(rf"(?<![\w$.])({_IDENT})\s*\(")

_ES6_IMPORT = re.compile(
    r"""(?<![\w$.])import\s+((?:(?!\bimport\b)[^;'"`])*?)\s*\bfrom\s*(['"])([^'"]*)\2"""
)
_SIDE_EFFECT_IMPORT = re.compile(r"""(?<![\w$.])import\s*(['"])([^'"]*)\1""")
_DYNAMIC_IMPORT = re.compile(r"""(?<![\w$.])import\s*\(\s*(['"`])([^'"`]*)\1\s*\)""")

# a line ending in one of these continues the statement on the next line
_CONTINUATION_CHARS = ("=", "+", "-", "*", "/", "?", ":", "&", "|", "(", ",")


@dataclass
class ScriptDeclarations:
    """Declarations found in one script region, in registration order."""

    variables: List[Variable] = field(default_factory=list)
    imports: List[ImportStatement] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)


class DeclarationExtractor:
    """Extracts variables, functions and imports from script regions of one file."""

    def __init__(self, text: str, index: Optional[PositionIndex] = None) -> None:
        self._text = text
        self._index = index or PositionIndex(text)

    def extract(self, region: ScriptRegion) -> ScriptDeclarations:
        content = mask_comments(self._text[region.start : region.end])
        scan = _RegionScan(content, region.start, self._index)
        imports = scan.imports()
        functions, function_bindings = scan.functions()
        variables = scan.variables(skip_offsets=function_bindings)
        return ScriptDeclarations(variables=variables, imports=imports, functions=functions)


class _RegionScan:
    def __init__(self, content: str, base: int, index: PositionIndex) -> None:
        self.content = content
        self.base = base
        self.index = index

    def _position(self, local_offset: int) -> Position:
        return self.index.position(self.base + local_offset)

    # -- variables -----------------------------------------------------

    def variables(self, skip_offsets: Set[int]) -> List[Variable]:
        content = self.content
        found: List[Variable] = []
        seen: Set[str] = set()

        def register(name: str, kind: str, statement: int, name_offset: int) -> None:
            if name in seen or self.base + name_offset in skip_offsets:
                return
            seen.add(name)
            found.append(
                Variable(
                    name=name,
                    kind=kind,  # type: ignore[arg-type]
                    position=self._position(name_offset),
                    offset=self.base + statement,
                    name_offset=self.base + name_offset,
                )
            )

        for match in _PROP.finditer(content):
            register(match.group(1), "prop", match.start(), match.start(1))

        for match in _RUNES_PROPS.finditer(content):
            brace = match.start(1)
            close = find_matching(content, brace, "{", "}")
            if close == -1:
                continue
            assignment = _assignment_index(content, close + 1)
            if assignment is None:
                continue
            value = skip_whitespace(content, assignment + 1)
            if not content.startswith("$props", value):
                continue
            for name, offset in _pattern_names(content, brace, close):
                register(name, "prop", match.start(), offset)

        for match in _DECLARATION.finditer(content):
            if _preceded_by_word(content, match.start(), "export") and match.group(1) != "const":
                continue
            for name, offset in _declared_names(content, match.end()):
                register(name, match.group(1), match.start(), offset)

        reactive: List[Variable] = []
        for match in _REACTIVE.finditer(content):
            before = len(found)
            register(match.group(1), "reactive", match.start(), match.start(1))
            if len(found) > before:
                reactive.append(found[-1])

        declared = {variable.name for variable in found}
        for variable in reactive:
            statement_start = variable.name_offset - self.base
            equals = content.find("=", statement_start)
            rhs_end = _statement_end(content, equals + 1)
            rhs = content[equals + 1 : rhs_end]
            first_hits = {
                name: hits[0]
                for name, hits in ((name, find_tokens(rhs, name)) for name in declared)
                if hits and name != variable.name
            }
            variable.dependencies = sorted(first_hits, key=first_hits.__getitem__)
        return found

    # -- functions -----------------------------------------------------

    def functions(self) -> Tuple[List[Function], Set[int]]:
        """Return functions plus the name offsets of ``const f = () => ...`` bindings."""
        content = self.content
        found: List[Function] = []
        seen: Set[str] = set()
        bindings: Set[int] = set()

        def register(
            name: str, kind: str, name_offset: int, exported: bool, is_async: bool
        ) -> None:
            if name in seen:
                return
            seen.add(name)
            found.append(
                Function(
                    name=name,
                    kind=kind,  # type: ignore[arg-type]
                    position=self._position(name_offset),
                    offset=self.base + name_offset,
                    is_exported=exported,
                    is_async=is_async,
                )
            )

        for match in _FUNCTION.finditer(content):
            register(
                match.group(3),
                "function",
                match.start(3),
                bool(match.group(1)),
                bool(match.group(2)),
            )

        for match in _BINDING.finditer(content):
            assignment = _assignment_index(content, match.end())
            if assignment is None:
                continue
            value = skip_whitespace(content, assignment + 1)
            arrow = _arrow_at(content, value)
            if arrow is not None:
                kind, is_async = "arrow", arrow[1]
            elif _word_at(content, value, "function"):
                kind, is_async = "function", False
            elif _word_at(content, value, "async") and _word_at(
                content, skip_whitespace(content, value + 5), "function"
            ):
                kind, is_async = "function", True
            else:
                continue
            bindings.add(self.base + match.start(2))
            register(match.group(2), kind, match.start(2), bool(match.group(1)), is_async)

        for match in _OBJECT_METHOD.finditer(content):
            name = match.group(1)
            if is_control_keyword(name) or name in ("case", "default"):
                continue
            value = skip_whitespace(content, match.end())
            arrow = _arrow_at(content, value)
            if arrow is None:
                continue
            if starts_with_type_keyword(content[arrow[0] : arrow[0] + 16]):
                continue
            if inside_type_literal(content, match.start(1)):
                continue
            register(name, "method", match.start(1), False, arrow[1])

        for match in _CALL_SHAPE.finditer(content):
            name = match.group(1)
            if name in seen or is_control_keyword(name) or name == "constructor":
                continue
            if _preceded_by_word(content, match.start(1), "new"):
                continue
            open_paren = match.end() - 1
            close = find_matching(content, open_paren, "(", ")")
            if close == -1 or not _opens_body(content, close + 1):
                continue
            if looks_like_type_annotation(content, match.start(1), match.end(1)):
                continue
            register(
                name,
                "method",
                match.start(1),
                False,
                _preceded_by_word(content, match.start(1), "async"),
            )
        return found, bindings

    # -- imports -------------------------------------------------------

    def imports(self) -> List[ImportStatement]:
        content = self.content
        found: List[ImportStatement] = []
        for match in _ES6_IMPORT.finditer(content):
            symbols = parse_import_symbols(match.group(1))
            found.append(self._import(match.group(3), "es6", match, symbols))

        for match in _SIDE_EFFECT_IMPORT.finditer(content):
            found.append(self._import(match.group(2), "es6", match, []))

        for match in _DYNAMIC_IMPORT.finditer(content):
            found.append(self._import(match.group(2), "dynamic", match, []))

        found.sort(key=lambda statement: statement.offset)
        return found

    def _import(
        self, module_path: str, kind: str, match: "re.Match[str]", symbols: List[str]
    ) -> ImportStatement:
        return ImportStatement(
            module_path=module_path,
            kind=kind,  # type: ignore[arg-type]
            position=self._position(match.start()),
            offset=self.base + match.start(),
            end_offset=self.base + match.end(),
            symbols=symbols,
        )


def parse_import_symbols(clause: str) -> List[str]:
    """Return the local names bound by an import clause such as ``A, { b as c }``."""
    clause = clause.strip()
    if clause.startswith("type "):
        clause = clause[5:]
    symbols: List[str] = []
    brace = clause.find("{")
    head = clause if brace == -1 else clause[:brace]
    for part in head.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            alias = part.split(" as ", 1)
            if len(alias) == 2:
                symbols.append(alias[1].strip())
            continue
        symbols.append(part)
    if brace != -1:
        close = clause.find("}", brace)
        body = clause[brace + 1 : close if close != -1 else len(clause)]
        for part in body.split(","):
            part = part.strip()
            if part.startswith("type "):
                part = part[5:].strip()
            if not part:
                continue
            if " as " in part:
                part = part.split(" as ", 1)[1].strip()
            symbols.append(part)
    return [symbol for symbol in symbols if re.fullmatch(_IDENT, symbol)]


def component_imports(imports: Iterable[ImportStatement]) -> List[ComponentImport]:
    """Static ``.svelte`` imports become component imports named after their first symbol."""
    components: List[ComponentImport] = []
    for statement in imports:
        if statement.kind != "es6" or not statement.module_path.endswith(".svelte"):
            continue
        if not statement.symbols:
            continue
        components.append(
            ComponentImport(
                component_name=statement.symbols[0],
                module_path=statement.module_path,
                position=statement.position,
            )
        )
    return components


def _word_at(content: str, index: int, word: str) -> bool:
    return content.startswith(word, index) and is_whole_token(content, index, index + len(word))


def _preceded_by_word(content: str, index: int, word: str) -> bool:
    end = skip_whitespace_backwards(content, index - 1) + 1
    start = read_identifier_backwards(content, end)
    return content[start:end] == word


def _arrow_at(content: str, index: int) -> Optional[Tuple[int, bool]]:
    """If an arrow function starts at ``index``, return the offset after ``=>`` and asyncness."""
    index = skip_whitespace(content, index)
    is_async = False
    if _word_at(content, index, "async"):
        following = skip_whitespace(content, index + 5)
        if following < len(content) and (
            content[following] == "(" or is_identifier_char(content[following])
        ):
            is_async = True
            index = following
    if index >= len(content):
        return None
    if content[index] == "(":
        close = find_matching(content, index, "(", ")")
        if close == -1:
            return None
        after = skip_whitespace(content, close + 1)
        if content.startswith(":", after):
            # return type annotation
            after = content.find("=>", after, line_end(content, after))
            if after == -1:
                return None
    elif is_identifier_char(content[index]) and not content[index].isdigit():
        after = skip_whitespace(content, read_identifier(content, index))
    else:
        return None
    if not content.startswith("=>", after):
        return None
    return after + 2, is_async


def _assignment_index(content: str, index: int) -> Optional[int]:
    """Offset of the ``=`` that assigns a binding, skipping a type annotation."""
    depth = 0
    limit = len(content)
    while index < limit:
        char = content[index]
        if char in "([{<":
            depth += 1
        elif char in ")]}>":
            if char == ">" and content[index - 1] == "=":
                index += 1
                continue
            depth -= 1
            if depth < 0:
                return None
        elif char == ";":
            return None
        elif char == "\n" and depth == 0 and _last_char(content, index) not in (":", "|", "&"):
            return None
        elif char == "=" and depth == 0:
            following = content[index + 1 : index + 2]
            if following not in ("=", ">"):
                return index
            index += 2
            continue
        index += 1
    return None


def _opens_body(content: str, index: int) -> bool:
    """True when a ``{`` follows ``index``, allowing a ``: ReturnType`` annotation."""
    index = skip_whitespace(content, index)
    if content.startswith("{", index):
        return True
    if not content.startswith(":", index):
        return False
    end = line_end(content, index)
    brace = content.find("{", index, end)
    if brace == -1:
        return False
    between = content[index:brace]
    return "=>" not in between and ";" not in between and "=" not in between


def _statement_end(content: str, index: int) -> int:
    depth = 0
    quote: Optional[str] = None
    limit = len(content)
    while index < limit:
        char = content[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth < 0:
                return index
        elif depth == 0 and char in ";,":
            return index
        elif depth == 0 and char == "\n":
            if _last_char(content, index) not in _CONTINUATION_CHARS:
                return index
        index += 1
    return limit


def _declared_names(content: str, index: int) -> List[Tuple[str, int]]:
    """Names bound by the declarator list starting at ``index`` (``a = 1, {b}, [c]``)."""
    names: List[Tuple[str, int]] = []
    while True:
        index = skip_whitespace(content, index)
        if index >= len(content):
            break
        char = content[index]
        if char in "{[":
            closer = "}" if char == "{" else "]"
            close = find_matching(content, index, char, closer)
            if close == -1:
                break
            names.extend(_pattern_names(content, index, close))
            index = close + 1
        elif is_identifier_char(char) and not char.isdigit():
            end = read_identifier(content, index)
            names.append((content[index:end], index))
            index = end
        else:
            break
        end = _statement_end(content, index)
        if end >= len(content) or content[end] != ",":
            break
        index = end + 1
    return names


def _pattern_names(content: str, open_index: int, close_index: int) -> List[Tuple[str, int]]:
    """Local names bound by a destructuring pattern between two brackets."""
    names: List[Tuple[str, int]] = []
    index = open_index + 1
    depth = 0
    default_depth: Optional[int] = None
    while index < close_index:
        char = content[index]
        if char in "{[(":
            depth += 1
        elif char in "}])":
            depth -= 1
            if default_depth is not None and depth < default_depth:
                default_depth = None
        elif char == ",":
            if default_depth is not None and depth <= default_depth:
                default_depth = None
        elif char == "=" and content[index + 1 : index + 2] != ">":
            if default_depth is None:
                default_depth = depth
        elif char in "'\"`":
            end = content.find(char, index + 1, close_index)
            index = close_index if end == -1 else end + 1
            continue
        elif is_identifier_char(char) and not char.isdigit():
            end = read_identifier(content, index)
            following = skip_whitespace(content, end)
            is_key = following < close_index and content[following] == ":"
            if default_depth is None and not is_key:
                names.append((content[index:end], index))
            index = end
            continue
        index += 1
    return names


def _last_char(content: str, index: int) -> str:
    """Last non-whitespace character before ``index``."""
    previous = skip_whitespace_backwards(content, index - 1)
    return content[previous] if previous >= 0 else ""


__all__ = [
    "DeclarationExtractor",
    "ScriptDeclarations",
    "component_imports",
    "parse_import_symbols",
]
