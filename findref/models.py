"""Core data models shared across findref components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

VariableKind = Literal["let", "const", "var", "prop", "reactive"]
FunctionKind = Literal["function", "arrow", "method"]
ImportKind = Literal["es6", "dynamic"]
SelectorKind = Literal["class", "id", "element", "attribute", "descendant"]


@dataclass(frozen=True)
class Position:
    """1-based line/column location inside a source file."""

    line: int
    column: int


@dataclass(frozen=True)
class Usage:
    """A place where a declared name appears to be referenced."""

    position: Position
    context: str = ""
    element: Optional[str] = None
    attribute: Optional[str] = None


@dataclass(frozen=True)
class ScriptRegion:
    """Content span of a ``<script>`` element.

    ``start``/``end`` delimit the script body; ``element_start``/``element_end``
    cover the whole element including both tags.
    """

    start: int
    end: int
    element_start: int
    element_end: int
    language: Optional[str] = None
    is_module_context: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StyleRegion:
    """Content span of a ``<style>`` element."""

    start: int
    end: int
    element_start: int
    element_end: int
    index: int
    language: str = "css"
    is_scoped: bool = True
    attributes: Dict[str, str] = field(default_factory=dict)
    start_position: Optional[Position] = None
    end_position: Optional[Position] = None

    @property
    def label(self) -> str:
        scope = "Scoped" if self.is_scoped else "Global"
        return f"{scope} Block {self.index + 1}"


Region = Union[ScriptRegion, StyleRegion]


@dataclass
class Variable:
    name: str
    kind: VariableKind
    position: Position
    offset: int
    name_offset: int
    dependencies: List[str] = field(default_factory=list)
    usages: List[Usage] = field(default_factory=list)


@dataclass
class Function:
    name: str
    kind: FunctionKind
    position: Position
    offset: int
    is_exported: bool = False
    is_async: bool = False
    usages: List[Usage] = field(default_factory=list)


@dataclass
class ImportStatement:
    module_path: str
    kind: ImportKind
    position: Position
    offset: int
    end_offset: int
    symbols: List[str] = field(default_factory=list)
    usages: List[Usage] = field(default_factory=list)


@dataclass
class ComponentImport:
    component_name: str
    module_path: str
    position: Position
    usages: List[Usage] = field(default_factory=list)

    @property
    def is_used(self) -> bool:
        return bool(self.usages)


@dataclass(frozen=True)
class ComponentUsage:
    component_name: str
    position: Position
    context: str = ""


@dataclass(frozen=True)
class CSSImport:
    path: str
    position: Position
    kind: str = "@import"


@dataclass
class CSSSelector:
    """A single selector declared inside a style region."""

    selector_text: str
    kind: SelectorKind
    name: str
    position: Position
    source_block: str
    properties: List[str] = field(default_factory=list)
    html_usages: List[Usage] = field(default_factory=list)

    @property
    def is_global(self) -> bool:
        return self.source_block.startswith("Global")


@dataclass(frozen=True)
class CSSOverride:
    """A property re-declared later within the same selector."""

    property: str
    selector: str
    position: Position
    specificity: int
    important: bool
    previous: Position

    @property
    def conflicts_with(self) -> str:
        return f"Previous declaration at [{self.previous.line}:{self.previous.column}]"


Declaration = Union[Variable, Function, ImportStatement, ComponentImport]

DEFAULT_GLOBAL_IDS = ("body", "html", "root", "app", "main")


@dataclass(frozen=True)
class AnalysisOptions:
    """Tunable heuristics for a single analysis run; defaults match the CLI defaults."""

    scan_markup_for_variables: bool = True
    global_ids: Tuple[str, ...] = DEFAULT_GLOBAL_IDS
    extra_builtin_methods: Tuple[str, ...] = ()


@dataclass
class AnalysisResult:
    """Everything extracted from one component file."""

    file_path: str
    scripts: List[ScriptRegion] = field(default_factory=list)
    styles: List[StyleRegion] = field(default_factory=list)
    css_imports: List[CSSImport] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    imports: List[ImportStatement] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)
    css_selectors: List[CSSSelector] = field(default_factory=list)
    css_overrides: List[CSSOverride] = field(default_factory=list)
    component_imports: List[ComponentImport] = field(default_factory=list)
    component_usages: List[ComponentUsage] = field(default_factory=list)
    statistics: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "DEFAULT_GLOBAL_IDS",
    "CSSImport",
    "CSSOverride",
    "CSSSelector",
    "ComponentImport",
    "ComponentUsage",
    "Declaration",
    "Function",
    "FunctionKind",
    "ImportKind",
    "ImportStatement",
    "Position",
    "Region",
    "ScriptRegion",
    "SelectorKind",
    "StyleRegion",
    "Usage",
    "Variable",
    "VariableKind",
]
