"""Suppression rules applied before a declaration is reported as unused.

The rules lean on the allowlists in :mod:`findref.parsing.lexicon`; a
declaration that survives them is a candidate for removal, not a proven one.
"""

from __future__ import annotations

from typing import Iterable

from ..models import ComponentImport, CSSSelector, Function, ImportStatement, Variable
from ..parsing.lexicon import BUILTIN_METHODS, CONTROL_KEYWORDS


class FilterClassifier:
    """Decides which unresolved declarations are worth reporting."""

    def __init__(self, extra_builtin_methods: Iterable[str] = ()) -> None:
        self._builtins = BUILTIN_METHODS | frozenset(extra_builtin_methods)

    def is_dead_function(self, function: Function) -> bool:
        if function.usages or function.is_exported:
            return False
        if function.name in CONTROL_KEYWORDS or function.name in self._builtins:
            return False
        return True

    def is_dead_variable(self, variable: Variable) -> bool:
        if variable.usages:
            return False
        if variable.kind == "reactive" or variable.name.startswith("$"):
            return False
        return True

    def is_unused_selector(self, selector: CSSSelector) -> bool:
        return not selector.html_usages and not selector.is_global

    def is_unused_component(self, component: ComponentImport) -> bool:
        return not component.is_used

    def is_unused_import(self, statement: ImportStatement) -> bool:
        """Static imports whose symbols never appear; component imports are reported separately."""
        if statement.kind != "es6" or not statement.symbols or statement.usages:
            return False
        return not statement.module_path.endswith(".svelte")


__all__ = ["FilterClassifier"]
