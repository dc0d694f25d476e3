"""Refactoring issues derived from an analysis result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..analyzers.filters import FilterClassifier
from ..models import (
    AnalysisResult,
    ComponentImport,
    CSSOverride,
    CSSSelector,
    Function,
    ImportStatement,
    Variable,
)

FILTER_MODES = ("css", "dead-code", "components", "all")


@dataclass
class FileIssues:
    """Everything worth fixing in one file, as judged by :class:`FilterClassifier`."""

    file_path: str
    unused_selectors: List[CSSSelector] = field(default_factory=list)
    css_overrides: List[CSSOverride] = field(default_factory=list)
    no_css: bool = False
    dead_functions: List[Function] = field(default_factory=list)
    dead_variables: List[Variable] = field(default_factory=list)
    unused_components: List[ComponentImport] = field(default_factory=list)
    unused_imports: List[ImportStatement] = field(default_factory=list)

    @property
    def opportunity_count(self) -> int:
        """Number of individual findings; the no-CSS flag is not an opportunity."""
        return (
            len(self.unused_selectors)
            + len(self.css_overrides)
            + len(self.dead_functions)
            + len(self.dead_variables)
            + len(self.unused_components)
            + len(self.unused_imports)
        )

    def has_css_issues(self) -> bool:
        return bool(self.unused_selectors or self.css_overrides or self.no_css)

    def has_dead_code(self) -> bool:
        return bool(self.dead_functions or self.dead_variables or self.unused_imports)

    def has_unused_components(self) -> bool:
        return bool(self.unused_components)

    def restrict(self, mode: str) -> "FileIssues":
        """Return a copy holding only the categories reported by ``mode``."""
        if mode not in FILTER_MODES:
            raise ValueError(f"Unknown filter mode '{mode}'")
        issues = FileIssues(file_path=self.file_path)
        if mode in ("css", "all"):
            issues.unused_selectors = list(self.unused_selectors)
            issues.css_overrides = list(self.css_overrides)
            issues.no_css = self.no_css
        if mode in ("dead-code", "all"):
            issues.dead_functions = list(self.dead_functions)
            issues.dead_variables = list(self.dead_variables)
            issues.unused_imports = list(self.unused_imports)
        if mode in ("components", "all"):
            issues.unused_components = list(self.unused_components)
        return issues

    def is_empty(self) -> bool:
        return not (self.has_css_issues() or self.has_dead_code() or self.has_unused_components())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "unused_selectors": [
                {
                    "kind": selector.kind,
                    "name": selector.name,
                    "selector": selector.selector_text,
                    "line": selector.position.line,
                    "column": selector.position.column,
                    "source_block": selector.source_block,
                }
                for selector in self.unused_selectors
            ],
            "css_overrides": [
                {
                    "property": override.property,
                    "selector": override.selector,
                    "line": override.position.line,
                    "column": override.position.column,
                    "specificity": override.specificity,
                    "important": override.important,
                    "conflicts_with": override.conflicts_with,
                }
                for override in self.css_overrides
            ],
            "no_css": self.no_css,
            "dead_functions": [
                {
                    "name": function.name,
                    "kind": function.kind,
                    "line": function.position.line,
                    "column": function.position.column,
                }
                for function in self.dead_functions
            ],
            "dead_variables": [
                {
                    "name": variable.name,
                    "kind": variable.kind,
                    "line": variable.position.line,
                    "column": variable.position.column,
                }
                for variable in self.dead_variables
            ],
            "unused_components": [
                {
                    "name": component.component_name,
                    "module_path": component.module_path,
                    "line": component.position.line,
                    "column": component.position.column,
                }
                for component in self.unused_components
            ],
            "unused_imports": [
                {
                    "module_path": statement.module_path,
                    "symbols": list(statement.symbols),
                    "line": statement.position.line,
                    "column": statement.position.column,
                }
                for statement in self.unused_imports
            ],
        }


def collect_issues(
    result: AnalysisResult, classifier: Optional[FilterClassifier] = None
) -> FileIssues:
    classifier = classifier or FilterClassifier()
    return FileIssues(
        file_path=result.file_path,
        unused_selectors=[s for s in result.css_selectors if classifier.is_unused_selector(s)],
        css_overrides=list(result.css_overrides),
        no_css=not result.styles and not result.css_imports,
        dead_functions=[f for f in result.functions if classifier.is_dead_function(f)],
        dead_variables=[v for v in result.variables if classifier.is_dead_variable(v)],
        unused_components=[
            c for c in result.component_imports if classifier.is_unused_component(c)
        ],
        unused_imports=[i for i in result.imports if classifier.is_unused_import(i)],
    )


def count_opportunities(result: AnalysisResult, classifier: Optional[FilterClassifier] = None) -> int:
    return collect_issues(result, classifier).opportunity_count


__all__ = ["FILTER_MODES", "FileIssues", "collect_issues", "count_opportunities"]
