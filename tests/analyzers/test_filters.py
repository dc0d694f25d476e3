"""Tests for the report-time suppression rules."""

from __future__ import annotations

from findref.analyzers.filters import FilterClassifier
from findref.models import (
    ComponentImport,
    CSSSelector,
    Function,
    ImportStatement,
    Position,
    Usage,
    Variable,
)

ORIGIN = Position(1, 1)


def _function(name: str, **kwargs) -> Function:
    return Function(name=name, kind="function", position=ORIGIN, offset=0, **kwargs)


def _variable(name: str, kind: str = "let", **kwargs) -> Variable:
    return Variable(name=name, kind=kind, position=ORIGIN, offset=0, name_offset=0, **kwargs)


def test_unreferenced_function_is_dead() -> None:
    classifier = FilterClassifier()

    assert classifier.is_dead_function(_function("unusedHelper"))
    assert not classifier.is_dead_function(_function("used", usages=[Usage(ORIGIN)]))
    assert not classifier.is_dead_function(_function("api", is_exported=True))


def test_builtin_and_keyword_names_are_never_dead() -> None:
    classifier = FilterClassifier()

    assert not classifier.is_dead_function(_function("querySelector"))
    assert not classifier.is_dead_function(_function("if"))


def test_extra_builtin_methods_extend_the_allowlist() -> None:
    assert FilterClassifier().is_dead_function(_function("track"))
    assert not FilterClassifier(["track"]).is_dead_function(_function("track"))


def test_reactive_and_store_variables_are_never_dead() -> None:
    classifier = FilterClassifier()

    assert classifier.is_dead_variable(_variable("orphan"))
    assert not classifier.is_dead_variable(_variable("total", kind="reactive"))
    assert not classifier.is_dead_variable(_variable("$store"))
    assert not classifier.is_dead_variable(_variable("seen", usages=[Usage(ORIGIN)]))


def test_global_selectors_are_never_unused() -> None:
    classifier = FilterClassifier()
    scoped = CSSSelector(".a", "class", "a", ORIGIN, "Scoped Block 1")
    global_ = CSSSelector("#x", "id", "x", ORIGIN, "Global Block 1")

    assert classifier.is_unused_selector(scoped)
    assert not classifier.is_unused_selector(global_)


def test_component_imports_are_left_to_the_component_check() -> None:
    classifier = FilterClassifier()
    helper = ImportStatement("./helpers.js", "es6", ORIGIN, 0, 10, symbols=["helper"])
    card = ImportStatement("./Card.svelte", "es6", ORIGIN, 0, 10, symbols=["Card"])
    side_effect = ImportStatement("./global.css", "es6", ORIGIN, 0, 10)
    lazy = ImportStatement("./lazy.js", "dynamic", ORIGIN, 0, 10)

    assert classifier.is_unused_import(helper)
    assert not classifier.is_unused_import(card)
    assert not classifier.is_unused_import(side_effect)
    assert not classifier.is_unused_import(lazy)
    assert classifier.is_unused_component(ComponentImport("Card", "./Card.svelte", ORIGIN))
