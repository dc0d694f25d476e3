"""Tests for declaration extraction from script regions."""

from __future__ import annotations

from findref.models import Position
from findref.parsing.regions import RegionSplitter
from findref.parsing.scripts import (
    DeclarationExtractor,
    ScriptDeclarations,
    component_imports,
    parse_import_symbols,
)
from tests._fixtures.component_builder import component


def _extract(source: str) -> ScriptDeclarations:
    text = component(source)
    scripts, _ = RegionSplitter().split(text)
    return DeclarationExtractor(text).extract(scripts[0])


def test_variables_are_registered_with_kind_and_name_position() -> None:
    found = _extract(
        """
        <script>
          export let title;
          let count = 0;
          const doubled = count * 2;
          var legacy;
          $: total = count + doubled;
        </script>
        """
    )

    kinds = [(variable.name, variable.kind) for variable in found.variables]
    assert kinds == [
        ("title", "prop"),
        ("count", "let"),
        ("doubled", "const"),
        ("legacy", "var"),
        ("total", "reactive"),
    ]
    count = found.variables[1]
    assert count.position == Position(line=3, column=7)


def test_reactive_dependencies_list_other_declared_names_in_order() -> None:
    found = _extract(
        """
        <script>
          let price = 1;
          let quantity = 2;
          $: total = quantity * price;
        </script>
        """
    )

    total = next(variable for variable in found.variables if variable.name == "total")
    assert total.dependencies == ["quantity", "price"]


def test_destructuring_and_comma_lists_bind_every_local_name() -> None:
    found = _extract(
        """
        <script>
          let { a, b: renamed, c = 1 } = source;
          let [first, second] = pair;
          let x = 1, y = 2;
        </script>
        """
    )

    names = [variable.name for variable in found.variables]
    assert names == ["a", "renamed", "c", "first", "second", "x", "y"]


def test_props_rune_destructuring_registers_props() -> None:
    found = _extract(
        """
        <script>
          let { label, size = 'md' } = $props();
        </script>
        """
    )

    assert [(variable.name, variable.kind) for variable in found.variables] == [
        ("label", "prop"),
        ("size", "prop"),
    ]


def test_export_const_is_a_constant_not_a_prop() -> None:
    found = _extract(
        """
        <script>
          export const VERSION = '1.0';
        </script>
        """
    )

    assert [(variable.name, variable.kind) for variable in found.variables] == [("VERSION", "const")]


def test_function_forms_are_extracted_without_duplicating_variables() -> None:
    found = _extract(
        """
        <script>
          export function api() {}
          async function load() {}
          const handler = async (event) => {
            console.log(event);
          };
          let plain = function () {};
          const actions = {
            save: () => persist(),
            fetchData() {
              return 1;
            },
          };
        </script>
        """
    )

    functions = {function.name: function for function in found.functions}
    assert set(functions) == {"api", "load", "handler", "plain", "save", "fetchData"}
    assert functions["api"].is_exported is True
    assert functions["load"].is_async is True
    assert functions["handler"].kind == "arrow"
    assert functions["handler"].is_async is True
    assert functions["plain"].kind == "function"
    assert functions["save"].kind == "method"
    assert functions["fetchData"].kind == "method"

    assert [variable.name for variable in found.variables] == ["actions"]


def test_control_keywords_are_never_functions() -> None:
    found = _extract(
        """
        <script>
          function load() {
            if (ready) { start(); }
            try { run(); } catch (error) { fail(); }
            while (busy) { wait(); }
            for (const item of items) { use(item); }
            switch (mode) { default: break; }
          }
        </script>
        """
    )

    assert [function.name for function in found.functions] == ["load"]


def test_type_annotations_are_not_functions() -> None:
    found = _extract(
        """
        <script lang="ts">
          type Point = { x: number; y: number };
          let size: { width: number; height: number } = { width: 0, height: 0 };
          function unusedHelper(): void {}
        </script>
        """
    )

    assert [function.name for function in found.functions] == ["unusedHelper"]
    assert [variable.name for variable in found.variables] == ["size"]


def test_comments_do_not_produce_declarations() -> None:
    found = _extract(
        """
        <script>
          // let ghost = 1;
          /* function phantom() {} */
          let real = 2;
        </script>
        """
    )

    assert [variable.name for variable in found.variables] == ["real"]
    assert found.functions == []


def test_imports_cover_static_side_effect_and_dynamic_forms() -> None:
    found = _extract(
        """
        <script>
          import Button from './Button.svelte';
          import { format, parse as parseDate } from 'date-fns';
          import './global.css';
          const load = () => import('./lazy.js');
        </script>
        """
    )

    summary = [(item.module_path, item.kind, item.symbols) for item in found.imports]
    assert summary == [
        ("./Button.svelte", "es6", ["Button"]),
        ("date-fns", "es6", ["format", "parseDate"]),
        ("./global.css", "es6", []),
        ("./lazy.js", "dynamic", []),
    ]
    assert found.imports[0].position == Position(line=2, column=3)


def test_parse_import_symbols_returns_local_names() -> None:
    assert parse_import_symbols("Default, { a, b as c, type T }") == ["Default", "a", "c", "T"]
    assert parse_import_symbols("* as utils") == ["utils"]
    assert parse_import_symbols("type { Foo }") == ["Foo"]


def test_component_imports_use_first_symbol_of_svelte_imports() -> None:
    found = _extract(
        """
        <script>
          import Card from './Card.svelte';
          import { helper } from './helpers.js';
          import './side-effect.svelte';
        </script>
        """
    )

    components = component_imports(found.imports)

    assert [(item.component_name, item.module_path) for item in components] == [
        ("Card", "./Card.svelte")
    ]
