from __future__ import annotations

import pytest

from findref.repo_scanner import RepoScanner, parse_ignore_lines


def _relative(paths, root):
    return [path.relative_to(root).as_posix() for path in paths]


def test_scan_finds_components_in_stable_order(component_builder) -> None:
    component_builder.write(
        {
            "src/b/Button.svelte": "<button></button>",
            "src/App.svelte": "<main></main>",
            "src/a/Card.svelte": "<div></div>",
            "src/util.js": "export const x = 1;",
        }
    )
    root = component_builder.path()

    files = RepoScanner().scan(root)

    assert _relative(files, root.resolve()) == [
        "src/App.svelte",
        "src/a/Card.svelte",
        "src/b/Button.svelte",
    ]


def test_scan_skips_dependency_and_build_directories(component_builder) -> None:
    component_builder.write(
        {
            "node_modules/lib/Widget.svelte": "<div></div>",
            ".svelte-kit/generated/Root.svelte": "<div></div>",
            "build/Out.svelte": "<div></div>",
            "src/App.svelte": "<main></main>",
        }
    )
    root = component_builder.path()

    assert _relative(RepoScanner().scan(root), root.resolve()) == ["src/App.svelte"]


def test_scan_honours_gitignore_and_config_excludes(component_builder) -> None:
    component_builder.write(
        {
            ".gitignore": "generated/\n*.draft.svelte\n",
            ".findref.yml": "exclude_paths:\n  - legacy/\n",
            "generated/Auto.svelte": "<div></div>",
            "legacy/Old.svelte": "<div></div>",
            "src/Idea.draft.svelte": "<div></div>",
            "src/App.svelte": "<main></main>",
        }
    )
    root = component_builder.path()

    assert _relative(RepoScanner().scan(root), root.resolve()) == ["src/App.svelte"]


def test_scan_accepts_extra_extensions_and_excludes(component_builder) -> None:
    component_builder.write(
        {
            "src/App.svelte": "<main></main>",
            "src/Panel.vue": "<template></template>",
            "stories/Demo.svelte": "<div></div>",
        }
    )
    root = component_builder.path()

    scanner = RepoScanner(extensions=["svelte", ".vue"], exclude_paths=["stories/"])

    assert _relative(scanner.scan(root), root.resolve()) == ["src/App.svelte", "src/Panel.vue"]


def test_scan_of_a_single_file(component_builder) -> None:
    component_builder.write({"App.svelte": "<main></main>", "notes.txt": "hi"})

    scanner = RepoScanner()

    assert scanner.scan(component_builder.path("App.svelte")) == [
        component_builder.path("App.svelte").resolve()
    ]
    assert scanner.scan(component_builder.path("notes.txt")) == []


def test_scan_of_a_missing_path_raises(component_builder) -> None:
    with pytest.raises(FileNotFoundError):
        RepoScanner().scan(component_builder.path("missing"))


def test_filter_paths_applies_rules_to_repo_relative_paths() -> None:
    scanner = RepoScanner(exclude_paths=["legacy/"])
    rules = parse_ignore_lines(["# comment", "generated/", "!generated/Keep.svelte"])

    selected = scanner.filter_paths(
        [
            "src/Z.svelte",
            "src/A.svelte",
            "src/util.js",
            "node_modules/x/Lib.svelte",
            "legacy/Old.svelte",
            "generated/Auto.svelte",
        ],
        rules,
    )

    assert selected == ["src/A.svelte", "src/Z.svelte"]
