"""Helpers for writing throwaway component trees and faking git history in tests."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Mapping, Optional


def component(source: str) -> str:
    """Dedent an inline component and drop the leading newline."""
    return textwrap.dedent(source).lstrip("\n")


class ComponentBuilder:
    """Writes component files under a temporary project root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "app"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(component(content), encoding="utf-8")

    def path(self, relative: str = "") -> Path:
        return self.root / relative if relative else self.root


class FakeGit:
    """Answers the git invocations made by ``GitSnapshots`` from in-memory commits."""

    def __init__(self, toplevel: Path) -> None:
        self.toplevel = toplevel
        self.commits: Dict[str, Dict[str, object]] = {}
        self.calls: List[List[str]] = []

    def add_commit(
        self,
        revision: str,
        files: Mapping[str, str],
        *,
        message: str = "change",
        author: str = "Dev",
        date: str = "2024-01-01 10:00:00 +0000",
        changed: Optional[List[str]] = None,
    ) -> None:
        self.commits[revision] = {
            "hash": f"{revision}{'0' * 8}",
            "message": message,
            "author": author,
            "date": date,
            "files": {path: component(content) for path, content in files.items()},
            "changed": list(changed if changed is not None else files),
        }

    def __call__(self, args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        args = list(args)
        self.calls.append(args)
        if args[:3] == ["git", "rev-parse", "--show-toplevel"]:
            return f"{self.toplevel}\n"
        if args[:3] == ["git", "show", "-s"]:
            commit = self._commit(args, args[-1])
            return "\n".join(
                [commit["hash"], commit["author"], commit["date"], commit["message"]]
            ) + "\n"
        if args[:2] == ["git", "ls-tree"]:
            return "\n".join(sorted(self._commit(args, args[-1])["files"])) + "\n"
        if args[:2] == ["git", "show"]:
            revision, _, path = args[2].partition(":")
            files = self._commit(args, revision)["files"]
            if path not in files:
                raise subprocess.CalledProcessError(128, args, stderr=f"fatal: path '{path}' does not exist")
            return files[path]
        if args[:2] == ["git", "diff-tree"]:
            return "\n".join(self._commit(args, args[-1])["changed"]) + "\n"
        if args[:3] == ["git", "diff", "--name-only"]:
            before = self._commit(args, args[3])["files"]
            after = self._commit(args, args[4])["files"]
            paths = sorted(
                path
                for path in set(before) | set(after)
                if before.get(path) != after.get(path)
            )
            return "\n".join(paths) + "\n"
        raise AssertionError(f"unexpected git call: {args}")

    def _commit(self, args: List[str], revision: str) -> Dict[str, object]:
        if revision not in self.commits:
            raise subprocess.CalledProcessError(128, args, stderr=f"fatal: bad revision '{revision}'")
        return self.commits[revision]


__all__ = ["ComponentBuilder", "FakeGit", "component"]
