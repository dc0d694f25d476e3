"""Component discovery across a project tree."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import DEFAULT_EXTENSIONS, ConfigError, load_config, normalize_extension
from .logging import get_logger

logger = get_logger("scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".svelte-kit",
    "dist",
    "build",
    ".next",
    ".nuxt",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .findref.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_ignore_lines(lines: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []
    return parse_ignore_lines(path.read_text(encoding="utf-8").splitlines())


def _parse_config_excludes(path: Path) -> List[IgnoreRule]:
    try:
        config = load_config(path)
    except ConfigError as exc:
        logger.warning("Ignoring exclude_paths from %s: %s", path, exc)
        return []
    return parse_ignore_lines(config.exclude_paths)


def _load_ignore_rules(root: Path, extra_patterns: Sequence[str] = ()) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    rules.extend(_parse_config_excludes(root))
    rules.extend(parse_ignore_lines(extra_patterns))
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def is_excluded_path(rel_path: str) -> bool:
    """True when any directory segment of ``rel_path`` is always skipped."""
    return any(part in _EXCLUDED_DIRS for part in rel_path.split("/")[:-1])


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)

        filtered_dirs = []
        for name in dirnames:
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if should_ignore(rel_path, True, rules):
                continue
            filtered_dirs.append(name)
        dirnames[:] = filtered_dirs

        for filename in sorted(filenames):
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def has_extension(path: str, extensions: Sequence[str]) -> bool:
    lowered = path.lower()
    return any(lowered.endswith(extension.lower()) for extension in extensions)


class RepoScanner:
    """Walks a project tree and yields the component files to analyse."""

    def __init__(
        self,
        extensions: Optional[Sequence[str]] = None,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.extensions = [normalize_extension(ext) for ext in (extensions or DEFAULT_EXTENSIONS)]
        self.exclude_paths = list(exclude_paths)

    def scan(self, target: str | Path) -> List[Path]:
        """Return matching files under ``target`` in a stable order.

        A file path is returned as-is when it carries one of the extensions.
        """
        target_path = Path(target).expanduser().resolve()
        if not target_path.exists():
            raise FileNotFoundError(f"Path not found: {target}")
        if target_path.is_file():
            return [target_path] if has_extension(target_path.name, self.extensions) else []

        rules = _load_ignore_rules(target_path, self.exclude_paths)
        files = [
            path
            for path in _iter_files(target_path, rules)
            if has_extension(path.name, self.extensions)
        ]
        logger.debug("Found %d component files under %s", len(files), target_path)
        return files

    def filter_paths(self, paths: Iterable[str], rules: Sequence[IgnoreRule] = ()) -> List[str]:
        """Apply the extension, excluded-directory and ignore filters to repo-relative paths."""
        rules = list(rules) + parse_ignore_lines(self.exclude_paths)
        selected = []
        for path in paths:
            if not has_extension(path, self.extensions) or is_excluded_path(path):
                continue
            if should_ignore(path, False, rules) or _ignored_parent(path, rules):
                continue
            selected.append(path)
        return sorted(selected)


def _ignored_parent(rel_path: str, rules: Sequence[IgnoreRule]) -> bool:
    parts = rel_path.split("/")[:-1]
    for depth in range(1, len(parts) + 1):
        if should_ignore("/".join(parts[:depth]), True, rules):
            return True
    return False


__all__ = [
    "IgnoreRule",
    "RepoScanner",
    "build_ignore_rule",
    "has_extension",
    "is_excluded_path",
    "parse_ignore_lines",
    "should_ignore",
]
