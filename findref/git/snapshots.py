"""Read files as they exist at a git revision without touching the working tree."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..logging import get_logger

logger = get_logger("git")

_COMMIT_FORMAT = "%H%n%an%n%ad%n%s"


class GitError(RuntimeError):
    """Raised when a git invocation fails or the path is not a repository."""


@dataclass(frozen=True)
class CommitInfo:
    hash: str
    author: str
    date: str
    message: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class GitSnapshots:
    """Thin wrapper over ``git show``/``git ls-tree``/``git diff`` for one repository."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def toplevel(self, repo_path: str | Path) -> Path:
        output = self._run(["git", "rev-parse", "--show-toplevel"], cwd=Path(repo_path))
        top = output.strip()
        if not top:
            raise GitError(f"{repo_path} is not inside a Git repository")
        return Path(top)

    def commit_info(self, repo: Path, revision: str) -> CommitInfo:
        output = self._run(
            ["git", "show", "-s", "--date=iso", f"--format={_COMMIT_FORMAT}", revision], cwd=repo
        )
        lines = output.splitlines()
        if not lines or not lines[0].strip():
            raise GitError(f"Unknown revision '{revision}'")
        lines += [""] * (4 - len(lines))
        return CommitInfo(
            hash=lines[0].strip(),
            author=lines[1].strip(),
            date=lines[2].strip(),
            message=lines[3].strip(),
        )

    def list_files(self, repo: Path, revision: str) -> List[str]:
        output = self._run(["git", "ls-tree", "-r", "--name-only", revision], cwd=repo)
        return _lines(output)

    def read_file(self, repo: Path, revision: str, path: str) -> str:
        return self._run(["git", "show", f"{revision}:{path}"], cwd=repo)

    def changed_files(self, repo: Path, revision: str, base: Optional[str] = None) -> List[str]:
        """Files touched by ``revision`` alone, or between ``base`` and ``revision``."""
        if base is None:
            args = ["git", "diff-tree", "--no-commit-id", "--name-only", "-r", "--root", revision]
        else:
            args = ["git", "diff", "--name-only", base, revision]
        return _lines(self._run(args, cwd=repo))

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        args = list(args)
        logger.debug("Running %s in %s", " ".join(args), cwd)
        try:
            return self._runner(args, cwd=cwd, capture_output=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise GitError(f"{' '.join(args)} failed: {detail}") from exc
        except OSError as exc:
            raise GitError(f"Unable to run git: {exc}") from exc

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


__all__ = ["CommitInfo", "GitError", "GitSnapshots"]
