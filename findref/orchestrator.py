"""Multi-file runs: working-tree scans, single commits and commit comparisons."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .analyzers.filters import FilterClassifier
from .analyzers.statistics import aggregate_statistics, diff_statistics
from .config import FindRefConfig, load_config
from .engine import analyze
from .git.snapshots import CommitInfo, GitSnapshots
from .logging import get_logger
from .models import AnalysisResult
from .repo_scanner import RepoScanner, parse_ignore_lines
from .report.issues import FileIssues, collect_issues


@dataclass
class ScanReport:
    """Results of analysing every matching file under one path."""

    root: Path
    results: List[AnalysisResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def statistics(self) -> Dict[str, int]:
        return aggregate_statistics(self.results)

    def issues(self, classifier: Optional[FilterClassifier] = None) -> List[FileIssues]:
        return [collect_issues(result, classifier) for result in self.results]


@dataclass
class CommitAnalysis:
    """Every matching file analysed as it exists at one revision."""

    commit: CommitInfo
    results: List[AnalysisResult] = field(default_factory=list)
    modified_files: List[str] = field(default_factory=list)

    @property
    def statistics(self) -> Dict[str, int]:
        return aggregate_statistics(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commit": asdict(self.commit),
            "modified_files": list(self.modified_files),
            "statistics": self.statistics,
            "results": [result.to_dict() for result in self.results],
        }


@dataclass
class CommitComparison:
    before: CommitAnalysis
    after: CommitAnalysis
    differences: Dict[str, int] = field(default_factory=dict)
    modified_files: List[str] = field(default_factory=list)
    added_files: List[str] = field(default_factory=list)
    removed_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "differences": dict(self.differences),
            "modified_files": list(self.modified_files),
            "added_files": list(self.added_files),
            "removed_files": list(self.removed_files),
        }


class Orchestrator:
    """Coordinates file discovery, analysis and git snapshot access."""

    def __init__(
        self,
        config: FindRefConfig | None = None,
        scanner: RepoScanner | None = None,
        snapshots: GitSnapshots | None = None,
    ) -> None:
        self.config = config
        self._scanner = scanner
        self.snapshots = snapshots or GitSnapshots()
        self.logger = get_logger("orchestrator")

    def scan(self, path: str | Path) -> ScanReport:
        """Analyse every matching file under ``path`` (or ``path`` itself)."""
        target = Path(path).expanduser().resolve()
        if not target.exists():
            raise FileNotFoundError(f"Path not found: {path}")
        config = self._resolve_config(target if target.is_dir() else target.parent)
        scanner = self._resolve_scanner(config)

        files = scanner.scan(target)
        self.logger.info("Analysing %d files under %s", len(files), target)
        report = ScanReport(root=target)
        options = config.analysis.to_options()
        for file_path in files:
            try:
                text = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Skipping %s: %s", file_path, exc)
                report.skipped.append(str(file_path))
                continue
            self.logger.debug("Processing %s", file_path)
            report.results.append(analyze(text, str(file_path), options))
        return report

    def analyze_commit(self, path: str | Path, revision: str) -> CommitAnalysis:
        """Analyse matching files as they exist at ``revision`` without checking it out."""
        repo, prefix = self._locate_repository(path)
        config = self._resolve_config(Path(path).expanduser().resolve())
        scanner = self._resolve_scanner(config)
        return self._analyze_revision(repo, prefix, revision, config, scanner, base=None)

    def compare_commits(self, path: str | Path, before: str, after: str) -> CommitComparison:
        repo, prefix = self._locate_repository(path)
        config = self._resolve_config(Path(path).expanduser().resolve())
        scanner = self._resolve_scanner(config)

        self.logger.info("Comparing %s..%s in %s", before, after, repo)
        first = self._analyze_revision(repo, prefix, before, config, scanner, base=None)
        second = self._analyze_revision(repo, prefix, after, config, scanner, base=before)

        before_files = {result.file_path for result in first.results}
        after_files = {result.file_path for result in second.results}
        return CommitComparison(
            before=first,
            after=second,
            differences=diff_statistics(first.statistics, second.statistics),
            modified_files=list(second.modified_files),
            added_files=sorted(after_files - before_files),
            removed_files=sorted(before_files - after_files),
        )

    def _analyze_revision(
        self,
        repo: Path,
        prefix: str,
        revision: str,
        config: FindRefConfig,
        scanner: RepoScanner,
        *,
        base: Optional[str],
    ) -> CommitAnalysis:
        commit = self.snapshots.commit_info(repo, revision)
        self.logger.info("Analysing commit %s (%s)", commit.short_hash, commit.message)

        listed = self.snapshots.list_files(repo, revision)
        rules = []
        if ".gitignore" in listed:
            rules = parse_ignore_lines(
                self.snapshots.read_file(repo, revision, ".gitignore").splitlines()
            )
        candidates = scanner.filter_paths(_within(listed, prefix), rules)

        options = config.analysis.to_options()
        analysis = CommitAnalysis(commit=commit)
        for rel_path in candidates:
            source = self.snapshots.read_file(repo, revision, rel_path)
            analysis.results.append(analyze(source, rel_path, options))

        changed = self.snapshots.changed_files(repo, revision, base)
        analysis.modified_files = scanner.filter_paths(_within(changed, prefix), rules)
        self.logger.debug(
            "Commit %s: %d files analysed, %d modified",
            commit.short_hash,
            len(analysis.results),
            len(analysis.modified_files),
        )
        return analysis

    def _locate_repository(self, path: str | Path) -> tuple[Path, str]:
        target = Path(path).expanduser().resolve()
        if not target.exists():
            raise FileNotFoundError(f"Path not found: {path}")
        directory = target if target.is_dir() else target.parent
        repo = self.snapshots.toplevel(directory).resolve()
        try:
            prefix = target.relative_to(repo).as_posix()
        except ValueError:
            prefix = ""
        return repo, "" if prefix == "." else prefix

    def _resolve_config(self, directory: Path) -> FindRefConfig:
        if self.config is not None:
            return self.config
        return load_config(directory)

    def _resolve_scanner(self, config: FindRefConfig) -> RepoScanner:
        if self._scanner is not None:
            return self._scanner
        return RepoScanner(extensions=config.extensions, exclude_paths=config.exclude_paths)


def _within(paths: Sequence[str], prefix: str) -> List[str]:
    if not prefix:
        return list(paths)
    return [path for path in paths if path == prefix or path.startswith(f"{prefix}/")]


__all__ = ["CommitAnalysis", "CommitComparison", "Orchestrator", "ScanReport"]
