"""CLI entrypoints for findref commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .analyzers.filters import FilterClassifier
from .config import OUTPUT_FORMATS, ConfigError, FindRefConfig, load_config, normalize_extension
from .git.snapshots import GitError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator
from .report.formatters import render_commit, render_comparison, render_scan
from .report.issues import FILTER_MODES

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_report_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (defaults to the configured format, then text).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    parser.add_argument(
        "--extensions",
        default=None,
        help="Comma-separated file extensions to analyse (default: .svelte).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .findref.yml file or the directory holding it.",
    )
    _add_verbose_option(parser, suppress_default=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="findref",
        description="Find unused CSS selectors, dead code and unused components in single-file components.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Analyse a component file or every component under a directory.",
    )
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="File or directory to analyse (defaults to current directory).",
    )
    scan_parser.add_argument(
        "--filter",
        choices=FILTER_MODES,
        default=None,
        help="Report only one category of refactoring issues.",
    )
    _add_report_options(scan_parser)

    commit_parser = subparsers.add_parser(
        "commit",
        help="Analyse components as they exist at a git revision.",
    )
    commit_parser.add_argument("revision", help="Commit hash or ref to analyse.")
    commit_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path inside the repository (defaults to current directory).",
    )
    _add_report_options(commit_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare analysis statistics between two git revisions.",
    )
    compare_parser.add_argument("before", help="Older commit or ref.")
    compare_parser.add_argument("after", help="Newer commit or ref.")
    compare_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path inside the repository (defaults to current directory).",
    )
    _add_report_options(compare_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP analysis service.",
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    _add_verbose_option(serve_parser, suppress_default=True)

    return parser


def _load_effective_config(args: argparse.Namespace) -> FindRefConfig:
    config_source = args.config or args.path
    config = load_config(Path(config_source))
    if args.extensions:
        extensions = [value for value in args.extensions.split(",") if value.strip()]
        config.extensions = [normalize_extension(value) for value in extensions]
    if args.format:
        config.output.format = args.format
    return config


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"Analysis results written to: {_relativize(Path(output))}")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def main(argv: List[str] | None = None) -> None:
    """CLI entrypoint for findref commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)
    logger.debug("Running %s command", args.command)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        config = _load_effective_config(args)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    orchestrator = Orchestrator(config=config)
    fmt = config.output.format

    if args.command == "scan":
        try:
            report = orchestrator.scan(args.path)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        if not report.results and not report.skipped:
            parser.exit(1, "No files found to analyze\n")
        classifier = FilterClassifier(config.analysis.extra_builtin_methods)
        text = render_scan(report, fmt, args.filter, classifier)
    elif args.command == "commit":
        try:
            analysis = orchestrator.analyze_commit(args.path, args.revision)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except GitError as exc:
            parser.exit(1, f"findref commit failed: {exc}\nRun with --verbose for more details.\n")
        text = render_commit(analysis, fmt)
    elif args.command == "compare":
        try:
            comparison = orchestrator.compare_commits(args.path, args.before, args.after)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except GitError as exc:
            parser.exit(1, f"findref compare failed: {exc}\nRun with --verbose for more details.\n")
        text = render_comparison(comparison, fmt)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        _emit(text, args.output)
    except OSError as exc:
        parser.exit(1, f"Unable to write {args.output}: {exc}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
