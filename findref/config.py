"""Configuration loading for findref (.findref.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import DEFAULT_GLOBAL_IDS, AnalysisOptions

CONFIG_FILENAME = ".findref.yml"
DEFAULT_EXTENSIONS = (".svelte",)
OUTPUT_FORMATS = ("text", "json", "csv")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class OutputConfig:
    """Report rendering settings."""

    format: str = "text"


@dataclass
class AnalysisConfig:
    """Heuristic switches forwarded to the engine."""

    scan_markup_for_variables: bool = True
    global_ids: List[str] = field(default_factory=lambda: list(DEFAULT_GLOBAL_IDS))
    extra_builtin_methods: List[str] = field(default_factory=list)

    def to_options(self) -> AnalysisOptions:
        return AnalysisOptions(
            scan_markup_for_variables=self.scan_markup_for_variables,
            global_ids=tuple(self.global_ids),
            extra_builtin_methods=tuple(self.extra_builtin_methods),
        )


@dataclass
class FindRefConfig:
    """Represents the settings defined in .findref.yml."""

    root: Path
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


def load_config(config_path: Path) -> FindRefConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FindRefConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = FindRefConfig(root=root)

    extensions = _as_str_list(data.get("extensions"))
    if extensions:
        config.extensions = [normalize_extension(value) for value in extensions]
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    output_data = _as_dict(data.get("output"))
    output_format = _as_str(output_data.get("format"))
    if output_format is not None:
        output_format = output_format.lower()
        if output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unsupported output format '{output_format}' (expected one of {', '.join(OUTPUT_FORMATS)})"
            )
        config.output.format = output_format

    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        scan_markup = _as_bool(analysis_data.get("scan_markup_for_variables"))
        if scan_markup is not None:
            config.analysis.scan_markup_for_variables = scan_markup
        if "global_ids" in analysis_data:
            config.analysis.global_ids = _as_str_list(analysis_data.get("global_ids"))
        config.analysis.extra_builtin_methods = _as_str_list(
            analysis_data.get("extra_builtin_methods")
        )

    return config


def normalize_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in (".yml", ".yaml"):
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_EXTENSIONS",
    "FindRefConfig",
    "OUTPUT_FORMATS",
    "OutputConfig",
    "load_config",
    "normalize_extension",
]
