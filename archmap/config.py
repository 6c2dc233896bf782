"""Configuration loading for archmap (.archmap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".archmap.yml"

DEFAULT_TOP_N = 5
DEFAULT_SUMMARY_CACHE_SIZE = 256


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScanConfig:
    """Traversal and aggregation settings."""

    workers: int = 1
    top_n: int = DEFAULT_TOP_N
    respect_gitignore: bool = True


@dataclass
class SummaryConfig:
    """Settings for the per-file summarizer collaborator."""

    cache_size: int = DEFAULT_SUMMARY_CACHE_SIZE


@dataclass
class ArchmapConfig:
    """Represents the settings defined in .archmap.yml."""

    root: Path
    exclude_paths: List[str] = field(default_factory=list)
    scan: ScanConfig = field(default_factory=ScanConfig)
    summaries: SummaryConfig = field(default_factory=SummaryConfig)


def load_config(config_path: Path) -> ArchmapConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ArchmapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        workers = _as_int(scan_data.get("workers"))
        if workers is not None:
            if workers < 1:
                raise ConfigError("scan.workers must be a positive integer")
            scan.workers = workers
        top_n = _as_int(scan_data.get("top_n"))
        if top_n is not None:
            if top_n < 0:
                raise ConfigError("scan.top_n must not be negative")
            scan.top_n = top_n
        respect = _as_bool(scan_data.get("respect_gitignore"))
        if respect is not None:
            scan.respect_gitignore = respect

    summaries = SummaryConfig()
    summary_data = _as_dict(data.get("summaries"))
    if summary_data:
        cache_size = _as_int(summary_data.get("cache_size"))
        if cache_size is not None:
            if cache_size < 1:
                raise ConfigError("summaries.cache_size must be a positive integer")
            summaries.cache_size = cache_size

    return ArchmapConfig(
        root=root,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        scan=scan,
        summaries=summaries,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
