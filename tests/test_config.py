"""Tests for archmap.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from archmap.config import (
    DEFAULT_SUMMARY_CACHE_SIZE,
    DEFAULT_TOP_N,
    ConfigError,
    load_config,
)


def _write_config(root: Path, text: str) -> Path:
    path = root / ".archmap.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.root == tmp_path.resolve()
    assert config.exclude_paths == []
    assert config.scan.workers == 1
    assert config.scan.top_n == DEFAULT_TOP_N
    assert config.scan.respect_gitignore is True
    assert config.summaries.cache_size == DEFAULT_SUMMARY_CACHE_SIZE


def test_loads_all_sections(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
exclude_paths:
  - generated/
  - "*.min.js"
scan:
  workers: 4
  top_n: 10
  respect_gitignore: false
summaries:
  cache_size: 32
""",
    )

    config = load_config(tmp_path)

    assert config.exclude_paths == ["generated/", "*.min.js"]
    assert config.scan.workers == 4
    assert config.scan.top_n == 10
    assert config.scan.respect_gitignore is False
    assert config.summaries.cache_size == 32


def test_accepts_config_file_path(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "exclude_paths: docs/\n")
    assert load_config(path).exclude_paths == ["docs/"]


def test_empty_file_is_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path, "\n")
    assert load_config(tmp_path).scan.top_n == DEFAULT_TOP_N


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "scan: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "text",
    [
        "scan:\n  workers: 0\n",
        "scan:\n  top_n: -1\n",
        "summaries:\n  cache_size: 0\n",
    ],
)
def test_out_of_range_values_are_rejected(tmp_path: Path, text: str) -> None:
    _write_config(tmp_path, text)
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_string_numbers_are_coerced(tmp_path: Path) -> None:
    _write_config(tmp_path, "scan:\n  workers: '3'\n  respect_gitignore: 'no'\n")
    config = load_config(tmp_path)
    assert config.scan.workers == 3
    assert config.scan.respect_gitignore is False
