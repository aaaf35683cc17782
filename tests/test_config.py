"""Tests for the defaults file and setting parsers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from thisismy.cli import Options
from thisismy.config import (
    ThisismyConfig,
    find_defaults_file,
    load_defaults,
    merge_cli_with_config,
    normalize_interval,
    parse_size_limit,
    save_backup,
)
from thisismy.resolver import DEFAULT_MAX_SIZE


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1kb", 1024),
        ("1KB", 1024),
        ("2mb", 2 * 1024 * 1024),
        ("1.5kb", 1536),
        ("500", 500),
        (" 10 kb ", 10 * 1024),
        ("0", 0),
    ],
)
def test_parse_size_limit(text: str, expected: int) -> None:
    assert parse_size_limit(text) == expected


def test_parse_size_limit_no_means_unlimited() -> None:
    assert parse_size_limit("no") is None
    assert parse_size_limit("NO") is None


@pytest.mark.parametrize("text", ["lots", "5gb", "-1kb", "kb", ""])
def test_parse_size_limit_invalid_falls_back(text: str) -> None:
    assert parse_size_limit(text) == DEFAULT_MAX_SIZE


def test_parse_size_limit_missing_is_default() -> None:
    assert parse_size_limit(None) == DEFAULT_MAX_SIZE


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 5), (1, 1), (10, 10), ("3", 3), (0, 5), (-2, 5), ("soon", 5)],
)
def test_normalize_interval(value: int | str | None, expected: int) -> None:
    assert normalize_interval(value) == expected


def test_find_defaults_file(tmp_path: Path) -> None:
    assert find_defaults_file(tmp_path) is None
    path = tmp_path / "thisismy.json"
    path.write_text("{}")
    assert find_defaults_file(tmp_path) == path


def test_load_defaults_missing(tmp_path: Path) -> None:
    assert load_defaults(tmp_path) == ThisismyConfig()


def test_load_defaults_snake_case(tmp_path: Path) -> None:
    (tmp_path / "thisismy.json").write_text(
        json.dumps({"files": ["*.py"], "recursive": True, "limit": "2mb", "force_filter": True})
    )
    config = load_defaults(tmp_path)
    assert config.files == ["*.py"]
    assert config.recursive is True
    assert config.limit == "2mb"
    assert config.force_filter is True
    # Unset fields should be None (not set)
    assert config.copy is None


def test_load_defaults_legacy_keys(tmp_path: Path) -> None:
    (tmp_path / "thisismy.json").write_text(
        json.dumps({"file": "README.md", "noColor": True, "copy": True, "maxSize": "10kb"})
    )
    config = load_defaults(tmp_path)
    assert config.files == ["README.md"]
    assert config.copy is True
    assert config.limit == "10kb"
    assert config.no_color is True
    assert config.as_dict() == {"files": ["README.md"], "copy": True, "limit": "10kb", "no_color": True}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_defaults_malformed(tmp_path: Path, content: str) -> None:
    (tmp_path / "thisismy.json").write_text(content)
    assert load_defaults(tmp_path) == ThisismyConfig()


def test_save_backup_round_trip(tmp_path: Path) -> None:
    options = Options(files=["*.md"], copy=True, recursive=True, backup=True, interval=3)
    path = save_backup(tmp_path, options)
    assert path == tmp_path / "thisismy.json"

    data = json.loads(path.read_text())
    assert "backup" not in data
    assert "version" not in data
    assert data["files"] == ["*.md"]

    config = load_defaults(tmp_path)
    assert config.files == ["*.md"]
    assert config.copy is True
    assert config.recursive is True
    assert config.interval == 3


def test_merge_config_fills_unset_options() -> None:
    options = Options(files=["a.txt"])
    config = ThisismyConfig(files=["b.txt"], tiny=True, limit="no")
    merge_cli_with_config(options, config, explicit_flags={"files"})
    assert options.files == ["a.txt"]
    assert options.tiny is True
    assert options.limit == "no"


def test_merge_explicit_flag_wins_even_at_default_value() -> None:
    options = Options(recursive=False)
    config = ThisismyConfig(recursive=True)
    merge_cli_with_config(options, config, explicit_flags={"recursive"})
    assert options.recursive is False


def test_merge_none_config_is_noop() -> None:
    options = Options(files=["a.txt"])
    assert merge_cli_with_config(options, None, set()) is options
    assert options == Options(files=["a.txt"])
