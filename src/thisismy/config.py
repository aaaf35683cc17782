"""
JSON defaults file (`thisismy.json`) handling, plus parsing of the size-limit
and interval settings.

Defaults are read from the working directory and merged with CLI flags using
three-way precedence: explicit CLI flags > defaults file > built-in defaults.
`--backup` writes the current options back to the same file.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, TypeVar

from strif import atomic_output_file

from thisismy.resolver.types import DEFAULT_MAX_SIZE
from thisismy.watch.session import DEFAULT_INTERVAL_MINUTES

log = logging.getLogger(__name__)

DEFAULTS_FILENAME = "thisismy.json"

NO_LIMIT = "no"
DEFAULT_SIZE_LIMIT = "1mb"

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(kb|mb)?\s*$", re.IGNORECASE)
_SIZE_UNITS: dict[str, int] = {"": 1, "kb": 1024, "mb": 1024 * 1024}


@dataclass
class ThisismyConfig:
    """
    Parsed defaults file. Fields are `None` when not set, so the merge logic can
    tell "not configured" from "explicitly set to the default value".
    """

    files: list[str] | None = None
    copy: bool | None = None
    tiny: bool | None = None
    prefix: str | None = None
    output: str | None = None
    silent: bool | None = None
    debug: bool | None = None
    watch: bool | None = None
    interval: int | None = None
    greedy: bool | None = None
    recursive: bool | None = None
    tree: bool | None = None
    limit: str | None = None
    force_filter: bool | None = None
    no_color: bool | None = None

    def as_dict(self) -> dict[str, Any]:
        """Only the fields that are set."""
        return {k: v for k, v in asdict(self).items() if v is not None}


# Keys written by older versions of the tool, mapped to field names.
_KEY_ALIASES: dict[str, str] = {
    "file": "files",
    "forceFilter": "force_filter",
    "force-filter": "force_filter",
    "noColor": "no_color",
    "no-color": "no_color",
    "maxSize": "limit",
    "max_size": "limit",
}

_VALID_FIELDS = {f.name for f in fields(ThisismyConfig)}


def find_defaults_file(directory: Path) -> Path | None:
    candidate = directory / DEFAULTS_FILENAME
    return candidate if candidate.is_file() else None


def load_defaults(directory: Path) -> ThisismyConfig:
    """
    Load `thisismy.json` from `directory`. A missing, unreadable or malformed
    file gives an empty config; only the latter two are worth a warning.
    """
    path = find_defaults_file(directory)
    if path is None:
        return ThisismyConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("Ignoring %s: %s", path, e)
        return ThisismyConfig()
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a JSON object", path)
        return ThisismyConfig()
    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> ThisismyConfig:
    mapped: dict[str, Any] = {}
    for key, value in data.items():
        name = _KEY_ALIASES.get(key, key)
        if name not in _VALID_FIELDS:
            log.debug("Unknown key in defaults file: %r", key)
            continue
        if name == "files" and isinstance(value, str):
            value = [value]
        mapped[name] = value
    return ThisismyConfig(**mapped)


def save_backup(directory: Path, options: object) -> Path:
    """Write the config-relevant fields of `options` to `thisismy.json`."""
    data: dict[str, Any] = {}
    for f in fields(ThisismyConfig):
        value = getattr(options, f.name, None)
        if value is not None:
            data[f.name] = value
    path = directory / DEFAULTS_FILENAME
    with atomic_output_file(path) as temp_path:
        Path(temp_path).write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


_T = TypeVar("_T")


def merge_cli_with_config(cli_opts: _T, config: ThisismyConfig | None, explicit_flags: set[str]) -> _T:
    """
    Merge CLI options with the defaults file.

    Precedence: explicit CLI flags > defaults file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(ThisismyConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in the defaults file
        if cfg_field.name in explicit_flags:
            continue
        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts


def parse_size_limit(text: str | None) -> int | None:
    """
    Parse `<number>[kb|mb]` (bare numbers are bytes) into a byte count, or
    `"no"` into `None` (unlimited). Invalid input falls back to the default.
    """
    if text is None:
        return DEFAULT_MAX_SIZE
    text = str(text)
    if text.strip().lower() == NO_LIMIT:
        return None
    match = _SIZE_RE.match(text)
    if not match:
        log.warning("Invalid size limit %r, using default %s", text, DEFAULT_SIZE_LIMIT)
        return DEFAULT_MAX_SIZE
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "").lower()])


def normalize_interval(value: int | str | None) -> int:
    """Poll interval in whole minutes, at least 1. Missing or invalid values give the default."""
    if value is None:
        return DEFAULT_INTERVAL_MINUTES
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        log.warning("Invalid interval %r, using %d minutes", value, DEFAULT_INTERVAL_MINUTES)
        return DEFAULT_INTERVAL_MINUTES
    if minutes < 1:
        log.warning("Interval must be at least 1 minute, using %d", DEFAULT_INTERVAL_MINUTES)
        return DEFAULT_INTERVAL_MINUTES
    return minutes
