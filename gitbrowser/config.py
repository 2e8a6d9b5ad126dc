"""Persistent JSON config helpers.

Stores the ordered list of registered repositories plus quick-open
preferences (the file-hiding pattern and the filter time budget).
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import math
import re
from pathlib import Path

import structlog
from platformdirs import user_config_dir

APP_NAME = "gitbrowser"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

REPOSITORIES_KEY = "repositories"
HIDE_PATTERN_KEY = "quick_open_hide_re"
FILTER_MAX_TIME_KEY = "quick_open_filter_max_time"

FILTER_MAX_TIME_DEFAULT_MS = 50
FILTER_MAX_TIME_MIN_MS = 10
FILTER_MAX_TIME_MAX_MS = 400

log = structlog.get_logger(__name__)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        log.warning("config.load_failed", path=str(CONFIG_PATH), error=str(exc))
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is logged and otherwise ignored so a
    read-only config directory never breaks the browser.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception as exc:
        log.warning("config.save_failed", path=str(CONFIG_PATH), error=str(exc))


def load_repository_roots() -> list[str]:
    """Load registered repository roots in display order.

    Non-string and empty entries are dropped, as are repeats.
    """
    value = load_config().get(REPOSITORIES_KEY)
    if not isinstance(value, list):
        return []
    roots: list[str] = []
    for raw in value:
        if not isinstance(raw, str) or not raw.strip():
            continue
        if raw in roots:
            continue
        roots.append(raw)
    return roots


def save_repository_roots(roots: list[str]) -> None:
    """Persist repository roots in display order."""
    config = load_config()
    config[REPOSITORIES_KEY] = [str(root) for root in roots]
    save_config(config)


def load_hide_pattern_source() -> str:
    """Return the raw file-hiding regex, or ``""`` when unset."""
    value = load_config().get(HIDE_PATTERN_KEY)
    return value if isinstance(value, str) else ""


def save_hide_pattern_source(source: str) -> None:
    config = load_config()
    config[HIDE_PATTERN_KEY] = str(source)
    save_config(config)


def compile_hide_pattern(source: str) -> re.Pattern[str] | None:
    """Compile the file-hiding regex; empty or invalid sources hide nothing."""
    if not source:
        return None
    try:
        return re.compile(source)
    except re.error as exc:
        log.warning("config.invalid_hide_pattern", pattern=source, error=str(exc))
        return None


def clamp_filter_max_time_ms(value: object) -> int:
    """Normalize the filter budget to an integer in the supported range.

    Booleans, non-numbers, and non-finite floats fall back to the default.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return FILTER_MAX_TIME_DEFAULT_MS
    if isinstance(value, float) and not math.isfinite(value):
        return FILTER_MAX_TIME_DEFAULT_MS
    return max(FILTER_MAX_TIME_MIN_MS, min(FILTER_MAX_TIME_MAX_MS, int(value)))


def load_filter_max_time_ms() -> int:
    return clamp_filter_max_time_ms(load_config().get(FILTER_MAX_TIME_KEY, FILTER_MAX_TIME_DEFAULT_MS))


def save_filter_max_time_ms(value: int) -> None:
    config = load_config()
    config[FILTER_MAX_TIME_KEY] = clamp_filter_max_time_ms(value)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "FILTER_MAX_TIME_DEFAULT_MS",
    "FILTER_MAX_TIME_MIN_MS",
    "FILTER_MAX_TIME_MAX_MS",
    "load_config",
    "save_config",
    "load_repository_roots",
    "save_repository_roots",
    "load_hide_pattern_source",
    "save_hide_pattern_source",
    "compile_hide_pattern",
    "clamp_filter_max_time_ms",
    "load_filter_max_time_ms",
    "save_filter_max_time_ms",
]
