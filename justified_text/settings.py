"""Settings and dev-mode debug flags for justified-text."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from justified_text.justifier import DEFAULT_FILL_LIMIT_FACTOR, DEFAULT_MIN_FILL_LIMIT, HAIR_SPACE
from justified_text.version import DEV_MODE_ENV_VAR, __version__, is_dev_build

DEBUG_CONFIG_ENABLED = is_dev_build(__version__)
SETTINGS_FILENAME = "justify_settings.json"
DEV_SETTINGS_FILENAME = "dev_settings.json"

LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20
FILL_LIMIT_FACTOR_MIN = 1
FILL_LIMIT_FACTOR_MAX = 256

__all__ = [
    "DEBUG_CONFIG_ENABLED",
    "DEV_MODE_ENV_VAR",
    "DebugConfig",
    "JustifierSettings",
    "load_dev_settings",
    "load_settings",
]


@dataclass(frozen=True)
class JustifierSettings:
    """User-facing knobs for justification and the host adapter."""

    thin_space: str = HAIR_SPACE
    fill_limit_factor: int = DEFAULT_FILL_LIMIT_FACTOR
    min_fill_limit: int = DEFAULT_MIN_FILL_LIMIT
    random_seed: Optional[int] = None
    background: bool = True
    font_family: Optional[str] = None
    point_size: float = 12.0
    log_retention: int = 5


@dataclass(frozen=True)
class DebugConfig:
    trace_lines: bool = False
    log_measure_stats: bool = False


def _coerce_int(value: Any, fallback: Optional[int], *, minimum: Optional[int] = None, maximum: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return fallback
    if minimum is not None and numeric < minimum:
        return minimum
    if maximum is not None and numeric > maximum:
        return maximum
    return numeric


def _coerce_float(value: Any, fallback: float) -> float:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if numeric != numeric or numeric <= 0.0:
        return fallback
    return numeric


def _coerce_thin_space(value: Any, fallback: str) -> str:
    if not isinstance(value, str) or not value:
        return fallback
    # Allow "U+200A" style code points in hand-edited files.
    token = value.strip()
    if token.upper().startswith("U+"):
        try:
            return chr(int(token[2:], 16))
        except ValueError:
            return fallback
    if value.strip(" ") == "":
        # A normal space would be indistinguishable from word gaps.
        return fallback
    return value


def load_settings(path: Path) -> JustifierSettings:
    """Read justify_settings.json, falling back to defaults for anything unusable."""
    defaults = JustifierSettings()
    try:
        raw = path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return defaults
    if not isinstance(data, dict):
        return defaults

    font_family = data.get("font_family")
    if not isinstance(font_family, str) or not font_family.strip():
        font_family = defaults.font_family
    else:
        font_family = font_family.strip()

    return JustifierSettings(
        thin_space=_coerce_thin_space(data.get("thin_space"), defaults.thin_space),
        fill_limit_factor=_coerce_int(
            data.get("fill_limit_factor"),
            defaults.fill_limit_factor,
            minimum=FILL_LIMIT_FACTOR_MIN,
            maximum=FILL_LIMIT_FACTOR_MAX,
        )
        or defaults.fill_limit_factor,
        min_fill_limit=_coerce_int(data.get("min_fill_limit"), defaults.min_fill_limit, minimum=1)
        or defaults.min_fill_limit,
        random_seed=_coerce_int(data.get("random_seed"), None),
        background=bool(data.get("background", defaults.background)),
        font_family=font_family,
        point_size=_coerce_float(data.get("point_size"), defaults.point_size),
        log_retention=_coerce_int(
            data.get("log_retention"),
            defaults.log_retention,
            minimum=LOG_RETENTION_MIN,
            maximum=LOG_RETENTION_MAX,
        )
        or defaults.log_retention,
    )


def load_dev_settings(path: Path) -> DebugConfig:
    """Load dev-mode-only flags from dev_settings.json, writing defaults back when missing."""

    if not DEBUG_CONFIG_ENABLED:
        return DebugConfig()
    defaults = {
        "trace_lines": False,
        "log_measure_stats": False,
    }
    raw_data: dict[str, Any] = {}
    needs_write = False
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError:
        raw_data = deepcopy(defaults)
        needs_write = True
    else:
        try:
            loaded = json.loads(raw_text)
        except json.JSONDecodeError:
            raw_data = deepcopy(defaults)
            needs_write = True
        else:
            raw_data = loaded if isinstance(loaded, dict) else {}
            if not isinstance(loaded, dict):
                needs_write = True

    data: dict[str, Any] = deepcopy(raw_data)
    for key, default_value in defaults.items():
        if key not in data:
            data[key] = default_value
            needs_write = True

    normalized = DebugConfig(
        trace_lines=bool(data.get("trace_lines", False)),
        log_measure_stats=bool(data.get("log_measure_stats", False)),
    )

    if needs_write:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError:
            pass

    return normalized
