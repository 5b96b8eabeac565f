from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from justified_text.settings import DEBUG_CONFIG_ENABLED, JustifierSettings

LOGGER_NAME = "JustifiedText"
LOG_FILENAME = "justified-text.log"
LOG_DIR_ENV_VAR = "JUSTIFIED_TEXT_LOG_DIR"
PROPAGATE_ENV_VAR = "JUSTIFIED_TEXT_PROPAGATE_LOGS"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - logging shim
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def _propagation_requested() -> bool:
    return os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}


def package_logger() -> logging.Logger:
    """Return the package logger with level and propagation applied."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(DEBUG_CONFIG_ENABLED))
    # Opt-in propagation flag for environments/tests that want logs upstream.
    logger.propagate = _propagation_requested()
    return logger


def resolve_logs_dir(base_path: Path, log_dir_name: str = "justified-text") -> Path:
    """
    Resolve the directory to store logs.

    Strategy:
    - Use JUSTIFIED_TEXT_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    ``base_path`` is only used when it already contains a `logs` directory.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    local_logs = base_path.resolve() / "logs"
    if local_logs.is_dir():
        candidates.append(local_logs)

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_logging(
    settings: JustifierSettings,
    *,
    debug_enabled: bool = DEBUG_CONFIG_ENABLED,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach a rotating file handler to the package logger and return it."""
    logger = package_logger()
    logger.setLevel(resolve_log_level(debug_enabled))
    target_dir = log_dir if log_dir is not None else resolve_logs_dir(Path.cwd())
    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler):
            logger.removeHandler(existing)
            existing.close()
    handler = build_rotating_file_handler(
        target_dir,
        LOG_FILENAME,
        retention=settings.log_retention,
        formatter=logging.Formatter(_LOG_FORMAT),
    )
    handler.addFilter(_ReleaseLogLevelFilter(release_mode=not debug_enabled))
    logger.addHandler(handler)
    logger.debug("Logging to %s (retention=%d)", target_dir / LOG_FILENAME, settings.log_retention)
    return logger
