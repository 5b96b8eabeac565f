from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from justified_text import logging_utils
from justified_text.settings import JustifierSettings


@pytest.fixture
def clean_logger():
    logger = logging.getLogger(logging_utils.LOGGER_NAME)
    before = list(logger.handlers)
    level = logger.level
    yield logger
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()


def test_resolve_logs_dir_prefers_env_override(tmp_path, monkeypatch):
    override = tmp_path / "custom"
    monkeypatch.setenv(logging_utils.LOG_DIR_ENV_VAR, str(override))
    resolved = logging_utils.resolve_logs_dir(tmp_path / "base")
    assert resolved == override / "justified-text"
    assert resolved.is_dir()


def test_resolve_logs_dir_uses_xdg_state(tmp_path, monkeypatch):
    monkeypatch.delenv(logging_utils.LOG_DIR_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    resolved = logging_utils.resolve_logs_dir(tmp_path / "base")
    assert resolved == tmp_path / "state" / "logs" / "justified-text"


def test_rotating_handler_keeps_retention_minus_one_backups(tmp_path):
    handler = logging_utils.build_rotating_file_handler(tmp_path, "test.log", retention=3)
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert handler.backupCount == 2
        assert handler.baseFilename == str(tmp_path / "test.log")
    finally:
        handler.close()


def test_rotating_handler_clamps_retention(tmp_path):
    handler = logging_utils.build_rotating_file_handler(tmp_path, "test.log", retention=0)
    try:
        assert handler.backupCount == 0
    finally:
        handler.close()


def test_resolve_log_level():
    assert logging_utils.resolve_log_level(True) == logging.DEBUG
    assert logging_utils.resolve_log_level(False) == logging.INFO


def test_package_logger_propagation_is_opt_in(monkeypatch):
    monkeypatch.delenv(logging_utils.PROPAGATE_ENV_VAR, raising=False)
    assert logging_utils.package_logger().propagate is False
    monkeypatch.setenv(logging_utils.PROPAGATE_ENV_VAR, "1")
    assert logging_utils.package_logger().propagate is True
    monkeypatch.delenv(logging_utils.PROPAGATE_ENV_VAR)
    logging_utils.package_logger()


def test_configure_logging_replaces_file_handler(tmp_path, clean_logger):
    settings = JustifierSettings(log_retention=4)
    logging_utils.configure_logging(settings, debug_enabled=True, log_dir=tmp_path)
    logger = logging_utils.configure_logging(settings, debug_enabled=True, log_dir=tmp_path)

    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].backupCount == 3
    assert logger.level == logging.DEBUG

    logging.getLogger("JustifiedText.Justifier").info("hello from the justifier")
    file_handlers[0].flush()
    assert "hello from the justifier" in (tmp_path / logging_utils.LOG_FILENAME).read_text(encoding="utf-8")
