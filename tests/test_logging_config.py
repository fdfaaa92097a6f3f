import logging

import pytest
import structlog

from simulated_ratings.logging_config import (
    LOG_LEVEL_ENV,
    configure_logging,
    logging_settings,
    reset_logging,
    resolve_log_level,
)


def test_explicit_level_wins(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
    assert resolve_log_level("debug") == logging.DEBUG


def test_environment_level(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "info")
    assert resolve_log_level() == logging.INFO


def test_default_level(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    assert resolve_log_level() == logging.WARNING


def test_unknown_level_raises():
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_log_level("chatty")


def test_logs_go_to_stderr(capsys):
    configure_logging("info", json_logs=True)
    structlog.get_logger("simulated_ratings.test").info("hello", answer=42)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert '"event": "hello"' in captured.err
    assert '"answer": 42' in captured.err


def test_settings_record_resolved_level(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    assert logging_settings() is None
    configure_logging(json_logs=True)
    assert logging_settings() == ("DEBUG", True)


def test_settings_reproduce_configuration(capsys):
    configure_logging("error")
    settings = logging_settings()
    reset_logging()
    assert logging_settings() is None

    configure_logging(*settings)
    logger = structlog.get_logger("simulated_ratings.test")
    logger.warning("dropped")
    logger.error("kept")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "kept" in captured.err
    assert "dropped" not in captured.err
