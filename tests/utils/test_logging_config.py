# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `sift.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Attaches the render trace log only when `SIFT_TRACE` is set.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging
import logging.handlers

import pytest

from sift.utils import logging_config


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root and trace loggers back the way the test found them."""
    root = logging.getLogger()
    saved = (root.handlers[:], root.level)
    trace = logging_config.TRACE_LOGGER
    trace_saved = (trace.handlers[:], trace.propagate, trace.disabled, trace.level)
    yield
    for handler in root.handlers:
        if handler not in saved[0]:
            handler.close()
    for handler in trace.handlers:
        if handler not in trace_saved[0]:
            handler.close()
    root.handlers, root.level = saved
    trace.handlers, trace.propagate, trace.disabled, trace.level = trace_saved


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.
    - Error file handler level is ERROR.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.TRACE_ENV_VAR, raising=False)

    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    root = logging.getLogger()
    names = {type(h).__name__ for h in root.handlers}

    # A rotating file handler should be present for the main log
    assert "RotatingFileHandler" in names

    # Exactly two handlers: main file + error file
    assert len(root.handlers) == 2

    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert (tmp_path / "sift.log").exists()
    assert (tmp_path / "error.log").exists()


def test_console_handler_when_requested(tmp_path, monkeypatch) -> None:
    """`log_to_console` adds a stderr handler at `console_level`."""
    monkeypatch.chdir(tmp_path)
    logging_config.setup_logging({"logging": {"log_to_console": True, "console_level": "ERROR"}})

    root = logging.getLogger()
    console = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(console) == 1
    assert console[0].level == logging.ERROR


def test_log_directory_is_created(tmp_path) -> None:
    """A missing directory for the main log file is created."""
    target = tmp_path / "logs" / "sift.log"
    logging_config.setup_logging({"logging": {"log_to_console": False}}, str(target))
    assert target.exists()


def test_trace_disabled_by_default(tmp_path, monkeypatch) -> None:
    """Without `SIFT_TRACE` the trace logger is silent and detached."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.TRACE_ENV_VAR, raising=False)

    logging_config.setup_logging({"logging": {"log_to_console": False}})

    trace = logging_config.TRACE_LOGGER
    assert trace.disabled
    assert not trace.propagate
    assert not (tmp_path / "trace.log").exists()


def test_trace_enabled_by_environment(tmp_path, monkeypatch) -> None:
    """`SIFT_TRACE=1` routes render traces to trace.log."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(logging_config.TRACE_ENV_VAR, "1")
    assert logging_config.trace_enabled()

    logging_config.setup_logging({"logging": {"log_to_console": False}})

    trace = logging_config.TRACE_LOGGER
    assert not trace.disabled
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in trace.handlers)

    trace.debug("frame drawn")
    for handler in trace.handlers:
        handler.flush()
    assert "frame drawn" in (tmp_path / "trace.log").read_text()
