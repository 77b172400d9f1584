# sift/utils/logging_config.py
"""Logging setup for sift.

The root logger gets a rotating `sift.log`, and optionally a stderr handler
and a separate `error.log`. Per-frame render traces go to the `sift.trace`
logger, which writes to `trace.log` only when `SIFT_TRACE` is set and is
silenced otherwise. Call `setup_logging` before curses takes the terminal.
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


logger = logging.getLogger("sift")
TRACE_LOGGER = logging.getLogger("sift.trace")

TRACE_ENV_VAR = "SIFT_TRACE"


def trace_enabled() -> bool:
    """True when render tracing was requested through the environment."""
    return os.environ.get(TRACE_ENV_VAR, "").lower() in {"1", "true", "yes"}


def setup_logging(config: Optional[dict[str, Any]] = None, log_filename: str = "sift.log") -> None:
    """Install the sift log handlers on the root and trace loggers.

    Existing root handlers are replaced, so repeated calls do not duplicate
    records. I/O errors are reported on stderr and never raised.

    Args:
        config: Application config; only its ``["logging"]`` table is read
            (`file_level`, `console_level`, `log_to_console`,
            `separate_error_log`).
        log_filename: Path of the main log file.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_file_level_str = logging_config.get("file_level", "DEBUG").upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(
                f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr
            )
            log_filename = os.path.join(tempfile.gettempdir(), "sift.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = logging_config.get("console_level", "WARNING").upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = os.path.join(log_dir, "error.log") if log_dir else "error.log"
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                error_log_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates

    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    if error_file_handler:
        root_logger.addHandler(error_file_handler)

    root_logger.setLevel(log_file_level)

    # Trace Logger
    TRACE_LOGGER.propagate = False
    TRACE_LOGGER.setLevel(logging.DEBUG)
    TRACE_LOGGER.handlers = []

    if trace_enabled():
        try:
            trace_filename = os.path.join(log_dir, "trace.log") if log_dir else "trace.log"
            trace_handler = logging.handlers.RotatingFileHandler(
                trace_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            trace_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(threadName)s - %(message)s")
            )
            TRACE_LOGGER.addHandler(trace_handler)
            TRACE_LOGGER.disabled = False
            logging.info("Render tracing enabled, logging to '%s'.", trace_filename)
        except Exception as e_trace:
            logging.error(f"Failed to set up trace logging: {e_trace}", exc_info=True)
            TRACE_LOGGER.disabled = True
    else:
        TRACE_LOGGER.addHandler(logging.NullHandler())
        TRACE_LOGGER.disabled = True
        logging.debug("Render tracing is disabled.")

    logging.debug("Logging configured at level %s.", logging.getLevelName(root_logger.level))
