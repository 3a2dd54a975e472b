from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for census-diff.

The CLI talks to the user only through log lines of the form
``LABEL message`` on stdout, where LABEL is one of DEBUG, INFO, WARN, ERROR
or SUMMARY. The final SUMMARY line is the machine-readable result of a run.

Engine modules use ``logging.getLogger(__name__)``; all of them live under the
``census_diff`` namespace and therefore share the handler installed here.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "census_diff"

# between INFO (20) and WARNING (30): shown at the default level, never an alert
SUMMARY_LEVEL = 25
logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message`` with short labels (WARNING prints as WARN)."""

    labels = {
        "WARNING": "WARN",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.labels.get(record.levelname, record.levelname)
        return f"{label} {record.getMessage()}"


def _apply_level(logger: logging.Logger, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Install the stdout handler on the ``census_diff`` logger.

    Safe to call more than once: later calls keep the existing handler and
    can only switch DEBUG on (``--debug`` is parsed after the first call).
    """
    global _configured

    if _configured is not None:
        if debug:
            _apply_level(_configured, True)
        return _configured

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.handlers.clear()
    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(LabeledFormatter())
    app_logger.addHandler(handler)
    app_logger.propagate = False
    _apply_level(app_logger, debug)

    _configured = app_logger
    return app_logger


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup binds a fresh stream (tests)."""
    global _configured
    _configured = None
