"""Logging setup for the API process."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "task_manager_api.stream"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach one stream handler to the package logger.

    Safe to call more than once: an existing handler is reused and only the
    level changes.
    """
    package_logger = logging.getLogger("task_manager_api")
    package_logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not any(handler.get_name() == _HANDLER_NAME for handler in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler.set_name(_HANDLER_NAME)
        package_logger.addHandler(handler)
