"""File logging for the CLI.

Everything under the ``focustimer_cli`` logger goes to one rotating file in
the platform log directory. Nothing is logged to the terminal; the timer's
live display owns it.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "focustimer_cli"
_LOG_FILE = "focustimer.log"
_MAX_BYTES = 2 * 1024 * 1024
_BACKUP_COUNT = 3
_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    return handler


def get_logger() -> logging.Logger:
    """Return the package logger, attaching the file handler on first use.

    Module loggers (``logging.getLogger(__name__)`` inside the package) are
    children of this one, so timer and scheduler records land in the same
    file once any command has started.
    """
    global _logger
    if _logger is None:
        package_logger = logging.getLogger(_APP_NAME)
        if not package_logger.handlers:
            package_logger.addHandler(_file_handler(log_file_path()))
        package_logger.setLevel(logging.DEBUG)
        package_logger.propagate = False
        _logger = package_logger
    return _logger
