"""Tests for the application logger utility."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger singleton and logging state between tests."""
    import focustimer_cli.utils.logger as logger_mod

    logger_mod._logger = None
    logging.getLogger("focustimer_cli").handlers.clear()

    yield

    logger_mod._logger = None
    logging.getLogger("focustimer_cli").handlers.clear()


def test_get_logger_creates_log_file(tmp_path):
    """Logger creates the log file inside user_log_dir."""
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from focustimer_cli.utils.logger import get_logger

        logger = get_logger()

    assert (tmp_path / "focustimer.log").exists()
    assert isinstance(logger, logging.Logger)


def test_get_logger_returns_singleton(tmp_path):
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from focustimer_cli.utils.logger import get_logger

        assert get_logger() is get_logger()


def test_module_loggers_write_to_same_file(tmp_path):
    """Loggers created with getLogger(__name__) inside the package share the file."""
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from focustimer_cli.utils.logger import get_logger

        logger = get_logger()
        logging.getLogger("focustimer_cli.models.focus.controller").info("tick from core")

    for handler in logger.handlers:
        handler.flush()

    content = (tmp_path / "focustimer.log").read_text()
    assert "tick from core" in content
    assert "[focustimer_cli.models.focus.controller]" in content


def test_get_logger_creates_parent_dirs(tmp_path):
    nested = tmp_path / "a" / "b" / "c"
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(nested)):
        from focustimer_cli.utils.logger import get_logger

        get_logger()

    assert nested.is_dir()


def test_log_file_path_under_user_log_dir(tmp_path):
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from focustimer_cli.utils.logger import log_file_path

        assert log_file_path() == tmp_path / "focustimer.log"


def test_logger_does_not_propagate_to_root(tmp_path):
    with patch("focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from focustimer_cli.utils.logger import get_logger

        logger = get_logger()

    assert logger.propagate is False
    assert len(logger.handlers) == 1
