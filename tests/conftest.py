"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state and a
virtual clock for driving the timer without waiting.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from focustimer_cli.models.config_models import FocusSettings
from focustimer_cli.models.focus.controller import SessionController
from focustimer_cli.models.focus.events import EventQueue
from focustimer_cli.models.focus.runtime import VirtualRuntime
from focustimer_cli.models.focus.store import InMemorySessionStore

START = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from focustimer_cli.services.config_service import get_config_service

    get_config_service.cache_clear()
    with patch(
        "focustimer_cli.services.config_service.user_config_dir",
        return_value=str(tmp_path),
    ):
        from focustimer_cli.services.config_service import ConfigService

        svc = ConfigService()
        yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def patch_config_service(tmp_config):
    """Patch get_config_service everywhere commands look it up."""
    with patch(
        "focustimer_cli.commands.focus.get_config_service", return_value=tmp_config
    ), patch(
        "focustimer_cli.commands.config.get_config_service", return_value=tmp_config
    ):
        yield tmp_config


@pytest.fixture(autouse=True)
def isolate_logs(tmp_path):
    """Keep the application log file out of the real user log directory."""
    import focustimer_cli.utils.logger as logger_mod

    logger_mod._logger = None
    with patch(
        "focustimer_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")
    ):
        yield
    app_logger = logging.getLogger(logger_mod._APP_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.propagate = True
    logger_mod._logger = None


# ---------------------------------------------------------------------------
# Timer fixtures
# ---------------------------------------------------------------------------


class SettingsBox:
    """Mutable holder so tests can change settings between operations."""

    def __init__(self, **overrides):
        self.value = FocusSettings(**overrides)

    def __call__(self) -> FocusSettings:
        return self.value

    def update(self, **overrides) -> None:
        self.value = self.value.model_copy(update=overrides)


@pytest.fixture()
def make_settings():
    """Factory for settings holders with custom overrides."""
    return SettingsBox


@pytest.fixture()
def runtime() -> VirtualRuntime:
    return VirtualRuntime(start=START)


@pytest.fixture()
def settings() -> SettingsBox:
    return SettingsBox(
        focus_duration_minutes=25,
        break_duration_minutes=5,
        auto_start_break=False,
        auto_start_focus=False,
        enable_attention_monitoring=False,
    )


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def events() -> EventQueue:
    return EventQueue()


@pytest.fixture()
def controller(runtime, settings, store, events) -> SessionController:
    ctrl = SessionController(runtime, settings, store, events, rng=random.Random(42))
    yield ctrl
    ctrl.dispose()
