"""Unit tests for ConfigService.

Every test works on a ConfigService rooted in a temporary directory (see the
``tmp_config`` fixture) so nothing touches the user's real configuration.
"""

import json
from unittest.mock import patch

import pytest

from focustimer_cli.models.config_models import AppConfig, FocusSettings
from focustimer_cli.services.config_service import ConfigService, get_config_service


class TestLoadConfig:
    def test_first_load_writes_defaults(self, tmp_config):
        config = tmp_config.load_config()
        assert config == AppConfig()
        assert tmp_config.config_path.exists()
        data = json.loads(tmp_config.config_path.read_text())
        assert data["focus"]["focus_duration_minutes"] == 25

    def test_load_existing_file(self, tmp_config):
        tmp_config.config_path.write_text(
            json.dumps({"focus": {"focus_duration_minutes": 45}})
        )
        config = tmp_config.load_config()
        assert config.focus.focus_duration_minutes == 45
        assert config.focus.break_duration_minutes == 5

    def test_load_is_cached(self, tmp_config):
        assert tmp_config.load_config() is tmp_config.load_config()

    def test_invalid_json_raises_runtime_error(self, tmp_config):
        tmp_config.config_path.write_text("{not json")
        with pytest.raises(RuntimeError, match="Failed to load config"):
            tmp_config.load_config()

    def test_out_of_range_value_raises_runtime_error(self, tmp_config):
        tmp_config.config_path.write_text(
            json.dumps({"focus": {"prompt_frequency_lambda": 100}})
        )
        with pytest.raises(RuntimeError):
            tmp_config.load_config()

    def test_save_without_config_raises(self, tmp_config):
        with pytest.raises(RuntimeError, match="No configuration"):
            tmp_config.save_config()


class TestFocusSettings:
    def test_returns_focus_section(self, tmp_config):
        assert isinstance(tmp_config.focus_settings(), FocusSettings)

    def test_picks_up_edits_made_on_disk(self, tmp_config):
        tmp_config.load_config()
        tmp_config.config_path.write_text(
            json.dumps({"focus": {"break_duration_minutes": 12}})
        )
        assert tmp_config.focus_settings().break_duration_minutes == 12


class TestGetSet:
    def test_get_nested(self, tmp_config):
        assert tmp_config.get("focus.prompt_timeout_seconds") == 15

    def test_get_section_as_dict(self, tmp_config):
        assert tmp_config.get("output") == {"format": "table", "color": True}

    @pytest.mark.parametrize("key", ["missing", "focus.missing", "focus.focus_duration_minutes.x"])
    def test_get_unknown_key(self, tmp_config, key):
        with pytest.raises(KeyError):
            tmp_config.get(key)

    def test_set_coerces_and_saves(self, tmp_config):
        assert tmp_config.set("focus.prompt_frequency_lambda", "0.5") == 0.5
        data = json.loads(tmp_config.config_path.read_text())
        assert data["focus"]["prompt_frequency_lambda"] == 0.5

    def test_set_invalid_value_keeps_previous(self, tmp_config):
        with pytest.raises(ValueError):
            tmp_config.set("focus.focus_duration_minutes", "0")
        assert tmp_config.config.focus.focus_duration_minutes == 25

    def test_set_invalid_output_format(self, tmp_config):
        with pytest.raises(ValueError):
            tmp_config.set("output.format", "xml")

    def test_set_unknown_key(self, tmp_config):
        with pytest.raises(KeyError):
            tmp_config.set("focus.nope", 1)


class TestReset:
    def test_reset_single_key(self, tmp_config):
        tmp_config.set("focus.auto_start_focus", True)
        tmp_config.reset("focus.auto_start_focus")
        assert tmp_config.config.focus.auto_start_focus is False

    def test_reset_section(self, tmp_config):
        tmp_config.set("focus.focus_duration_minutes", 60)
        tmp_config.reset("focus")
        assert tmp_config.config.focus == FocusSettings()

    def test_reset_everything(self, tmp_config):
        tmp_config.set("output.color", False)
        tmp_config.reset()
        assert tmp_config.config == AppConfig()

    def test_reset_unknown_key(self, tmp_config):
        with pytest.raises(KeyError):
            tmp_config.reset("nope")


class TestGetConfigService:
    def test_cached_instance(self, tmp_path):
        get_config_service.cache_clear()
        with patch(
            "focustimer_cli.services.config_service.user_config_dir",
            return_value=str(tmp_path),
        ):
            first = get_config_service()
            second = get_config_service()
        get_config_service.cache_clear()

        assert first is second
        assert isinstance(first, ConfigService)
        assert (tmp_path / "config.json").exists()
