"""Tests for the pydantic configuration models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from focustimer_cli.models.config_models import (
    LAMBDA_MAX,
    LAMBDA_MIN,
    AppConfig,
    FocusSettings,
    OutputConfig,
)
from focustimer_cli.models.focus.session import SessionKind


class TestFocusSettingsDefaults:
    def test_defaults(self):
        settings = FocusSettings()
        assert settings.focus_duration == timedelta(minutes=25)
        assert settings.break_duration == timedelta(minutes=5)
        assert settings.auto_start_break is True
        assert settings.auto_start_focus is False
        assert settings.enable_attention_monitoring is True
        assert settings.prompt_frequency_lambda == 0.1
        assert settings.prompt_timeout == timedelta(seconds=15)
        assert settings.enable_sound_alerts is True


class TestFocusSettingsValidation:
    @pytest.mark.parametrize("rate", [LAMBDA_MIN, 1.0, LAMBDA_MAX])
    def test_lambda_bounds_accepted(self, rate):
        assert FocusSettings(prompt_frequency_lambda=rate).prompt_frequency_lambda == rate

    @pytest.mark.parametrize("rate", [0, -1, LAMBDA_MIN / 2, LAMBDA_MAX + 1])
    def test_lambda_out_of_bounds(self, rate):
        with pytest.raises(ValidationError):
            FocusSettings(prompt_frequency_lambda=rate)

    @pytest.mark.parametrize(
        "field", ["focus_duration_minutes", "break_duration_minutes", "prompt_timeout_seconds"]
    )
    def test_durations_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            FocusSettings(**{field: 0})


class TestFocusSettingsHelpers:
    def test_duration_for(self):
        settings = FocusSettings(focus_duration_minutes=50, break_duration_minutes=10)
        assert settings.duration_for(SessionKind.FOCUS) == timedelta(minutes=50)
        assert settings.duration_for(SessionKind.REST) == timedelta(minutes=10)

    def test_auto_start_after(self):
        settings = FocusSettings(auto_start_break=False, auto_start_focus=True)
        assert settings.auto_start_after(SessionKind.FOCUS) is False
        assert settings.auto_start_after(SessionKind.REST) is True


class TestAppConfig:
    def test_nested_defaults(self):
        config = AppConfig()
        assert config.focus == FocusSettings()
        assert config.output == OutputConfig()

    def test_partial_json(self):
        config = AppConfig.model_validate_json('{"output": {"format": "yaml"}}')
        assert config.output.format == "yaml"
        assert config.focus.focus_duration_minutes == 25

    def test_unknown_output_format(self):
        with pytest.raises(ValidationError):
            OutputConfig(format="xml")
