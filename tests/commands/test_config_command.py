"""Unit tests for config management commands (view, get, set, reset)."""

import json
from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from focustimer_cli.commands.config import app
from focustimer_cli.utils.exit_codes import ERROR_CONFIG, ERROR_INVALID_ARGS

runner = CliRunner()


# ---------------------------------------------------------------------------
# Help flags
# ---------------------------------------------------------------------------


class TestHelpFlags:
    @pytest.mark.parametrize("cmd", [[], ["view"], ["get"], ["set"], ["reset"]])
    def test_help(self, cmd):
        result = runner.invoke(app, cmd + ["--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# view
# ---------------------------------------------------------------------------


class TestViewCommand:
    def test_view_json(self, patch_config_service):
        result = runner.invoke(app, ["view", "--output", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["focus"]["focus_duration_minutes"] == 25
        assert data["focus"]["prompt_frequency_lambda"] == 0.1

    def test_view_yaml(self, patch_config_service):
        result = runner.invoke(app, ["view", "-o", "yaml"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["focus"]["break_duration_minutes"] == 5

    def test_view_table_uses_dotted_keys(self, patch_config_service):
        result = runner.invoke(app, ["view"])
        assert result.exit_code == 0
        assert "focus.prompt_timeout_seconds" in result.output

    def test_load_failure_reported(self):
        svc = MagicMock()
        svc.to_dict.side_effect = RuntimeError("Failed to load config: bad json")
        with patch("focustimer_cli.commands.config.get_config_service", return_value=svc):
            result = runner.invoke(app, ["view"])
        assert result.exit_code == 1
        assert "bad json" in result.output


# ---------------------------------------------------------------------------
# get / set
# ---------------------------------------------------------------------------


class TestGetCommand:
    def test_get_value(self, patch_config_service):
        result = runner.invoke(app, ["get", "focus.break_duration_minutes"])
        assert result.exit_code == 0
        assert "5" in result.output

    def test_get_section(self, patch_config_service):
        result = runner.invoke(app, ["get", "output"])
        assert result.exit_code == 0
        assert "table" in result.output

    def test_get_unknown_key(self, patch_config_service):
        result = runner.invoke(app, ["get", "focus.nope"])
        assert result.exit_code == ERROR_CONFIG
        assert "not found" in result.output


class TestSetCommand:
    def test_set_value_persists(self, patch_config_service):
        result = runner.invoke(app, ["set", "focus.focus_duration_minutes", "50"])
        assert result.exit_code == 0, result.output
        assert "set to '50'" in result.output
        assert patch_config_service.reload().focus.focus_duration_minutes == 50

    def test_set_boolean(self, patch_config_service):
        result = runner.invoke(app, ["set", "focus.auto_start_break", "false"])
        assert result.exit_code == 0
        assert patch_config_service.config.focus.auto_start_break is False

    def test_set_out_of_range_lambda(self, patch_config_service):
        result = runner.invoke(app, ["set", "focus.prompt_frequency_lambda", "0"])
        assert result.exit_code == ERROR_INVALID_ARGS
        assert patch_config_service.reload().focus.prompt_frequency_lambda == 0.1

    def test_set_unknown_key(self, patch_config_service):
        result = runner.invoke(app, ["set", "focus.colour", "red"])
        assert result.exit_code == ERROR_CONFIG


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------


class TestResetCommand:
    def test_reset_key(self, patch_config_service):
        patch_config_service.set("focus.break_duration_minutes", 15)
        result = runner.invoke(app, ["reset", "focus.break_duration_minutes", "--yes"])
        assert result.exit_code == 0
        assert "reset to default" in result.output
        assert patch_config_service.config.focus.break_duration_minutes == 5

    def test_reset_all(self, patch_config_service):
        patch_config_service.set("output.format", "json")
        result = runner.invoke(app, ["reset", "-y"])
        assert result.exit_code == 0
        assert patch_config_service.config.output.format == "table"

    def test_reset_cancelled(self, patch_config_service):
        patch_config_service.set("focus.break_duration_minutes", 15)
        result = runner.invoke(app, ["reset"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert patch_config_service.config.focus.break_duration_minutes == 15

    def test_reset_unknown_key(self, patch_config_service):
        result = runner.invoke(app, ["reset", "nope", "--yes"])
        assert result.exit_code == ERROR_CONFIG
