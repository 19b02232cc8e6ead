"""Configuration models for FocusTimer CLI.

Settings are plain pydantic models so they validate on load and on every
``config set``; the timer core only ever reads them.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field

from focustimer_cli.models.focus.session import SessionKind

LAMBDA_MIN = 0.01
LAMBDA_MAX = 60.0


class FocusSettings(BaseModel):
    """Timer and attention-check settings."""

    focus_duration_minutes: int = Field(default=25, ge=1, le=240)
    break_duration_minutes: int = Field(default=5, ge=1, le=120)
    auto_start_break: bool = Field(default=True)
    auto_start_focus: bool = Field(default=False)

    enable_attention_monitoring: bool = Field(default=True)
    prompt_frequency_lambda: float = Field(
        default=0.1,
        ge=LAMBDA_MIN,
        le=LAMBDA_MAX,
        description="Attention checks per minute; higher means more frequent prompts",
    )
    prompt_timeout_seconds: int = Field(default=15, ge=1, le=600)

    enable_sound_alerts: bool = Field(default=True)

    @property
    def focus_duration(self) -> timedelta:
        return timedelta(minutes=self.focus_duration_minutes)

    @property
    def break_duration(self) -> timedelta:
        return timedelta(minutes=self.break_duration_minutes)

    @property
    def prompt_timeout(self) -> timedelta:
        return timedelta(seconds=self.prompt_timeout_seconds)

    def duration_for(self, kind: SessionKind) -> timedelta:
        """Planned duration for a new session of the given kind."""
        if kind is SessionKind.FOCUS:
            return self.focus_duration
        return self.break_duration

    def auto_start_after(self, kind: SessionKind) -> bool:
        """Whether the session following ``kind`` starts on its own."""
        if kind is SessionKind.FOCUS:
            return self.auto_start_break
        return self.auto_start_focus


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["table", "json", "yaml"] = Field(default="table")
    color: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main FocusTimer configuration."""

    focus: FocusSettings = Field(default_factory=FocusSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
