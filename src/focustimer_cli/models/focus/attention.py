"""Randomized attention checks during focus sessions.

While a focus session runs, the scheduler waits a random interval, raises a
prompt ("still focused?") and waits for an answer. A negative answer or no
answer within the timeout is recorded as a distraction. Intervals follow an
exponential distribution so prompts cannot be anticipated.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING

from .errors import ConfigurationError
from .events import EventName
from .runtime import TimerHandle, TimerRuntime
from .session import SessionKind

if TYPE_CHECKING:
    from focustimer_cli.models.config_models import FocusSettings

logger = logging.getLogger(__name__)

MIN_PROMPT_DELAY = timedelta(minutes=1)
MAX_PROMPT_DELAY = timedelta(minutes=30)


def sample_prompt_delay(rate: float, u: float) -> timedelta:
    """Turn a uniform sample into the delay before the next attention check.

    ``rate`` is lambda in prompts per minute. The interval is drawn by inverse
    CDF of the exponential distribution, ``-ln(1 - u) / rate`` minutes, then
    clamped to [1, 30] minutes and rounded to whole seconds.
    """
    if not (isinstance(rate, (int, float)) and math.isfinite(rate) and rate > 0):
        raise ConfigurationError(
            f"prompt_frequency_lambda must be a positive number, got {rate!r}"
        )
    if not 0.0 <= u < 1.0:
        raise ValueError(f"uniform sample must be in [0, 1), got {u!r}")

    minutes = -math.log(1.0 - u) / rate
    # Clamp before converting; a tiny rate gives minutes beyond timedelta range
    low = MIN_PROMPT_DELAY.total_seconds() / 60
    high = MAX_PROMPT_DELAY.total_seconds() / 60
    minutes = min(max(minutes, low), high)
    return timedelta(seconds=round(minutes * 60))


class AttentionPhase(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    PROMPTING = "prompting"


@dataclass(frozen=True)
class AttentionState:
    """Attention data for the current focus session."""

    phase: AttentionPhase = AttentionPhase.IDLE
    active: bool = False
    distraction_timestamps: tuple[datetime, ...] = field(default_factory=tuple)

    @property
    def is_prompt_pending(self) -> bool:
        return self.phase is AttentionPhase.PROMPTING

    @property
    def distraction_count(self) -> int:
        return len(self.distraction_timestamps)

    def record_distraction(self, when: datetime) -> "AttentionState":
        return replace(
            self, distraction_timestamps=self.distraction_timestamps + (when,)
        )


# Commands


@dataclass(frozen=True)
class Begin:
    delay: timedelta
    timeout: timedelta


@dataclass(frozen=True)
class Suspend:
    pass


@dataclass(frozen=True)
class PromptDue:
    timeout: timedelta
    eligible: bool = True


@dataclass(frozen=True)
class Respond:
    attentive: bool
    now: datetime
    next_delay: timedelta | None


@dataclass(frozen=True)
class PromptTimedOut:
    now: datetime
    next_delay: timedelta | None


@dataclass(frozen=True)
class Reset:
    pass


AttentionCommand = Begin | Suspend | PromptDue | Respond | PromptTimedOut | Reset


# Effects


@dataclass(frozen=True)
class SchedulePrompt:
    delay: timedelta


@dataclass(frozen=True)
class StartPromptTimeout:
    timeout: timedelta


@dataclass(frozen=True)
class CancelAttentionTimer:
    pass


AttentionEffect = SchedulePrompt | StartPromptTimeout | CancelAttentionTimer


@dataclass(frozen=True)
class AttentionTransition:
    state: AttentionState
    effects: tuple[AttentionEffect, ...] = ()
    events: tuple[EventName, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.effects or self.events)


def _resolve(
    state: AttentionState, next_delay: timedelta | None
) -> AttentionTransition:
    """Leave the prompting phase, rescheduling if the session is running."""
    if state.active and next_delay is not None:
        return AttentionTransition(
            replace(state, phase=AttentionPhase.SCHEDULED),
            (SchedulePrompt(next_delay),),
            (EventName.STATE_CHANGED,),
        )
    return AttentionTransition(
        replace(state, phase=AttentionPhase.IDLE),
        (CancelAttentionTimer(),),
        (EventName.STATE_CHANGED,),
    )


def step_attention(
    state: AttentionState, command: AttentionCommand
) -> AttentionTransition:
    """Apply one command to the attention state.

    Commands that do not apply to the current phase (a late answer, a stale
    timer) return the state unchanged with no effects.
    """
    if isinstance(command, Reset):
        return AttentionTransition(
            AttentionState(), (CancelAttentionTimer(),), (EventName.STATE_CHANGED,)
        )

    if isinstance(command, Begin):
        if state.phase is AttentionPhase.PROMPTING:
            # Paused mid-prompt: give the user a fresh timeout to answer
            return AttentionTransition(
                replace(state, active=True),
                (StartPromptTimeout(command.timeout),),
                (EventName.STATE_CHANGED,),
            )
        return AttentionTransition(
            replace(state, active=True, phase=AttentionPhase.SCHEDULED),
            (SchedulePrompt(command.delay),),
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, Suspend):
        phase = state.phase
        if phase is AttentionPhase.SCHEDULED:
            phase = AttentionPhase.IDLE
        return AttentionTransition(
            replace(state, active=False, phase=phase),
            (CancelAttentionTimer(),),
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, PromptDue):
        if not state.active or state.phase is not AttentionPhase.SCHEDULED:
            return AttentionTransition(state)
        if not command.eligible:
            return AttentionTransition(
                replace(state, phase=AttentionPhase.IDLE),
                (),
                (EventName.STATE_CHANGED,),
            )
        return AttentionTransition(
            replace(state, phase=AttentionPhase.PROMPTING),
            (StartPromptTimeout(command.timeout),),
            (EventName.ATTENTION_PROMPT_RAISED, EventName.STATE_CHANGED),
        )

    if isinstance(command, Respond):
        if state.phase is not AttentionPhase.PROMPTING:
            return AttentionTransition(state)
        if not command.attentive:
            state = state.record_distraction(command.now)
        return _resolve(state, command.next_delay)

    if isinstance(command, PromptTimedOut):
        if state.phase is not AttentionPhase.PROMPTING or not state.active:
            return AttentionTransition(state)
        return _resolve(state.record_distraction(command.now), command.next_delay)

    raise TypeError(f"Unknown attention command: {command!r}")


class AttentionScheduler:
    """Owns the attention state and its single timer.

    At any time at most one timer is armed: either the wait for the next
    prompt or the timeout of the prompt being shown.
    """

    def __init__(
        self,
        runtime: TimerRuntime,
        settings_provider: Callable[[], FocusSettings],
        notify: Callable[[EventName], None] | None = None,
        rng: random.Random | None = None,
        is_eligible: Callable[[], bool] | None = None,
    ):
        self._runtime = runtime
        self._settings_provider = settings_provider
        self._notify = notify
        self._rng = rng or random.Random()
        self._is_eligible = is_eligible or (lambda: True)
        self._state = AttentionState()
        self._timer: TimerHandle | None = None
        self._generation = 0

    @property
    def state(self) -> AttentionState:
        return self._state

    @property
    def is_prompt_pending(self) -> bool:
        return self._state.is_prompt_pending

    def next_delay(self, settings: FocusSettings | None = None) -> timedelta:
        """Draw the wait before the next prompt from the configured rate."""
        settings = settings or self._read_settings()
        return sample_prompt_delay(
            settings.prompt_frequency_lambda, self._rng.random()
        )

    def start(self, kind: SessionKind) -> None:
        """Begin (or resume) checks for a running session of ``kind``.

        Raises:
            ConfigurationError: If the prompt rate is not a positive number
                or the settings cannot be read.
        """
        settings = self._read_settings()
        if kind is not SessionKind.FOCUS or not settings.enable_attention_monitoring:
            return
        delay = self.next_delay(settings)
        self._dispatch(Begin(delay=delay, timeout=settings.prompt_timeout))

    def stop(self) -> None:
        """Cancel timers but keep the pending prompt and distraction data."""
        if self._state.active or self._timer is not None:
            self._dispatch(Suspend())

    def reset(self) -> None:
        """Cancel timers and forget everything about the current session."""
        self._dispatch(Reset())

    def respond_to_prompt(self, is_attentive: bool) -> bool:
        """Answer the pending prompt. Returns False if none was pending."""
        if not self._state.is_prompt_pending:
            logger.debug("Ignoring prompt response with no prompt pending")
            return False
        command = Respond(
            attentive=is_attentive,
            now=self._runtime.now(),
            next_delay=self._reschedule_delay(),
        )
        self._dispatch(command)
        return True

    def dispose(self) -> None:
        self._cancel_timer()

    def _read_settings(self) -> FocusSettings:
        try:
            return self._settings_provider()
        except Exception as e:
            raise ConfigurationError(f"Could not read settings: {e}") from e

    def _reschedule_delay(self) -> timedelta | None:
        if not self._state.active:
            return None
        try:
            return self.next_delay()
        except ConfigurationError as e:
            logger.warning("Attention checks paused: %s", e)
            return None

    def _on_prompt_due(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._timer = None
        try:
            settings = self._read_settings()
        except ConfigurationError as e:
            logger.warning("Attention checks paused: %s", e)
            self._dispatch(Suspend())
            return
        self._dispatch(
            PromptDue(timeout=settings.prompt_timeout, eligible=self._is_eligible())
        )

    def _on_prompt_timeout(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._timer = None
        logger.info("Attention prompt timed out, recording distraction")
        self._dispatch(
            PromptTimedOut(now=self._runtime.now(), next_delay=self._reschedule_delay())
        )

    def _dispatch(self, command: AttentionCommand) -> None:
        transition = step_attention(self._state, command)
        self._state = transition.state
        for effect in transition.effects:
            self._apply(effect)
        if transition.changed:
            logger.debug(
                "attention %s -> %s (distractions=%d)",
                type(command).__name__,
                self._state.phase.value,
                self._state.distraction_count,
            )
        if self._notify is not None:
            for event in transition.events:
                self._notify(event)

    def _apply(self, effect: AttentionEffect) -> None:
        if isinstance(effect, SchedulePrompt):
            self._arm(effect.delay, self._on_prompt_due)
        elif isinstance(effect, StartPromptTimeout):
            self._arm(effect.timeout, self._on_prompt_timeout)
        elif isinstance(effect, CancelAttentionTimer):
            self._cancel_timer()

    def _arm(self, delay: timedelta, handler: Callable[[int], None]) -> None:
        self._cancel_timer()
        self._timer = self._runtime.call_later(
            delay.total_seconds(), partial(handler, self._generation)
        )

    def _cancel_timer(self) -> None:
        # Bumping the generation invalidates a callback that is already queued
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
