"""Session lifecycle and the one-second countdown.

``step`` is the pure transition function: it takes the current ``TimerState``
and a command and returns the next state together with the effects to carry
out (arm or cancel timers, persist a session) and the events to announce.
``SessionController`` owns the live state, feeds it user commands and timer
ticks, and executes the effects.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from functools import partial
from typing import TYPE_CHECKING

from .attention import AttentionScheduler, AttentionState, sample_prompt_delay
from .errors import (
    AlreadyRunning,
    ConfigurationError,
    FocusError,
    InvalidTransition,
    PersistenceError,
)
from .events import EventName, FocusEvent, FocusSnapshot, NotificationSink
from .runtime import TimerHandle, TimerRuntime
from .session import Session, SessionKind, SessionStatus
from .store import SessionStore

if TYPE_CHECKING:
    from focustimer_cli.models.config_models import FocusSettings

logger = logging.getLogger(__name__)

TICK = timedelta(seconds=1)


@dataclass(frozen=True)
class TimerState:
    """The controller's single live state."""

    current_session: Session | None = None
    remaining: timedelta = timedelta(0)
    current_kind: SessionKind = SessionKind.FOCUS
    status: SessionStatus = SessionStatus.STOPPED

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.status is SessionStatus.STOPPED

    @property
    def is_live(self) -> bool:
        return self.status in (SessionStatus.RUNNING, SessionStatus.PAUSED)


def progress(state: TimerState) -> float:
    """Fraction of the current session that has elapsed, in [0, 1]."""
    session = state.current_session
    if session is None or not session.planned_duration:
        return 0.0
    if session.actual_duration is not None:
        return min(1.0, session.actual_duration / session.planned_duration)
    elapsed = session.planned_duration - state.remaining
    return elapsed / session.planned_duration


def format_remaining(remaining: timedelta) -> str:
    """Format as MM:SS; minutes are not wrapped at 60."""
    total = max(0, int(remaining.total_seconds()))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"


# Commands


@dataclass(frozen=True)
class StartSession:
    settings: FocusSettings
    now: datetime
    kind: SessionKind | None = None


@dataclass(frozen=True)
class PauseSession:
    pass


@dataclass(frozen=True)
class ResumeSession:
    pass


@dataclass(frozen=True)
class StopSession:
    now: datetime
    distractions: tuple[datetime, ...] = ()


@dataclass(frozen=True)
class ResetSession:
    pass


@dataclass(frozen=True)
class SkipSession:
    now: datetime
    distractions: tuple[datetime, ...] = ()
    settings: FocusSettings | None = None


@dataclass(frozen=True)
class Tick:
    """One second of countdown.

    ``settings`` only matters on the tick that completes the session, where it
    decides the auto-start. Without it the controller settles in stopped.
    """

    now: datetime
    distractions: tuple[datetime, ...] = ()
    settings: FocusSettings | None = None


TimerCommand = (
    StartSession
    | PauseSession
    | ResumeSession
    | StopSession
    | ResetSession
    | SkipSession
    | Tick
)


# Effects


@dataclass(frozen=True)
class StartCountdown:
    pass


@dataclass(frozen=True)
class CancelCountdown:
    pass


@dataclass(frozen=True)
class StartAttention:
    kind: SessionKind


@dataclass(frozen=True)
class StopAttention:
    pass


@dataclass(frozen=True)
class ResetAttention:
    pass


@dataclass(frozen=True)
class Persist:
    session: Session


TimerEffect = (
    StartCountdown
    | CancelCountdown
    | StartAttention
    | StopAttention
    | ResetAttention
    | Persist
)


@dataclass(frozen=True)
class Transition:
    state: TimerState
    effects: tuple[TimerEffect, ...] = ()
    events: tuple[EventName, ...] = ()


def _start(
    state: TimerState,
    settings: FocusSettings,
    now: datetime,
    kind: SessionKind | None,
) -> Transition:
    kind = kind or state.current_kind
    duration = settings.duration_for(kind)
    session = Session(kind=kind, start_time=now, planned_duration=duration)
    return Transition(
        TimerState(
            current_session=session,
            remaining=duration,
            current_kind=kind,
            status=SessionStatus.RUNNING,
        ),
        (ResetAttention(), StartCountdown(), StartAttention(kind)),
        (EventName.SESSION_STARTED,),
    )


def _finalize(
    state: TimerState,
    status: SessionStatus,
    now: datetime,
    distractions: tuple[datetime, ...],
) -> tuple[Session, tuple[TimerEffect, ...]]:
    session = state.current_session
    assert session is not None
    if status is SessionStatus.COMPLETED:
        actual = session.planned_duration
    else:
        actual = session.planned_duration - state.remaining
    finalized = session.finalize(status, now, actual, distractions)
    effects = (CancelCountdown(), StopAttention(), Persist(finalized), ResetAttention())
    return finalized, effects


def _advance(
    state: TimerState,
    finalized: Session,
    settings: FocusSettings | None,
    now: datetime,
    effects: tuple[TimerEffect, ...],
    events: tuple[EventName, ...],
) -> Transition:
    """Auto-start the next kind or settle in stopped with the kind advanced."""
    next_kind = finalized.kind.next
    if settings is not None and settings.auto_start_after(finalized.kind):
        started = _start(state, settings, now, next_kind)
        return Transition(
            started.state,
            effects + started.effects,
            events + started.events + (EventName.STATE_CHANGED,),
        )
    return Transition(
        TimerState(
            current_session=finalized,
            remaining=timedelta(0),
            current_kind=next_kind,
            status=SessionStatus.STOPPED,
        ),
        effects,
        events + (EventName.STATE_CHANGED,),
    )


def step(state: TimerState, command: TimerCommand) -> Transition:
    """Apply one command to the timer state.

    Raises:
        InvalidTransition: If the command is not valid in the current status.
    """
    status = state.status

    if isinstance(command, StartSession):
        if state.is_live:
            raise AlreadyRunning(status)
        started = _start(state, command.settings, command.now, command.kind)
        return Transition(
            started.state, started.effects, started.events + (EventName.STATE_CHANGED,)
        )

    if isinstance(command, PauseSession):
        if not state.is_running:
            raise InvalidTransition("pause", status)
        return Transition(
            replace(
                state,
                status=SessionStatus.PAUSED,
                current_session=state.current_session.with_status(SessionStatus.PAUSED),
            ),
            (CancelCountdown(), StopAttention()),
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, ResumeSession):
        if not state.is_paused:
            raise InvalidTransition("resume", status)
        session = state.current_session.with_status(SessionStatus.RUNNING)
        return Transition(
            replace(state, status=SessionStatus.RUNNING, current_session=session),
            (StartCountdown(), StartAttention(session.kind)),
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, StopSession):
        if not state.is_live:
            raise InvalidTransition("stop", status)
        finalized, effects = _finalize(
            state, SessionStatus.INTERRUPTED, command.now, command.distractions
        )
        return Transition(
            TimerState(
                current_session=finalized,
                remaining=timedelta(0),
                current_kind=state.current_kind,
                status=SessionStatus.STOPPED,
            ),
            effects,
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, ResetSession):
        if not state.is_stopped:
            raise InvalidTransition("reset", status)
        return Transition(
            replace(state, current_session=None, remaining=timedelta(0)),
            (ResetAttention(),),
            (EventName.STATE_CHANGED,),
        )

    if isinstance(command, SkipSession):
        if not state.is_live:
            raise InvalidTransition("skip", status)
        finalized, effects = _finalize(
            state, SessionStatus.CANCELLED, command.now, command.distractions
        )
        return _advance(state, finalized, command.settings, command.now, effects, ())

    if isinstance(command, Tick):
        if not state.is_running:
            raise InvalidTransition("tick", status)
        remaining = max(timedelta(0), state.remaining - TICK)
        if remaining > timedelta(0):
            return Transition(
                replace(state, remaining=remaining), (), (EventName.STATE_CHANGED,)
            )
        finalized, effects = _finalize(
            replace(state, remaining=remaining),
            SessionStatus.COMPLETED,
            command.now,
            command.distractions,
        )
        return _advance(
            state,
            finalized,
            command.settings,
            command.now,
            effects,
            (EventName.SESSION_COMPLETED,),
        )

    raise TypeError(f"Unknown timer command: {command!r}")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a controller operation.

    ``accepted`` is False when the command was rejected without touching the
    state. ``error`` may also be set on an accepted command, for failures that
    did not block the transition (persistence, attention settings).
    """

    accepted: bool
    error: FocusError | None = None

    @property
    def ok(self) -> bool:
        return self.accepted and self.error is None


class SessionController:
    """Runs focus and rest sessions on a cooperative timer runtime.

    Collaborators are injected: the runtime supplies time and timers, the
    settings provider is read fresh on every start, finalized sessions go to
    the store, and notifications go to the sink.
    """

    def __init__(
        self,
        runtime: TimerRuntime,
        settings_provider: Callable[[], FocusSettings],
        store: SessionStore,
        sink: NotificationSink,
        rng: random.Random | None = None,
    ):
        self._runtime = runtime
        self._settings_provider = settings_provider
        self._store = store
        self._sink = sink
        self._state = TimerState()
        self._countdown: TimerHandle | None = None
        self._countdown_generation = 0
        self._pending_error: FocusError | None = None
        self.attention = AttentionScheduler(
            runtime,
            settings_provider,
            notify=self._emit,
            rng=rng,
            is_eligible=self._attention_eligible,
        )

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def attention_state(self) -> AttentionState:
        return self.attention.state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def current_session(self) -> Session | None:
        return self._state.current_session

    @property
    def remaining(self) -> timedelta:
        return self._state.remaining

    @property
    def progress(self) -> float:
        return progress(self._state)

    @property
    def formatted_remaining(self) -> str:
        return format_remaining(self._state.remaining)

    def snapshot(self) -> FocusSnapshot:
        return FocusSnapshot(timer=self._state, attention=self.attention.state)

    # -- operations ------------------------------------------------------------

    def start_session(self, kind: SessionKind | None = None) -> CommandResult:
        try:
            settings = self._read_settings()
        except ConfigurationError as e:
            logger.warning("Refusing to start session: %s", e)
            return CommandResult(accepted=False, error=e)
        effective = kind or self._state.current_kind
        if effective is SessionKind.FOCUS and settings.enable_attention_monitoring:
            try:
                sample_prompt_delay(settings.prompt_frequency_lambda, 0.0)
            except ConfigurationError as e:
                logger.warning("Refusing to start session: %s", e)
                return CommandResult(accepted=False, error=e)
        return self._execute(
            StartSession(settings=settings, now=self._runtime.now(), kind=kind)
        )

    def pause_session(self) -> CommandResult:
        return self._execute(PauseSession())

    def resume_session(self) -> CommandResult:
        return self._execute(ResumeSession())

    def stop_session(self) -> CommandResult:
        return self._execute(
            StopSession(now=self._runtime.now(), distractions=self._distractions())
        )

    def reset_session(self) -> CommandResult:
        return self._execute(ResetSession())

    def skip_session(self) -> CommandResult:
        return self._execute(
            SkipSession(
                now=self._runtime.now(),
                distractions=self._distractions(),
                settings=self._auto_start_settings(),
            )
        )

    def respond_to_prompt(self, is_attentive: bool) -> bool:
        """Forward the user's answer to the attention scheduler."""
        return self.attention.respond_to_prompt(is_attentive)

    def dispose(self) -> None:
        """Cancel every timer owned by the controller and its scheduler."""
        self._cancel_countdown()
        self.attention.dispose()

    # -- internals -------------------------------------------------------------

    def _read_settings(self) -> FocusSettings:
        try:
            return self._settings_provider()
        except Exception as e:
            raise ConfigurationError(f"Could not read settings: {e}") from e

    def _auto_start_settings(self) -> FocusSettings | None:
        """Settings for the auto-start decision, or None to just stop."""
        if not self._state.is_live:
            return None
        try:
            return self._read_settings()
        except ConfigurationError as e:
            logger.warning("Not auto-starting the next session: %s", e)
            return None

    def _distractions(self) -> tuple[datetime, ...]:
        return self.attention.state.distraction_timestamps

    def _attention_eligible(self) -> bool:
        session = self._state.current_session
        return (
            self._state.is_running
            and session is not None
            and session.kind is SessionKind.FOCUS
        )

    def _execute(self, command: TimerCommand) -> CommandResult:
        try:
            transition = step(self._state, command)
        except InvalidTransition as e:
            logger.info("Rejected %s: %s", type(command).__name__, e)
            return CommandResult(accepted=False, error=e)

        self._pending_error = None
        previous = self._state
        self._state = transition.state
        for effect in transition.effects:
            self._apply(effect)
        logger.debug(
            "%s: %s -> %s (remaining %s)",
            type(command).__name__,
            previous.status.value,
            self._state.status.value,
            format_remaining(self._state.remaining),
        )
        for event in transition.events:
            self._emit(event)

        error, self._pending_error = self._pending_error, None
        return CommandResult(accepted=True, error=error)

    def _apply(self, effect: TimerEffect) -> None:
        if isinstance(effect, StartCountdown):
            self._arm_countdown()
        elif isinstance(effect, CancelCountdown):
            self._cancel_countdown()
        elif isinstance(effect, StartAttention):
            try:
                self.attention.start(effect.kind)
            except ConfigurationError as e:
                logger.warning("Attention checks disabled for this session: %s", e)
                self._pending_error = e
        elif isinstance(effect, StopAttention):
            self.attention.stop()
        elif isinstance(effect, ResetAttention):
            self.attention.reset()
        elif isinstance(effect, Persist):
            self._persist(effect.session)

    def _persist(self, session: Session) -> None:
        try:
            session_id = self._store.save(session)
        except Exception as e:
            logger.warning("Failed to save session: %s", e)
            self._pending_error = PersistenceError(f"Failed to save session: {e}")
            return

        stored = session.with_id(session_id)
        if self._state.current_session is session:
            self._state = replace(self._state, current_session=stored)
        logger.info(
            "Saved %s session #%s (%s, %d distractions)",
            session.kind.value,
            session_id,
            session.status.value,
            session.distraction_count,
        )

    def _emit(self, name: EventName) -> None:
        self._sink.emit(FocusEvent(name=name, snapshot=self.snapshot()))

    def _arm_countdown(self) -> None:
        self._cancel_countdown()
        self._countdown = self._runtime.call_later(
            TICK.total_seconds(), partial(self._on_tick, self._countdown_generation)
        )

    def _cancel_countdown(self) -> None:
        self._countdown_generation += 1
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _on_tick(self, generation: int) -> None:
        if generation != self._countdown_generation or not self._state.is_running:
            return
        self._countdown = None
        # Settings are only needed when this tick ends the session
        settings = None
        if self._state.remaining <= TICK:
            settings = self._auto_start_settings()
        result = self._execute(
            Tick(
                now=self._runtime.now(),
                distractions=self._distractions(),
                settings=settings,
            )
        )
        if result.error is not None:
            logger.warning("Countdown tick: %s", result.error)
        # A completion may have cancelled or re-armed the countdown already
        if generation == self._countdown_generation and self._state.is_running:
            self._arm_countdown()
