"""Focus mode commands: interactive timer and deterministic simulation."""

import asyncio
import random
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.live import Live

from focustimer_cli.commands.decorators import AppError, command_wrapper
from focustimer_cli.models.config_models import FocusSettings
from focustimer_cli.models.focus.controller import SessionController, format_remaining
from focustimer_cli.models.focus.errors import ConfigurationError
from focustimer_cli.models.focus.events import EventName, EventQueue, FocusEvent
from focustimer_cli.models.focus.keyboard import (
    KeyAction,
    KeyboardHandler,
    action_for_key,
)
from focustimer_cli.models.focus.runtime import AsyncioRuntime, VirtualRuntime
from focustimer_cli.models.focus.session import SessionKind
from focustimer_cli.models.focus.store import InMemorySessionStore
from focustimer_cli.models.focus.ui import (
    describe_event,
    render_status,
    sessions_table,
    show_session_summary,
)
from focustimer_cli.services.config_service import get_config_service
from focustimer_cli.ui.formatters import format_info, format_warning
from focustimer_cli.utils.exit_codes import (
    ERROR_CONFIG,
    ERROR_INVALID_ARGS,
    ERROR_INVALID_STATE,
)
from focustimer_cli.utils.ui.console import get_console

console = get_console()
app = typer.Typer(help="Focus mode with attention checks")

POLL_INTERVAL = 0.1
BELL_EVENTS = frozenset(
    {
        EventName.SESSION_STARTED,
        EventName.SESSION_COMPLETED,
        EventName.ATTENTION_PROMPT_RAISED,
    }
)


class ResponseMode(str, Enum):
    ATTENTIVE = "attentive"
    DISTRACTED = "distracted"
    IGNORE = "ignore"


def handle_action(controller: SessionController, action: KeyAction) -> Optional[str]:
    """Apply a key action to the controller. Returns a message worth showing."""
    if action is KeyAction.TOGGLE_PAUSE:
        if controller.state.is_paused:
            result = controller.resume_session()
        else:
            result = controller.pause_session()
    elif action is KeyAction.STOP:
        result = controller.stop_session()
    elif action is KeyAction.SKIP:
        result = controller.skip_session()
    elif action in (KeyAction.ATTENTIVE, KeyAction.DISTRACTED):
        if not controller.respond_to_prompt(action is KeyAction.ATTENTIVE):
            return None
        if action is KeyAction.DISTRACTED:
            return "[yellow]Distraction noted[/yellow]"
        return "[green]Great, keep going[/green]"
    else:
        return None

    if result.error is not None:
        return f"[yellow]{result.error}[/yellow]"
    return None


def _merged_settings(base: FocusSettings, **overrides) -> FocusSettings:
    """Apply CLI overrides on top of the configured settings, re-validating."""
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return FocusSettings.model_validate(data)
    except ValidationError as e:
        raise AppError(f"Invalid option: {e}", ERROR_INVALID_ARGS) from e


def _start_or_fail(controller: SessionController, kind: Optional[SessionKind]) -> None:
    result = controller.start_session(kind)
    if not result.accepted:
        code = (
            ERROR_CONFIG
            if isinstance(result.error, ConfigurationError)
            else ERROR_INVALID_STATE
        )
        raise AppError(str(result.error), code)
    if result.error is not None:
        format_warning(str(result.error))


def session_limited(
    provider: Callable[[], FocusSettings],
    store: InMemorySessionStore,
    max_sessions: int,
) -> Callable[[], FocusSettings]:
    """Wrap a settings provider so nothing auto-starts past ``max_sessions``.

    Settings are read when a session ends, before it reaches the store, so the
    session being finished counts as one more.
    """

    def limited() -> FocusSettings:
        settings = provider()
        if len(store) + 1 < max_sessions:
            return settings
        return settings.model_copy(
            update={"auto_start_break": False, "auto_start_focus": False}
        )

    return limited


def _announce(
    event: FocusEvent, out: Console, settings: FocusSettings, prefix: str = ""
) -> None:
    line = describe_event(event)
    if line is None:
        return
    out.print(f"{prefix}{line}")
    if settings.enable_sound_alerts and event.name in BELL_EVENTS:
        out.bell()


async def run_interactive(
    controller: SessionController,
    queue: EventQueue,
    store: InMemorySessionStore,
    settings_provider: Callable[[], FocusSettings],
    kind: Optional[SessionKind],
    max_sessions: int,
) -> None:
    """Drive the controller from the keyboard until the timer stops."""
    _start_or_fail(controller, kind)

    settings = settings_provider()
    keyboard = KeyboardHandler()
    try:
        with Live(
            render_status(controller.state, controller.attention_state),
            console=console,
            refresh_per_second=4,
            transient=True,
        ) as live:
            while True:
                await asyncio.sleep(POLL_INTERVAL)

                action = action_for_key(keyboard.get_key())
                if action is KeyAction.QUIT:
                    if controller.state.is_live:
                        controller.stop_session()
                elif action is not None:
                    message = handle_action(controller, action)
                    if message:
                        live.console.print(message)

                for event in queue.drain():
                    _announce(event, live.console, settings)

                live.update(render_status(controller.state, controller.attention_state))
                if not controller.state.is_live or len(store) >= max_sessions:
                    break
    except asyncio.CancelledError:
        if controller.state.is_live:
            controller.stop_session()
        raise
    finally:
        keyboard.stop()
        controller.dispose()


@app.command("run")
@command_wrapper
def run_focus(
    kind: Optional[SessionKind] = typer.Option(
        None, "--kind", "-k", help="Session kind to start (focus or rest)"
    ),
    sessions: int = typer.Option(
        1, "--sessions", "-n", min=1, help="Stop after this many finished sessions"
    ),
) -> None:
    """Run the timer in the terminal.

    Keys: p pause/resume, s stop, k skip, y/n answer an attention check, q quit.
    """
    config_service = get_config_service()
    queue = EventQueue()
    store = InMemorySessionStore()
    runtime = AsyncioRuntime()
    settings_provider = session_limited(config_service.focus_settings, store, sessions)
    controller = SessionController(runtime, settings_provider, store, queue)

    console.print("[dim]p pause/resume · s stop · k skip · y/n answer · q quit[/dim]")
    try:
        asyncio.run(
            run_interactive(
                controller,
                queue,
                store,
                settings_provider,
                kind,
                sessions,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")

    finished = store.recent()
    if not finished:
        format_info("No sessions recorded")
        return
    show_session_summary(finished[0], console)
    if len(finished) > 1:
        console.print(sessions_table(finished))


@app.command("simulate")
@command_wrapper
def simulate_focus(
    kind: SessionKind = typer.Option(
        SessionKind.FOCUS, "--kind", "-k", help="Session kind to simulate"
    ),
    respond: ResponseMode = typer.Option(
        ResponseMode.IGNORE, "--respond", "-r", help="How to answer attention checks"
    ),
    seed: int = typer.Option(0, "--seed", help="Random seed for prompt intervals"),
    focus_minutes: Optional[int] = typer.Option(
        None, "--focus-minutes", help="Override the focus duration"
    ),
    break_minutes: Optional[int] = typer.Option(
        None, "--break-minutes", help="Override the break duration"
    ),
    rate: Optional[float] = typer.Option(
        None, "--lambda", help="Override the attention check rate (per minute)"
    ),
) -> None:
    """Fast-forward one session on a virtual clock and print its timeline."""
    settings = _merged_settings(
        get_config_service().focus_settings(),
        focus_duration_minutes=focus_minutes,
        break_duration_minutes=break_minutes,
        prompt_frequency_lambda=rate,
        auto_start_break=False,
        auto_start_focus=False,
        enable_sound_alerts=False,
    )

    runtime = VirtualRuntime(start=datetime.now().astimezone().replace(microsecond=0))
    queue = EventQueue()
    store = InMemorySessionStore()
    controller = SessionController(
        runtime, lambda: settings, store, queue, rng=random.Random(seed)
    )
    started_at = runtime.now()

    def prefix() -> str:
        return f"[dim]{format_remaining(runtime.now() - started_at)}[/dim] "

    _start_or_fail(controller, kind)

    while True:
        for event in queue.drain():
            _announce(event, console, settings, prefix())
            if event.name is not EventName.ATTENTION_PROMPT_RAISED:
                continue
            if respond is not ResponseMode.IGNORE:
                controller.respond_to_prompt(respond is ResponseMode.ATTENTIVE)
                label = "attentive" if respond is ResponseMode.ATTENTIVE else "distracted"
                console.print(f"{prefix()}  answered: {label}")
        if not controller.state.is_live:
            break
        distractions = controller.attention_state.distraction_count
        if not runtime.fire_next():
            break
        if controller.attention_state.distraction_count > distractions:
            console.print(f"{prefix()}  [yellow]no answer, distraction recorded[/yellow]")

    controller.dispose()
    session = store.recent(1)[0]
    show_session_summary(session, console)
