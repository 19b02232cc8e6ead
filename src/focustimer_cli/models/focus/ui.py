"""Terminal output for focus mode."""

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .attention import AttentionState
from .controller import TimerState, format_remaining, progress
from .events import EventName, FocusEvent
from .session import Session, SessionKind, SessionStatus

BAR_WIDTH = 30


def _timer_color(state: TimerState) -> str:
    if state.is_paused:
        return "yellow"
    seconds = state.remaining.total_seconds()
    if seconds < 60:
        return "red"
    if seconds < 300:
        return "yellow"
    return "cyan"


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    filled = int(width * max(0.0, min(1.0, fraction)))
    return "▓" * filled + "░" * (width - filled)


def render_status(state: TimerState, attention: AttentionState) -> Text:
    """One-line status: kind, remaining time, progress and attention info."""
    session = state.current_session
    if session is None or not state.is_live:
        return Text(
            f"⏹  Stopped, next: {state.current_kind.display_name}", style="dim"
        )

    emoji = "🍅" if session.kind is SessionKind.FOCUS else "☕"
    label = session.kind.display_name
    if state.is_paused:
        emoji, label = "⏸️ ", f"{label} (paused)"

    fraction = progress(state)
    text = Text(f"{emoji}  {label}  ")
    text.append(format_remaining(state.remaining), style=f"bold {_timer_color(state)}")
    text.append(f"  {progress_bar(fraction)} {int(fraction * 100):3d}%", style="dim")

    if session.kind is SessionKind.FOCUS:
        text.append(f"  distractions: {attention.distraction_count}", style="dim")
        if attention.is_prompt_pending:
            text.append("  Still focused? [y/n]", style="bold magenta")
    return text


def describe_event(event: FocusEvent) -> str | None:
    """Human-readable line for notable events; None for plain state changes."""
    timer = event.snapshot.timer
    session = timer.current_session
    if event.name is EventName.SESSION_STARTED and session is not None:
        return (
            f"[bold green]▶ {session.kind.display_name} session started[/bold green]"
            f" ({format_remaining(session.planned_duration)})"
        )
    if event.name is EventName.SESSION_COMPLETED:
        return "[bold green]✓ Session completed[/bold green]"
    if event.name is EventName.ATTENTION_PROMPT_RAISED:
        return "[bold magenta]? Still focused? Press y or n[/bold magenta]"
    return None


def show_session_summary(session: Session, console: Console) -> None:
    """Print the outcome of a finalized session."""
    if session.status is SessionStatus.COMPLETED:
        console.print(f"\n[bold green]✓ {session.kind.display_name} session completed[/bold green]")
    else:
        console.print(
            f"\n[yellow]{session.kind.display_name} session {session.status.value}[/yellow]"
        )

    actual = session.actual_duration
    console.print(f"Planned: {format_remaining(session.planned_duration)}")
    if actual is not None:
        console.print(f"Actual:  {format_remaining(actual)} ({session.efficiency:.0%})")
    if session.kind is SessionKind.FOCUS:
        console.print(f"Distractions: {session.distraction_count}")
        for ts in session.distraction_timestamps:
            console.print(f"  [dim]• {ts.strftime('%H:%M:%S')}[/dim]")


def sessions_table(sessions: Iterable[Session]) -> Table:
    table = Table(title="Sessions")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Status")
    table.add_column("Started")
    table.add_column("Actual", justify="right")
    table.add_column("Distractions", justify="right")

    for session in sessions:
        actual = session.actual_duration
        table.add_row(
            str(session.id) if session.id is not None else "-",
            session.kind.display_name,
            session.status.display_name,
            session.start_time.strftime("%H:%M:%S"),
            format_remaining(actual) if actual is not None else "-",
            str(session.distraction_count),
        )
    return table
