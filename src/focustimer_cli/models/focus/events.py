"""Notifications emitted by the timer core.

The core never calls into its consumers; it appends events to a sink that the
host application drains (sounds, status line, logging).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .attention import AttentionState
    from .controller import TimerState


class EventName(str, Enum):
    SESSION_STARTED = "session-started"
    SESSION_COMPLETED = "session-completed"
    ATTENTION_PROMPT_RAISED = "attention-prompt-raised"
    STATE_CHANGED = "state-changed"


@dataclass(frozen=True)
class FocusSnapshot:
    """Timer and attention state at the moment an event was emitted."""

    timer: TimerState
    attention: AttentionState


@dataclass(frozen=True)
class FocusEvent:
    name: EventName
    snapshot: FocusSnapshot


class NotificationSink(Protocol):
    def emit(self, event: FocusEvent) -> None: ...


class EventQueue:
    """FIFO sink drained by the host application."""

    def __init__(self) -> None:
        self._events: deque[FocusEvent] = deque()

    def emit(self, event: FocusEvent) -> None:
        self._events.append(event)

    def drain(self) -> list[FocusEvent]:
        """Remove and return every queued event, oldest first."""
        events = list(self._events)
        self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)
