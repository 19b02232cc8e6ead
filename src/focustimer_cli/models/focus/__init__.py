"""Focus mode - focus/rest timer with randomized attention checks."""

from .attention import AttentionPhase, AttentionScheduler, AttentionState
from .controller import CommandResult, SessionController, TimerState
from .errors import (
    AlreadyRunning,
    ConfigurationError,
    FocusError,
    InvalidTransition,
    PersistenceError,
)
from .events import EventName, EventQueue, FocusEvent, FocusSnapshot
from .runtime import AsyncioRuntime, VirtualRuntime
from .session import Session, SessionKind, SessionStatus
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "AlreadyRunning",
    "AsyncioRuntime",
    "AttentionPhase",
    "AttentionScheduler",
    "AttentionState",
    "CommandResult",
    "ConfigurationError",
    "EventName",
    "EventQueue",
    "FocusError",
    "FocusEvent",
    "FocusSnapshot",
    "InMemorySessionStore",
    "InvalidTransition",
    "PersistenceError",
    "Session",
    "SessionController",
    "SessionKind",
    "SessionStatus",
    "SessionStore",
    "TimerState",
    "VirtualRuntime",
]
