"""Session record for focus and rest intervals."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum


class SessionKind(str, Enum):
    """Category of a timed session."""

    FOCUS = "focus"
    REST = "rest"

    @property
    def next(self) -> "SessionKind":
        """The kind that follows this one in the focus/rest rotation."""
        return SessionKind.REST if self is SessionKind.FOCUS else SessionKind.FOCUS

    @property
    def display_name(self) -> str:
        return "Focus" if self is SessionKind.FOCUS else "Rest"


class SessionStatus(str, Enum):
    """Lifecycle status of a session (and of the timer as a whole)."""

    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    CANCELLED = "cancelled"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


TERMINAL_STATUSES = frozenset(
    {SessionStatus.COMPLETED, SessionStatus.INTERRUPTED, SessionStatus.CANCELLED}
)


@dataclass(frozen=True)
class Session:
    """One timed focus or rest interval and its recorded outcome.

    Instances are immutable; every transition produces a new record through
    ``with_status``, ``finalize`` or ``with_id``.
    """

    kind: SessionKind
    start_time: datetime
    planned_duration: timedelta
    status: SessionStatus = SessionStatus.RUNNING
    id: int | None = None
    end_time: datetime | None = None
    actual_duration: timedelta | None = None
    distraction_count: int = 0
    distraction_timestamps: tuple[datetime, ...] = field(default_factory=tuple)
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.planned_duration < timedelta(0):
            raise ValueError("planned_duration cannot be negative")

        terminal = self.status.is_terminal
        if (self.end_time is not None) != terminal:
            raise ValueError(
                f"end_time must be set only for terminal statuses (got {self.status.value})"
            )
        if (self.actual_duration is not None) != terminal:
            raise ValueError(
                f"actual_duration must be set only for terminal statuses (got {self.status.value})"
            )

        if self.distraction_count < 0:
            raise ValueError("distraction_count cannot be negative")
        if self.distraction_count != len(self.distraction_timestamps):
            raise ValueError("distraction_count must match distraction_timestamps")
        if self.kind is SessionKind.REST and self.distraction_count:
            raise ValueError("rest sessions cannot record distractions")

    @property
    def is_finalized(self) -> bool:
        return self.status.is_terminal

    @property
    def is_completed(self) -> bool:
        return self.status is SessionStatus.COMPLETED

    @property
    def was_interrupted(self) -> bool:
        return self.status is SessionStatus.INTERRUPTED

    @property
    def efficiency(self) -> float:
        """Actual over planned duration, 0.0 when either is unknown or zero."""
        if self.actual_duration is None or not self.planned_duration:
            return 0.0
        return self.actual_duration / self.planned_duration

    def with_status(self, status: SessionStatus) -> "Session":
        """Copy with a non-terminal status (running <-> paused)."""
        return replace(self, status=status)

    def with_id(self, session_id: int) -> "Session":
        return replace(self, id=session_id)

    def finalize(
        self,
        status: SessionStatus,
        end_time: datetime,
        actual_duration: timedelta,
        distraction_timestamps: tuple[datetime, ...] = (),
    ) -> "Session":
        """Close the session with a terminal status and merged distraction data."""
        if not status.is_terminal:
            raise ValueError(f"Cannot finalize a session as {status.value}")
        if self.is_finalized:
            raise ValueError("Session is already finalized")

        # Rest sessions never carry attention data
        timestamps = (
            tuple(distraction_timestamps) if self.kind is SessionKind.FOCUS else ()
        )
        return replace(
            self,
            status=status,
            end_time=end_time,
            actual_duration=actual_duration,
            distraction_count=len(timestamps),
            distraction_timestamps=timestamps,
        )

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary.

        Timestamps are ISO 8601 strings, durations are whole seconds.
        """
        return {
            "id": self.id,
            "kind": self.kind.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "planned_duration_seconds": int(self.planned_duration.total_seconds()),
            "actual_duration_seconds": (
                int(self.actual_duration.total_seconds())
                if self.actual_duration is not None
                else None
            ),
            "status": self.status.value,
            "distraction_count": self.distraction_count,
            "distraction_timestamps": [
                ts.isoformat() for ts in self.distraction_timestamps
            ],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from a dictionary produced by ``to_dict``."""
        end_time = data.get("end_time")
        actual = data.get("actual_duration_seconds")
        timestamps = tuple(
            datetime.fromisoformat(ts) for ts in data.get("distraction_timestamps", [])
        )
        return cls(
            id=data.get("id"),
            kind=SessionKind(data["kind"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(end_time) if end_time else None,
            planned_duration=timedelta(seconds=data["planned_duration_seconds"]),
            actual_duration=timedelta(seconds=actual) if actual is not None else None,
            status=SessionStatus(data["status"]),
            distraction_count=data.get("distraction_count", len(timestamps)),
            distraction_timestamps=timestamps,
            notes=data.get("notes"),
        )
