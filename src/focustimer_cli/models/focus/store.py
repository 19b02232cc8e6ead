"""Session store interface and the in-memory implementation."""

from typing import Protocol

from .session import Session


class SessionStore(Protocol):
    """Receives each finalized session exactly once."""

    def save(self, session: Session) -> int:
        """Store a finalized session and return its persistent id."""
        ...


class InMemorySessionStore:
    """Keeps finalized sessions for the lifetime of the process."""

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}
        self._next_id = 1

    def save(self, session: Session) -> int:
        if not session.is_finalized:
            raise ValueError("Only finalized sessions can be saved")

        session_id = session.id if session.id is not None else self._next_id
        self._sessions[session_id] = session.with_id(session_id)
        self._next_id = max(self._next_id, session_id + 1)
        return session_id

    def get(self, session_id: int) -> Session | None:
        return self._sessions.get(session_id)

    def recent(self, limit: int = 20) -> list[Session]:
        """Most recently saved sessions first."""
        sessions = sorted(self._sessions.values(), key=lambda s: s.id, reverse=True)
        return sessions[:limit]

    def __len__(self) -> int:
        return len(self._sessions)
