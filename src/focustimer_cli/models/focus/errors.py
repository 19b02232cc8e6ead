"""Error types raised and reported by the focus timer core."""

from .session import SessionStatus


class FocusError(Exception):
    """Base class for focus timer errors."""


class InvalidTransition(FocusError):
    """A command is not valid in the current timer status."""

    def __init__(self, command: str, status: SessionStatus, message: str | None = None):
        self.command = command
        self.status = status
        super().__init__(message or f"Cannot {command} while {status.value}")


class AlreadyRunning(InvalidTransition):
    """A session was started while another one is still live."""

    def __init__(self, status: SessionStatus):
        super().__init__(
            "start",
            status,
            f"A session is already {status.value}; stop or skip it first",
        )


class ConfigurationError(FocusError):
    """Settings are out of the range the timer can operate with."""


class PersistenceError(FocusError):
    """A finalized session could not be handed to the session store."""
