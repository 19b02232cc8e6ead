"""Single-key controls for the interactive timer."""

import sys
from enum import Enum
from typing import Optional


class KeyAction(str, Enum):
    TOGGLE_PAUSE = "toggle_pause"
    STOP = "stop"
    SKIP = "skip"
    ATTENTIVE = "attentive"
    DISTRACTED = "distracted"
    QUIT = "quit"


KEY_BINDINGS: dict[str, KeyAction] = {
    "p": KeyAction.TOGGLE_PAUSE,
    " ": KeyAction.TOGGLE_PAUSE,
    "s": KeyAction.STOP,
    "k": KeyAction.SKIP,
    "y": KeyAction.ATTENTIVE,
    "n": KeyAction.DISTRACTED,
    "q": KeyAction.QUIT,
}


def action_for_key(key: Optional[str]) -> Optional[KeyAction]:
    """Map a pressed key to its action, ignoring case and unbound keys."""
    if not key:
        return None
    return KEY_BINDINGS.get(key.lower())


class KeyboardHandler:
    """Non-blocking keyboard input handler.

    Puts the terminal in cbreak mode on POSIX so single keypresses can be polled
    from the event loop; falls back to ``msvcrt`` on Windows.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.old_settings = None
        self._msvcrt = None
        self._setup()

    def _setup(self) -> None:
        try:
            import termios
            import tty
        except ImportError:
            try:
                import msvcrt

                self._msvcrt = msvcrt
            except ImportError:
                self._msvcrt = None
            return

        try:
            fd = self.stream.fileno()
            self.old_settings = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except (termios.error, OSError, ValueError, AttributeError):
            # Not attached to a terminal
            self.old_settings = None

    def get_key(self) -> Optional[str]:
        """Return the pressed key, or None if nothing is waiting."""
        if self._msvcrt is not None:
            if self._msvcrt.kbhit():
                key = self._msvcrt.getch()
                if isinstance(key, bytes):
                    key = key.decode("utf-8", errors="ignore")
                return key.lower()
            return None

        import select

        try:
            if select.select([self.stream], [], [], 0)[0]:
                key = self.stream.read(1)
                return key.lower() if key else None
        except (OSError, ValueError):
            return None
        return None

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is None:
            return
        import termios

        try:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self.old_settings)
        except (termios.error, OSError, ValueError):
            pass
        self.old_settings = None
