"""FocusTimer CLI - focus/rest timer with randomized attention checks."""

__version__ = "0.1.0"
