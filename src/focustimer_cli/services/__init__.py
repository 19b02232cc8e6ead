"""Service layer for FocusTimer CLI."""
