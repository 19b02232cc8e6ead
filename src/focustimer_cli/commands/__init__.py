"""Command modules for FocusTimer CLI."""
