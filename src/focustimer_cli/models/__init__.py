"""Data models for FocusTimer CLI."""
