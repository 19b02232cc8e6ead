"""Utility helpers for FocusTimer CLI."""
