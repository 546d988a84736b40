"""Shared helpers for file I/O, validation, and subprocess execution."""
