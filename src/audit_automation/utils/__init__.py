"""Shared helpers for parsing, formatting, sanitizing, and logging."""
