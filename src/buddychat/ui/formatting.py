"""Formatting utilities for displayed messages."""

from datetime import datetime


def format_time(timestamp: datetime) -> str:
    """Local wall-clock time, hours and minutes."""
    return timestamp.astimezone().strftime("%H:%M")
