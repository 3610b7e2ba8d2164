"""Utility functions for CLI output."""

from datetime import datetime, timezone
from typing import Optional


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_time_left(expires_at: str, now: Optional[datetime] = None) -> str:
    """
    Render the time remaining until a room's deadline.

    Args:
        expires_at: ISO 8601 deadline as returned by the server
        now: Reference time (defaults to the current UTC time)

    Returns:
        "M:SS" while time remains, otherwise "Expired"
    """
    deadline = datetime.fromisoformat(expires_at)
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    remaining = int((deadline - now).total_seconds())
    if remaining <= 0:
        return "Expired"

    minutes, seconds = divmod(remaining, 60)
    return f"{minutes}:{seconds:02d}"
