"""
OC Watch Bot - Duration Utility
===============================

Compact duration strings and minute-boundary arithmetic.
"""

from typing import Optional

from ocbot.core.config import SECONDS_PER_HOUR, SECONDS_PER_MINUTE


def format_duration(seconds: Optional[int]) -> str:
    """
    Format a span of seconds as "Xh Ym".

    The hours segment is omitted when zero. None means the source
    timestamp was absent and renders as "0m".

    Examples:
        >>> format_duration(59)
        '0m'
        >>> format_duration(3661)
        '1h 1m'
    """
    if seconds is None:
        return "0m"

    seconds = max(0, int(seconds))
    hours = seconds // SECONDS_PER_HOUR
    minutes = (seconds % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_since(timestamp: Optional[int], now: int) -> str:
    """Duration from timestamp to now; "0m" when timestamp is missing."""
    if not timestamp:
        return "0m"
    return format_duration(now - timestamp)


def next_minute_boundary(now: int) -> int:
    """Unix time of the next top-of-minute strictly after now."""
    return now + (SECONDS_PER_MINUTE - now % SECONDS_PER_MINUTE)


__all__ = ["format_duration", "format_since", "next_minute_boundary"]
