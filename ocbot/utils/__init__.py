"""
OC Watch Bot - Utilities Package
================================
"""

from .duration import format_duration, format_since, next_minute_boundary
from .helpers import parse_snowflake, safe_fetch_channel, safe_fetch_message
from .discord_rate_limit import (
    add_reactions_with_delay,
    send_message_with_retry,
    edit_message_with_retry,
    delete_message_safe,
)

__all__ = [
    # Duration helpers
    "format_duration",
    "format_since",
    "next_minute_boundary",
    # Safe fetch helpers
    "parse_snowflake",
    "safe_fetch_channel",
    "safe_fetch_message",
    # Discord rate limit utilities
    "add_reactions_with_delay",
    "send_message_with_retry",
    "edit_message_with_retry",
    "delete_message_safe",
]
