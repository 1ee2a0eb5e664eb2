"""
OC Watch Bot - Emoji Constants
==============================

Reaction emojis used on escalation alerts.
"""


# =============================================================================
# Alert Reactions
# =============================================================================

CONFIRM_EMOJI = "✅"
DISMISS_EMOJI = "❌"
ALERT_EMOJI = "⚠️"

ALERT_REACTIONS = (CONFIRM_EMOJI, DISMISS_EMOJI)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "CONFIRM_EMOJI",
    "DISMISS_EMOJI",
    "ALERT_EMOJI",
    "ALERT_REACTIONS",
]
