"""
OC Watch Bot - Data Models
==========================

Shared data models used across the bot.
"""

from dataclasses import dataclass
from typing import Any, Optional


# =============================================================================
# Torn API Snapshot
# =============================================================================

@dataclass(frozen=True)
class FactionMember:
    """One faction member as reported by the Torn API."""
    id: int
    name: str
    is_in_oc: bool
    last_action_status: str
    last_action_timestamp: int
    last_action_relative: str = ""
    position: str = ""
    level: int = 0
    status_state: str = ""
    status_description: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FactionMember":
        """
        Build a member from one entry of the faction members payload.

        Raises:
            KeyError / TypeError / ValueError: If id or name is missing or malformed.
        """
        last_action = data.get("last_action") or {}
        status = data.get("status") or {}
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            is_in_oc=bool(data.get("is_in_oc")),
            last_action_status=str(last_action.get("status") or ""),
            last_action_timestamp=int(last_action.get("timestamp") or 0),
            last_action_relative=str(last_action.get("relative") or ""),
            position=str(data.get("position") or ""),
            level=int(data.get("level") or 0),
            status_state=str(status.get("state") or ""),
            status_description=str(status.get("description") or ""),
        )


# =============================================================================
# Stored Member Row
# =============================================================================

@dataclass(frozen=True)
class MemberRecord:
    """A row of the users table."""
    id: int
    name: str
    last_action_timestamp: int
    last_action_status: str
    is_in_oc: bool
    not_in_oc_since: Optional[int] = None
    fuckup_tally: int = 0


__all__ = ["FactionMember", "MemberRecord"]
