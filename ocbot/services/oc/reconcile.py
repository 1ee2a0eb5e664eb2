"""
OC Watch Bot - OC Reconciliation
================================

Pure state transitions for one update cycle.

plan_update() takes the stored members, the fetched snapshot, the alert
cursors and a single "now", and returns an UpdatePlan describing everything
the cycle should do: rows to write, alerts to send and the summary text.
Nothing in this module touches Discord, the network or the database.

Out-of-OC clock rules per fetched member:
    out, not marked   -> not_in_oc_since = now
    out, marked       -> keep not_in_oc_since
    in                -> not_in_oc_since = None
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ocbot.core.config import (
    ALERT_COOLDOWN_SECONDS,
    ALERT_THRESHOLD_SECONDS,
    DISCORD_MESSAGE_LIMIT,
)
from ocbot.core.emojis import ALERT_EMOJI, CONFIRM_EMOJI, DISMISS_EMOJI
from ocbot.models import FactionMember, MemberRecord
from ocbot.utils.duration import format_since, next_minute_boundary


# =============================================================================
# Plan Types
# =============================================================================

@dataclass(frozen=True)
class OutOfOCEntry:
    """A member currently out of an OC, with rendered durations."""
    member_id: int
    name: str
    not_in_oc_since: Optional[int]
    out_seconds: int
    out_duration: str
    last_action_duration: str

    def render(self) -> str:
        return f"• {self.name} (Not in OC: {self.out_duration}, Last action: {self.last_action_duration})"


@dataclass(frozen=True)
class AlertDue:
    """An escalation alert that should be sent this cycle."""
    member_id: int
    name: str
    out_seconds: int

    @property
    def text(self) -> str:
        return build_alert_text(self.name)


@dataclass
class UpdatePlan:
    """Everything one update cycle should do, computed up front."""
    now: int
    first_import: bool
    members: list[MemberRecord] = field(default_factory=list)
    total: int = 0
    in_oc: int = 0
    not_in_oc: int = 0
    out_of_oc: list[OutOfOCEntry] = field(default_factory=list)
    alerts: list[AlertDue] = field(default_factory=list)
    summary: Optional[str] = None


# =============================================================================
# Member Transitions
# =============================================================================

def import_member(fetched: FactionMember, now: int) -> MemberRecord:
    """Row for a member written during the first import."""
    return MemberRecord(
        id=fetched.id,
        name=fetched.name,
        last_action_timestamp=fetched.last_action_timestamp,
        last_action_status=fetched.last_action_status,
        is_in_oc=fetched.is_in_oc,
        not_in_oc_since=None if fetched.is_in_oc else now,
    )


def reconcile_member(
    stored: Optional[MemberRecord],
    fetched: FactionMember,
    now: int
) -> MemberRecord:
    """
    Merge a fetched snapshot into the stored row.

    Args:
        stored: Existing row, or None for a member seen for the first time
        fetched: Snapshot from the API
        now: Cycle timestamp

    Returns:
        The row to write
    """
    if fetched.is_in_oc:
        not_in_oc_since = None
    elif stored is not None and stored.not_in_oc_since:
        not_in_oc_since = stored.not_in_oc_since
    else:
        not_in_oc_since = now

    return MemberRecord(
        id=fetched.id,
        name=fetched.name,
        last_action_timestamp=fetched.last_action_timestamp,
        last_action_status=fetched.last_action_status,
        is_in_oc=fetched.is_in_oc,
        not_in_oc_since=not_in_oc_since,
        fuckup_tally=stored.fuckup_tally if stored is not None else 0,
    )


# =============================================================================
# Alerts
# =============================================================================

def build_alert_text(name: str) -> str:
    return (
        f"{ALERT_EMOJI} <@&everyone> {name} has not been in an OC for 24h! "
        f"React {CONFIRM_EMOJI} to increment their tally, {DISMISS_EMOJI} to ignore."
    )


def is_alert_due(
    out_seconds: int,
    last_alert: Optional[int],
    now: int,
    threshold: int = ALERT_THRESHOLD_SECONDS,
    cooldown: int = ALERT_COOLDOWN_SECONDS,
) -> bool:
    """True once out long enough and no alert was sent within the cooldown."""
    if out_seconds < threshold:
        return False
    if not last_alert:
        return True
    return now - last_alert >= cooldown


# =============================================================================
# Summary Rendering
# =============================================================================

def build_out_of_oc_entry(member: MemberRecord, now: int) -> OutOfOCEntry:
    out_seconds = max(0, now - member.not_in_oc_since) if member.not_in_oc_since else 0
    return OutOfOCEntry(
        member_id=member.id,
        name=member.name,
        not_in_oc_since=member.not_in_oc_since,
        out_seconds=out_seconds,
        out_duration=format_since(member.not_in_oc_since, now),
        last_action_duration=format_since(member.last_action_timestamp, now),
    )


def render_summary(
    total: int,
    in_oc: int,
    not_in_oc: int,
    entries: Sequence[OutOfOCEntry],
    now: int,
    limit: int = DISCORD_MESSAGE_LIMIT,
) -> str:
    """
    Render the status message.

    List lines that would push the text past limit are replaced
    by a single "...and N more" line.
    """
    header = (
        f"**Faction OC Status**\n"
        f"Total: {total}\n"
        f"In OC: {in_oc}\n"
        f"Not in OC: {not_in_oc}"
        f"\n\n**Not in OC:**\n"
    )
    footer = (
        f"\n\nLast updated: <t:{now}:R>"
        f"\nNext update in: <t:{next_minute_boundary(now)}:R>"
    )

    if not entries:
        return header + "None!" + footer

    lines = [entry.render() for entry in entries]
    body = "\n".join(lines)
    if len(header) + len(body) + len(footer) <= limit:
        return header + body + footer

    kept: list[str] = []
    used = len(header) + len(footer)
    for i, line in enumerate(lines):
        remaining = len(lines) - i
        overflow = f"• ...and {remaining} more"
        needed = len(line) + 1 + len(overflow) + (1 if kept else 0)
        if used + needed > limit:
            break
        kept.append(line)
        used += len(line) + (1 if len(kept) > 1 else 0)

    hidden = len(lines) - len(kept)
    kept.append(f"• ...and {hidden} more")
    return header + "\n".join(kept) + footer


# =============================================================================
# Cycle Plan
# =============================================================================

def plan_update(
    stored: Mapping[int, MemberRecord],
    fetched: Sequence[FactionMember],
    last_alerts: Mapping[int, int],
    now: int,
) -> UpdatePlan:
    """
    Compute the full outcome of one update cycle.

    Args:
        stored: Members currently in the store, keyed by id
        fetched: Member list returned by the API
        last_alerts: Last alert time per member id
        now: Single timestamp used for the whole cycle

    Returns:
        UpdatePlan. On first import (empty store) only members is filled.
    """
    if not stored:
        return UpdatePlan(
            now=now,
            first_import=True,
            members=[import_member(m, now) for m in fetched],
        )

    members = [reconcile_member(stored.get(m.id), m, now) for m in fetched]

    total = len(members)
    in_oc = sum(1 for m in members if m.is_in_oc)

    out_entries = [build_out_of_oc_entry(m, now) for m in members if not m.is_in_oc]
    out_entries.sort(key=lambda e: (-e.out_seconds, e.name.lower()))

    alerts = [
        AlertDue(member_id=e.member_id, name=e.name, out_seconds=e.out_seconds)
        for e in out_entries
        if e.not_in_oc_since and is_alert_due(e.out_seconds, last_alerts.get(e.member_id), now)
    ]

    return UpdatePlan(
        now=now,
        first_import=False,
        members=members,
        total=total,
        in_oc=in_oc,
        not_in_oc=total - in_oc,
        out_of_oc=out_entries,
        alerts=alerts,
        summary=render_summary(total, in_oc, total - in_oc, out_entries, now),
    )


__all__ = [
    "OutOfOCEntry",
    "AlertDue",
    "UpdatePlan",
    "import_member",
    "reconcile_member",
    "build_alert_text",
    "is_alert_due",
    "build_out_of_oc_entry",
    "render_summary",
    "plan_update",
]
