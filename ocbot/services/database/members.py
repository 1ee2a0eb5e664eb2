"""
OC Watch Bot - Database Members Mixin
=====================================

Faction member rows and the infraction tally.
"""

import sqlite3
from typing import Iterable, Optional

from ocbot.models import MemberRecord


def _row_to_member(row: sqlite3.Row) -> MemberRecord:
    return MemberRecord(
        id=row["id"],
        name=row["name"],
        last_action_timestamp=row["last_action_timestamp"],
        last_action_status=row["last_action_status"],
        is_in_oc=bool(row["is_in_oc"]),
        not_in_oc_since=row["not_in_oc_since"],
        fuckup_tally=row["fuckup_tally"] or 0,
    )


class MembersMixin:
    """Mixin for users table operations."""

    def count_members(self) -> int:
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) AS cnt FROM users")
            return cur.fetchone()["cnt"]

    def get_member(self, member_id: int) -> Optional[MemberRecord]:
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM users WHERE id = ?", (member_id,))
            row = cur.fetchone()
            return _row_to_member(row) if row else None

    def get_members(self) -> dict[int, MemberRecord]:
        """All stored members keyed by id."""
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM users")
            return {row["id"]: _row_to_member(row) for row in cur.fetchall()}

    def upsert_members(self, members: Iterable[MemberRecord]) -> int:
        """
        Insert or update member rows in one transaction.

        The tally column is only set on insert; updates never reset it.

        Returns:
            Number of rows written
        """
        params = [
            (
                m.id,
                m.name,
                m.last_action_timestamp,
                m.last_action_status,
                int(m.is_in_oc),
                m.not_in_oc_since,
                m.fuckup_tally,
            )
            for m in members
        ]
        if not params:
            return 0

        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.executemany(
                """INSERT INTO users
                   (id, name, last_action_timestamp, last_action_status,
                    is_in_oc, not_in_oc_since, fuckup_tally)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       last_action_timestamp = excluded.last_action_timestamp,
                       last_action_status = excluded.last_action_status,
                       is_in_oc = excluded.is_in_oc,
                       not_in_oc_since = excluded.not_in_oc_since""",
                params
            )
        return len(params)

    def increment_tally(self, member_id: int, by: int = 1) -> None:
        """Add to a member's infraction tally."""
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE users SET fuckup_tally = COALESCE(fuckup_tally, 0) + ? WHERE id = ?",
                (by, member_id)
            )
