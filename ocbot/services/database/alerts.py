"""
OC Watch Bot - Database Alerts Mixin
====================================

Per-member cursor of the last escalation alert.
"""

from typing import Optional


class AlertsMixin:
    """Mixin for alerts table operations."""

    def get_last_alert(self, member_id: int) -> Optional[int]:
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT last_alert FROM alerts WHERE user_id = ?", (member_id,))
            row = cur.fetchone()
            return row["last_alert"] if row else None

    def get_last_alerts(self) -> dict[int, int]:
        """All alert cursors keyed by member id."""
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT user_id, last_alert FROM alerts")
            return {row["user_id"]: row["last_alert"] for row in cur.fetchall()}

    def record_alert(self, member_id: int, alerted_at: int) -> None:
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """INSERT INTO alerts (user_id, last_alert) VALUES (?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET last_alert = excluded.last_alert""",
                (member_id, alerted_at)
            )
