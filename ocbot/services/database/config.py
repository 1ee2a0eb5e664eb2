"""
OC Watch Bot - Database Config Mixin
====================================

Key/value settings written by commands and by the update cycle.
"""

from typing import Optional


class ConfigMixin:
    """Mixin for config table operations."""

    def get_config(self, key: str) -> Optional[str]:
        """Stored value for key, or None."""
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM config WHERE key = ?", (key,))
            row = cur.fetchone()
            return row["value"] if row else None

    def set_config(self, key: str, value: str) -> None:
        """Insert or overwrite a config entry."""
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """INSERT INTO config (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, str(value))
            )
