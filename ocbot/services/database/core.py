"""
OC Watch Bot - Database Core
============================

Connection handling, corruption detection and schema creation for the
SQLite store. The table mixins in this package build on DatabaseCore.
"""

import os
import shutil
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ocbot.core.config import DATABASE_TIMEOUT, load_db_path
from ocbot.core.logger import logger


# =============================================================================
# Schema
# =============================================================================

SCHEMA = """
CREATE TABLE IF NOT EXISTS config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    last_action_timestamp INTEGER NOT NULL,
    last_action_status TEXT NOT NULL,
    is_in_oc INTEGER NOT NULL,
    not_in_oc_since INTEGER,
    fuckup_tally INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS alerts (
    user_id INTEGER PRIMARY KEY,
    last_alert INTEGER NOT NULL
);
"""

TABLES = ("config", "users", "alerts")

CORRUPTION_MARKERS = (
    "database disk image is malformed",
    "file is not a database",
    "disk i/o error",
)


class DatabaseUnavailableError(Exception):
    """The store was marked unhealthy and refuses further operations."""
    pass


def _is_corruption(error: sqlite3.DatabaseError) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in CORRUPTION_MARKERS)


# =============================================================================
# Database Core
# =============================================================================

class DatabaseCore:
    """Owns the database file; every operation opens a short-lived connection."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """
        Args:
            db_path: Database file, defaults to load_db_path()
        """
        path = Path(db_path) if db_path is not None else load_db_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(path)
        self._healthy = True
        self._corruption_reason: Optional[str] = None

        self._init_db()

    # =========================================================================
    # Health
    # =========================================================================

    @property
    def is_healthy(self) -> bool:
        return self._healthy

    @property
    def corruption_reason(self) -> Optional[str]:
        return self._corruption_reason

    def health_check(self) -> dict:
        """Snapshot of store health for the ready log and tests."""
        report = {
            "healthy": False,
            "wal_mode": False,
            "tables": 0,
            "size_kb": 0.0,
            "error": self._corruption_reason,
        }
        try:
            with self._get_conn() as conn:
                journal = conn.execute("PRAGMA journal_mode").fetchone()
                report["wal_mode"] = journal is not None and str(journal[0]).lower() == "wal"
                report["tables"] = conn.execute(
                    "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table'"
                ).fetchone()[0]
        except (sqlite3.Error, DatabaseUnavailableError) as e:
            report["error"] = str(e)
            return report

        if os.path.exists(self.db_path):
            report["size_kb"] = round(os.path.getsize(self.db_path) / 1024, 1)
        report["healthy"] = report["wal_mode"] and report["tables"] >= len(TABLES)
        return report

    def _mark_unhealthy(self, reason: str) -> None:
        """Stop serving requests and keep a copy of the damaged file."""
        self._healthy = False
        self._corruption_reason = reason

        backup_path = f"{self.db_path}.corrupted.{int(time.time())}"
        try:
            shutil.copy2(self.db_path, backup_path)
        except OSError as e:
            logger.error_tree("Corrupted Database Not Backed Up", e, [
                ("Path", self.db_path),
            ])
            return

        logger.tree("Database Marked Unavailable", [
            ("Reason", reason[:100]),
            ("Backup", backup_path),
        ], emoji="🚨")

    def _passes_integrity_check(self) -> bool:
        try:
            conn = sqlite3.connect(self.db_path, timeout=DATABASE_TIMEOUT)
            try:
                verdict = conn.execute("PRAGMA integrity_check").fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning("Database Integrity Check Errored", [
                ("Error", str(e)[:100]),
            ])
            return False
        return verdict is not None and verdict[0] == "ok"

    # =========================================================================
    # Connections
    # =========================================================================

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection that commits when the block exits cleanly.

        sqlite errors roll back and propagate. Errors that indicate a damaged
        file also mark the store unhealthy, after which every call raises
        DatabaseUnavailableError.
        """
        if not self._healthy:
            raise DatabaseUnavailableError(
                f"Database unavailable: {self._corruption_reason or 'unhealthy'}"
            )

        conn = sqlite3.connect(self.db_path, timeout=DATABASE_TIMEOUT)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            yield conn
            conn.commit()
        except sqlite3.DatabaseError as e:
            conn.rollback()
            if _is_corruption(e):
                self._mark_unhealthy(str(e))
            else:
                logger.warning("Database Operation Failed", [
                    ("Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
            raise
        finally:
            conn.close()

    # =========================================================================
    # Schema
    # =========================================================================

    def _init_db(self) -> None:
        """Verify an existing file, then create any missing tables."""
        has_data = os.path.exists(self.db_path) and os.path.getsize(self.db_path) > 0
        if has_data and not self._passes_integrity_check():
            self._mark_unhealthy("PRAGMA integrity_check failed on startup")
            return

        with self._get_conn() as conn:
            conn.executescript(SCHEMA)

        logger.tree("Database Ready", [
            ("Path", self.db_path),
            ("Tables", ", ".join(TABLES)),
        ], emoji="🗄️")


__all__ = ["DatabaseCore", "DatabaseUnavailableError"]
