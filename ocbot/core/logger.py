"""
OC Watch Bot - Logger
=====================

Tree-style logger used across the bot.

Every log call renders a title line followed by indented key/value branches,
written to the console and to a daily log folder at the same time.
Timestamps use UTC, which is Torn City Time, so log lines line up with the
timestamps the Torn API reports.

Log Structure:
    logs/
    ├── 2026-10-18/
    │   ├── OCWatch-2026-10-18.log
    │   └── OCWatch-Errors-2026-10-18.log
    └── 2026-10-19/
        └── ...
"""

import os
import re
import shutil
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Tuple


# =============================================================================
# Constants
# =============================================================================

LOG_RETENTION_DAYS = 7

LOGS_BASE_DIR: Path = Path(os.getenv("OC_LOG_DIR", Path(__file__).parent.parent.parent / "logs"))

EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F900-\U0001F9FF"
    "\U00002600-\U000026FF"
    "\U00002700-\U000027BF"
    "\U0001FA70-\U0001FAFF"
    "\U00002300-\U000023FF"
    "]+",
    flags=re.UNICODE
)


# =============================================================================
# Tree Symbols
# =============================================================================

class TreeSymbols:
    """Box-drawing characters for tree formatting."""
    BRANCH = "├─"
    LAST = "└─"


# =============================================================================
# MiniTreeLogger
# =============================================================================

class MiniTreeLogger:
    """Console + file logger with tree formatting and UTC timestamps."""

    def __init__(self, logs_base_dir: Path = LOGS_BASE_DIR) -> None:
        self.run_id: str = str(uuid.uuid4())[:8]

        self.logs_base_dir = Path(logs_base_dir)
        self.logs_base_dir.mkdir(parents=True, exist_ok=True)

        self.current_date = self._today()
        self._set_log_files()
        self._cleanup_old_logs()
        self._write_header(f"NEW SESSION - RUN ID: {self.run_id}")

    # =========================================================================
    # Setup
    # =========================================================================

    @staticmethod
    def _today() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d")

    def _set_log_files(self) -> None:
        self.log_dir = self.logs_base_dir / self.current_date
        self.log_dir.mkdir(exist_ok=True)
        self.log_file: Path = self.log_dir / f"OCWatch-{self.current_date}.log"
        self.error_file: Path = self.log_dir / f"OCWatch-Errors-{self.current_date}.log"

    def _check_date_rotation(self) -> None:
        """Move to a new daily folder when the UTC date changes."""
        today = self._today()
        if today == self.current_date:
            return
        self.current_date = today
        self._set_log_files()
        self._write_header(f"LOG ROTATION - Continuing session {self.run_id}")

    def _cleanup_old_logs(self) -> None:
        """Delete daily folders older than LOG_RETENTION_DAYS."""
        now = datetime.now(timezone.utc)
        deleted = 0
        try:
            for folder in self.logs_base_dir.iterdir():
                if not folder.is_dir():
                    continue
                try:
                    folder_date = datetime.strptime(folder.name, "%Y-%m-%d").replace(tzinfo=timezone.utc)
                except ValueError:
                    continue
                if (now - folder_date).days > LOG_RETENTION_DAYS:
                    shutil.rmtree(folder)
                    deleted += 1
        except OSError as e:
            print(f"[LOG CLEANUP ERROR] {e}")
            return

        if deleted:
            print(f"[LOG CLEANUP] Deleted {deleted} old log folders (>{LOG_RETENTION_DAYS} days)")

    def _write_header(self, text: str) -> None:
        header = f"\n{'=' * 60}\n{text}\n{self._get_timestamp()}\n{'=' * 60}\n\n"
        self._append(self.log_file, header)
        self._append(self.error_file, header)

    # =========================================================================
    # Output
    # =========================================================================

    @staticmethod
    def _append(path: Path, text: str) -> None:
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError:
            pass

    def _get_timestamp(self) -> str:
        return datetime.now(timezone.utc).strftime("[%H:%M:%S TCT]")

    def _format_line(self, message: str, emoji: str) -> str:
        clean = EMOJI_PATTERN.sub("", message).strip()
        timestamp = self._get_timestamp()
        return f"{timestamp} {emoji} {clean}" if emoji else f"{timestamp} {clean}"

    def _emit(self, line: str, to_error: bool = False) -> None:
        print(line)
        self._append(self.log_file, f"{line}\n")
        if to_error:
            self._append(self.error_file, f"{line}\n")

    def _render(
        self,
        title: str,
        items: List[Tuple[str, Any]],
        emoji: str,
        to_error: bool = False,
    ) -> None:
        self._check_date_rotation()
        self._emit(self._format_line(title, emoji), to_error)
        for i, (key, value) in enumerate(items):
            prefix = TreeSymbols.LAST if i == len(items) - 1 else TreeSymbols.BRANCH
            self._emit(f"  {prefix} {key}: {value}", to_error)
        self._emit("", to_error)

    # =========================================================================
    # Log Levels
    # =========================================================================

    def info(self, msg: str, details: Optional[List[Tuple[str, Any]]] = None) -> None:
        self._render(msg, details or [("Status", "OK")], "ℹ️")

    def warning(self, msg: str, details: Optional[List[Tuple[str, Any]]] = None) -> None:
        """Warnings also go to the error log."""
        self._render(msg, details or [("Status", "Warning")], "⚠️", to_error=True)

    def error(self, msg: str, details: Optional[List[Tuple[str, Any]]] = None) -> None:
        """Errors also go to the error log."""
        self._render(msg, details or [("Status", "Failed")], "❌", to_error=True)

    def debug(self, msg: str, details: Optional[List[Tuple[str, Any]]] = None) -> None:
        """Only emitted when the DEBUG env var is truthy."""
        if os.getenv("DEBUG", "").lower() in ("1", "true", "yes"):
            self._render(msg, details or [("Status", "Debug")], "🔍")

    def exception(self, msg: str, details: Optional[List[Tuple[str, Any]]] = None) -> None:
        """Log an error followed by the active traceback."""
        self._render(msg, details or [("Status", "Exception")], "💥", to_error=True)
        tb = traceback.format_exc()
        self._append(self.log_file, tb + "\n")
        self._append(self.error_file, tb + "\n")

    def tree(
        self,
        title: str,
        items: List[Tuple[str, Any]],
        emoji: str = "📦"
    ) -> None:
        """
        Log structured data in tree format.

        Example output:
            [14:00:00 TCT] 🕵️ OC Update Complete
              ├─ Total: 42
              ├─ Not In OC: 3
              └─ Alerts: 1
        """
        self._render(title, items, emoji)

    def error_tree(
        self,
        title: str,
        error: BaseException,
        context: Optional[List[Tuple[str, Any]]] = None
    ) -> None:
        """Log an exception's type and message plus extra context."""
        items: List[Tuple[str, Any]] = [
            ("Type", type(error).__name__),
            ("Message", str(error)[:200]),
        ]
        if context:
            items.extend(context)
        self._render(title, items, "❌", to_error=True)


# =============================================================================
# Module Export
# =============================================================================

logger = MiniTreeLogger()

__all__ = ["logger", "MiniTreeLogger", "TreeSymbols"]
