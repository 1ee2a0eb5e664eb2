"""
OC Watch Bot - Main Entry Point
===============================

Starts the bot with a single-instance guard and graceful signal handling.

Usage:
    python main.py

Environment Variables:
    DISCORD_TOKEN: Required. Discord bot authentication token.
    TORN_API_KEY: Optional. Default Torn API key.
    OC_DB_PATH: Optional. SQLite database location.
    OC_LOG_DIR: Optional. Log directory.
    DEBUG: Optional. Enables debug logging when "true".
"""

import os
import sys
import fcntl
import signal
import asyncio
import tempfile
from pathlib import Path
from typing import NoReturn, Optional, Set

# Load .env before local modules read the environment
from dotenv import load_dotenv
load_dotenv()

import discord

from ocbot.core.logger import logger
from ocbot.core.config import ConfigValidationError, validate_and_log_config
from ocbot.bot import OCWatchBot


# =============================================================================
# Constants
# =============================================================================

LOCK_FILE_PATH = Path(tempfile.gettempdir()) / "ocwatch_bot.lock"
"""Held with flock() for the lifetime of the process."""

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGHUP)

_bot_instance: Optional[OCWatchBot] = None

# Strong references so pending close() tasks are not garbage-collected
_shutdown_tasks: Set["asyncio.Task[None]"] = set()


# =============================================================================
# Single Instance Lock
# =============================================================================

def _lock_owner(fd: int) -> Optional[int]:
    """PID recorded in the lock file, if it parses."""
    try:
        os.lseek(fd, 0, os.SEEK_SET)
        return int(os.read(fd, 32).decode().strip())
    except (OSError, ValueError):
        return None


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def acquire_lock() -> int:
    """
    Take the single-instance lock and record our PID in it.

    flock() locks die with the process, so a crash never leaves the bot
    locked out. A lock file naming a dead PID is removed and retried once.

    Returns:
        File descriptor that must stay open while the bot runs

    Raises:
        SystemExit: If another live instance holds the lock
    """
    for attempt in range(2):
        try:
            fd = os.open(str(LOCK_FILE_PATH), os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            logger.error("🔒 Cannot Open Lock File", [
                ("Path", str(LOCK_FILE_PATH)),
                ("Error", str(e)),
            ])
            sys.exit(1)

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            owner = _lock_owner(fd)
            os.close(fd)
            if attempt == 0 and owner is not None and not _pid_alive(owner):
                logger.warning("🔒 Clearing Lock Of Dead Process", [
                    ("PID", str(owner)),
                ])
                LOCK_FILE_PATH.unlink(missing_ok=True)
                continue

            logger.error("🔒 OC Watch Bot Is Already Running", [
                ("PID", str(owner) if owner else "Unknown"),
                ("Lock File", str(LOCK_FILE_PATH)),
            ])
            sys.exit(1)

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        logger.info("🔒 Instance Lock Held", [
            ("PID", str(os.getpid())),
        ])
        return fd

    sys.exit(1)


# =============================================================================
# Configuration
# =============================================================================

def load_configuration() -> str:
    """
    Validate the environment and return the Discord token.

    Raises:
        SystemExit: If required configuration is missing
    """
    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Refusing To Start", [
            ("Reason", str(e)),
            ("Fix", "Check your .env file"),
        ])
        sys.exit(1)

    return os.environ["DISCORD_TOKEN"]


# =============================================================================
# Signals
# =============================================================================

def _on_shutdown_signal(signum: int) -> None:
    """Runs inside the event loop (loop.add_signal_handler)."""
    logger.info("Shutdown Signal Received", [
        ("Signal", signal.Signals(signum).name),
    ])
    if _bot_instance is not None and not _bot_instance.is_closed():
        task = asyncio.create_task(_bot_instance.close())
        _shutdown_tasks.add(task)
        task.add_done_callback(_shutdown_tasks.discard)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_shutdown_signal, sig)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            logger.warning("Signal Handler Not Installed", [
                ("Signal", sig.name),
                ("Error", str(e)),
            ])

    # SIGINT surfaces as KeyboardInterrupt in main()


async def _run_bot(bot: OCWatchBot, token: str) -> None:
    _install_signal_handlers(asyncio.get_running_loop())
    async with bot:
        await bot.start(token)


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> NoReturn:
    """Lock, validate, run until the bot closes, then release the lock."""
    global _bot_instance

    lock_fd = acquire_lock()
    token = load_configuration()
    exit_code = 0

    logger.tree("Starting OC Watch Bot", [
        ("Tracks", "Torn faction OC participation"),
        ("PID", str(os.getpid())),
    ], emoji="🕵️")

    # bot.start() skips the discord.py log handler that bot.run() installs
    discord.utils.setup_logging()

    try:
        _bot_instance = OCWatchBot()
        asyncio.run(_run_bot(_bot_instance, token))
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted (Ctrl+C)")
    except Exception as e:
        logger.error_tree("💥 Bot Crashed", e)
        logger.exception("Full traceback:")
        exit_code = 1
    finally:
        os.close(lock_fd)
        logger.info("🛑 Process Exiting", [
            ("Exit Code", str(exit_code)),
        ])

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
