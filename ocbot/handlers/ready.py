"""
OC Watch Bot - Ready Handler
============================

Runs once per process when the gateway reports ready: syncs slash commands,
starts the OC update loop and sets the initial presence.
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, List, Tuple

import discord

from ocbot.core.config import COMMAND_SYNC_TIMEOUT, CONFIG_KEY_UPDATE_CHANNEL, SERVICE_INIT_TIMEOUT
from ocbot.core.logger import logger
from ocbot.core.presence import update_presence

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


StartupStep = Callable[["OCWatchBot"], Awaitable[None]]


# =============================================================================
# Startup Steps
# =============================================================================

async def _start_oc_scheduler(bot: "OCWatchBot") -> None:
    await bot.oc_scheduler.start()


async def _set_initial_presence(bot: "OCWatchBot") -> None:
    await update_presence(bot, bot.oc_service.last_plan)


STARTUP_STEPS: Tuple[Tuple[str, StartupStep], ...] = (
    ("OC Update Scheduler", _start_oc_scheduler),
    ("Presence", _set_initial_presence),
)


async def _safe_init(
    name: str,
    step: StartupStep,
    bot: "OCWatchBot",
    timeout: float = SERVICE_INIT_TIMEOUT
) -> bool:
    """
    Run one startup step under a timeout.

    A step that hangs or raises is logged and skipped so the rest of
    startup still happens.

    Returns:
        True if the step completed
    """
    try:
        async with asyncio.timeout(timeout):
            await step(bot)
    except asyncio.TimeoutError:
        logger.error("Startup Step Timed Out", [
            ("Step", name),
            ("Timeout", f"{timeout}s"),
        ])
        return False
    except Exception as e:
        logger.error_tree("Startup Step Failed", e, [
            ("Step", name),
        ])
        return False
    return True


async def _sync_commands(bot: "OCWatchBot") -> None:
    """Sync slash commands globally and to every joined guild.

    Guild copies show up immediately; the global sync covers guilds joined later.
    """
    try:
        synced = await bot.tree.sync()
        for guild in bot.guilds:
            target = discord.Object(id=guild.id)
            bot.tree.copy_global_to(guild=target)
            await bot.tree.sync(guild=target)
    except discord.HTTPException as e:
        logger.error("⚡ Slash Command Sync Failed", [
            ("Status", str(e.status)),
            ("Error", str(e)),
        ])
        return

    logger.tree("Slash Commands Synced", [
        ("Commands", ", ".join(f"/{command.name}" for command in synced) or "none"),
        ("Guild Copies", str(len(bot.guilds))),
    ], emoji="⚡")


def describe_database(health: dict) -> str:
    """One-line summary of Database.health_check() for the ready banner."""
    if not health["healthy"]:
        return f"Unavailable ({health['error'] or 'schema incomplete'})"
    return f"Healthy (WAL, {health['tables']} tables, {health['size_kb']} KB)"


# =============================================================================
# Ready Handler
# =============================================================================

async def on_ready_handler(bot: "OCWatchBot") -> None:
    """Bring the bot's services up after the gateway connects."""
    try:
        channel_id = bot.db.get_config(CONFIG_KEY_UPDATE_CHANNEL)
    except Exception as e:
        logger.warning("Could Not Read Update Channel", [("Error", str(e))])
        channel_id = None

    logger.tree(f"Connected As {bot.user.name}", [
        ("Bot ID", str(bot.user.id)),
        ("Guilds", str(len(bot.guilds))),
        ("Update Channel", channel_id or "Not set (use !setchannel)"),
        ("Database", describe_database(bot.db.health_check())),
    ], emoji="✅")

    try:
        async with asyncio.timeout(COMMAND_SYNC_TIMEOUT):
            await _sync_commands(bot)
    except asyncio.TimeoutError:
        logger.error("Slash Command Sync Timed Out", [
            ("Timeout", f"{COMMAND_SYNC_TIMEOUT}s"),
        ])

    results: List[Tuple[str, bool]] = [
        (name, await _safe_init(name, step, bot)) for name, step in STARTUP_STEPS
    ]
    failed = [name for name, ok in results if not ok]

    if failed:
        logger.warning("Startup Finished With Failures", [
            ("Started", str(len(results) - len(failed))),
            ("Failed", ", ".join(failed)),
        ])
    else:
        logger.tree("Startup Finished", [
            ("Started", ", ".join(name for name, _ in results)),
        ], emoji="🚀")


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["on_ready_handler", "describe_database"]
