"""
OC Watch Bot - Main Bot Class
=============================

Discord client that keeps a Torn faction's organized-crime participation
visible in one channel.

ARCHITECTURE OVERVIEW:
======================

┌─────────────────────────────────────────────────────────────────┐
│                        BOT LAYER (bot.py)                        │
│  - Discord client setup and event routing                       │
│  - Service wiring and lifecycle management                      │
└─────────────────────────────────────────────────────────────────┘
                              │
        ┌─────────────────────┼─────────────────────┐
        ▼                     ▼                     ▼
┌───────────────┐    ┌───────────────┐    ┌───────────────┐
│   HANDLERS    │    │   SERVICES    │    │   COMMANDS    │
│ - ready.py    │    │ - torn/       │    │ - ping.py     │
│ - commands.py │    │ - oc/         │    │   (slash cmd) │
│ - shutdown.py │    │ - database/   │    └───────────────┘
└───────────────┘    │ - schedulers/ │
                     └───────────────┘

Every minute the scheduler runs one update cycle: fetch the member list,
reconcile it against the store, alert on members out of an OC for 24h
and refresh the single status message.
"""

from typing import Optional

import discord
from discord.ext import commands

from ocbot.core.logger import logger
from ocbot.core.presence import update_presence
from ocbot.handlers.commands import on_message_handler
from ocbot.handlers.ready import on_ready_handler
from ocbot.handlers.shutdown import shutdown_handler
from ocbot.services.database import Database
from ocbot.services.oc import OCUpdateService, UpdatePlan
from ocbot.services.schedulers import OCUpdateScheduler
from ocbot.services.torn import TornClient


# =============================================================================
# OCWatchBot Class
# =============================================================================

class OCWatchBot(commands.Bot):
    """
    Main Discord bot class.

    INTENTS REQUIRED:
    - guilds: Resolve channels
    - guild_messages + message_content: Read prefix commands
    - reactions: Collect alert reactions
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, db: Optional[Database] = None, torn: Optional[TornClient] = None) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        intents.message_content = True
        intents.reactions = True

        super().__init__(
            command_prefix="!",  # Prefix commands are routed by on_message_handler
            intents=intents,
            help_command=None,
        )

        self.db: Database = db or Database()
        self.torn: TornClient = torn or TornClient()
        self.oc_service: OCUpdateService = OCUpdateService(self, self.db, self.torn)
        self.oc_scheduler: OCUpdateScheduler = OCUpdateScheduler(self)

        # Discord can fire on_ready more than once (reconnects, resumes)
        self._ready_initialized: bool = False

    # =========================================================================
    # Event Handlers
    # =========================================================================

    async def setup_hook(self) -> None:
        """Setup hook called when bot is starting."""
        await self.load_extension("ocbot.commands.ping")
        logger.info("Bot setup complete - commands will sync on ready")

    async def on_ready(self) -> None:
        if self._ready_initialized:
            logger.info("🔄 Bot Reconnected (skipping re-initialization)")
            return
        self._ready_initialized = True
        await on_ready_handler(self)

    async def on_message(self, message: discord.Message) -> None:
        await on_message_handler(self, message)

    async def on_resumed(self) -> None:
        logger.info("Bot Connection Resumed")

    async def close(self) -> None:
        """Cleanup when bot is shutting down."""
        await shutdown_handler(self)
        await super().close()

    # =========================================================================
    # OC Update
    # =========================================================================

    async def run_oc_update(self) -> Optional[UpdatePlan]:
        """Run one update cycle and reflect the result in the bot's presence."""
        plan = await self.oc_service.run_update()
        if plan is not None and not plan.first_import:
            await update_presence(self, plan)
        return plan


__all__ = ["OCWatchBot"]
