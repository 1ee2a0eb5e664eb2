"""
OC Watch Bot - Ping Command
===========================

Liveness check.

Commands:
- /ping - Replies with "Pong!"
"""

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from ocbot.core.logger import logger

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


PING_REPLY = "Pong!"


# =============================================================================
# Ping Cog
# =============================================================================

class PingCog(commands.Cog):
    """Slash command that confirms the bot is alive."""

    def __init__(self, bot: "OCWatchBot") -> None:
        self.bot = bot

    @app_commands.command(name="ping", description="Check that the bot is alive")
    async def ping_command(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(PING_REPLY)
        logger.debug("Ping Command Used", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
        ])


# =============================================================================
# Setup Function
# =============================================================================

async def setup(bot: "OCWatchBot") -> None:
    """Setup function for loading the cog."""
    await bot.add_cog(PingCog(bot))
    logger.info("Ping Cog Loaded", [
        ("Commands", "/ping"),
    ])


__all__ = ["PingCog", "setup", "PING_REPLY"]
