"""
OC Watch Bot - Text Command Handler
===================================

Prefix commands read from guild messages.

Commands:
- !forceupdate - Run the OC update now, then delete the command message
- !setapikey <APIKEY> - Store the Torn API key
- !setchannel <#channel> - Store the channel that receives updates
"""

import re
from typing import TYPE_CHECKING, Iterable, Optional

import discord

from ocbot.core.config import CONFIG_KEY_API_KEY, CONFIG_KEY_UPDATE_CHANNEL
from ocbot.core.logger import logger
from ocbot.utils.discord_rate_limit import delete_message_safe

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


# =============================================================================
# Constants
# =============================================================================

FORCE_UPDATE_COMMAND = "!forceupdate"
SET_API_KEY_COMMAND = "!setapikey"
SET_CHANNEL_COMMAND = "!setchannel"

API_KEY_USAGE = "Usage: !setapikey <APIKEY>"
CHANNEL_USAGE = "Please mention a channel, e.g. `!setchannel #channel-name`"

SET_API_KEY_PATTERN = re.compile(r"^!setapikey\s+([a-zA-Z0-9]+)$")
CHANNEL_MENTION_PATTERN = re.compile(r"!setchannel\s+<#(\d+)>")
CHANNEL_ID_PATTERN = re.compile(r"^!setchannel\s+(\d+)$")


# =============================================================================
# Parsers
# =============================================================================

def parse_api_key(content: str) -> Optional[str]:
    """API key from a !setapikey message, or None if malformed."""
    match = SET_API_KEY_PATTERN.match(content.strip())
    return match.group(1) if match else None


def parse_channel_id(content: str, mentioned_ids: Iterable[int] = ()) -> Optional[str]:
    """
    Channel id from a !setchannel message.

    Tries a <#id> token, then a bare numeric id, then the
    first resolved channel mention.
    """
    content = content.strip()

    match = CHANNEL_MENTION_PATTERN.search(content)
    if match:
        return match.group(1)

    match = CHANNEL_ID_PATTERN.match(content)
    if match:
        return match.group(1)

    for channel_id in mentioned_ids:
        return str(channel_id)
    return None


# =============================================================================
# Message Handler
# =============================================================================

async def on_message_handler(bot: "OCWatchBot", message: discord.Message) -> None:
    """Route guild messages from users to the matching command."""
    if message.author.bot:
        return
    if message.guild is None:
        return

    content = message.content or ""

    if content.strip() == FORCE_UPDATE_COMMAND:
        await handle_force_update(bot, message)
    elif content.startswith(SET_API_KEY_COMMAND):
        await handle_set_api_key(bot, message)
    elif content.startswith(SET_CHANNEL_COMMAND):
        await handle_set_channel(bot, message)


async def _reply(message: discord.Message, text: str) -> None:
    try:
        await message.reply(text)
    except discord.HTTPException as e:
        logger.warning("Failed To Reply To Command", [
            ("Channel", str(message.channel.id)),
            ("Error", str(e)),
        ])


# =============================================================================
# Commands
# =============================================================================

async def handle_force_update(bot: "OCWatchBot", message: discord.Message) -> None:
    logger.tree("Force Update Requested", [
        ("User", f"{message.author.name} ({message.author.id})"),
        ("Channel", str(message.channel.id)),
    ], emoji="🔄")

    await bot.run_oc_update()
    await delete_message_safe(message)


async def handle_set_api_key(bot: "OCWatchBot", message: discord.Message) -> None:
    api_key = parse_api_key(message.content)
    if api_key is None:
        await _reply(message, API_KEY_USAGE)
        return

    try:
        bot.db.set_config(CONFIG_KEY_API_KEY, api_key)
    except Exception as e:
        logger.error_tree("Failed To Save API Key", e, [
            ("User", f"{message.author.name} ({message.author.id})"),
        ])
        await _reply(message, "Failed to save API key.")
        return

    logger.tree("Torn API Key Updated", [
        ("User", f"{message.author.name} ({message.author.id})"),
        ("Key", f"{api_key[:4]}..."),
    ], emoji="🔑")
    await _reply(message, "Torn API key saved successfully.")


async def handle_set_channel(bot: "OCWatchBot", message: discord.Message) -> None:
    mentioned = [channel.id for channel in getattr(message, "channel_mentions", None) or []]
    channel_id = parse_channel_id(message.content, mentioned)
    if channel_id is None:
        await _reply(message, CHANNEL_USAGE)
        return

    try:
        bot.db.set_config(CONFIG_KEY_UPDATE_CHANNEL, channel_id)
    except Exception as e:
        logger.error_tree("Failed To Save Channel", e, [
            ("Channel ID", channel_id),
        ])
        await _reply(message, "Failed to save channel.")
        return

    logger.tree("Update Channel Set", [
        ("User", f"{message.author.name} ({message.author.id})"),
        ("Channel ID", channel_id),
    ], emoji="📌")
    await _reply(message, f"Channel set to <#{channel_id}> for updates.")


__all__ = [
    "on_message_handler",
    "handle_force_update",
    "handle_set_api_key",
    "handle_set_channel",
    "parse_api_key",
    "parse_channel_id",
    "API_KEY_USAGE",
    "CHANNEL_USAGE",
]
