"""
OC Watch Bot - Helper Utilities
===============================

Safe Discord fetch helpers.
"""

from typing import Optional

import discord

from ocbot.core.logger import logger


# =============================================================================
# Safe Discord API Fetch Helpers
# =============================================================================

async def safe_fetch_channel(
    client: discord.Client,
    channel_id: int
) -> Optional[discord.abc.Messageable]:
    """
    Resolve a channel from cache or the API.

    Returns:
        The channel if it exists and can receive messages, None otherwise
    """
    channel = client.get_channel(channel_id)
    if channel is None:
        try:
            channel = await client.fetch_channel(channel_id)
        except discord.NotFound:
            logger.warning("Update Channel Not Found", [
                ("Channel ID", str(channel_id)),
            ])
            return None
        except discord.Forbidden:
            logger.warning("No Permission To Fetch Channel", [
                ("Channel ID", str(channel_id)),
            ])
            return None
        except discord.HTTPException as e:
            logger.warning("HTTP Error Fetching Channel", [
                ("Channel ID", str(channel_id)),
                ("Error", str(e)),
            ])
            return None

    if not hasattr(channel, "send"):
        logger.warning("Update Channel Is Not Messageable", [
            ("Channel ID", str(channel_id)),
            ("Type", type(channel).__name__),
        ])
        return None

    return channel


async def safe_fetch_message(
    channel: discord.abc.Messageable,
    message_id: int
) -> Optional[discord.Message]:
    """
    Fetch a message, returning None when it is gone or unreachable.
    """
    try:
        return await channel.fetch_message(message_id)
    except discord.NotFound:
        logger.debug("Message Not Found", [
            ("Message ID", str(message_id)),
        ])
        return None
    except discord.Forbidden:
        logger.warning("No Permission To Fetch Message", [
            ("Message ID", str(message_id)),
        ])
        return None
    except discord.HTTPException as e:
        logger.warning("HTTP Error Fetching Message", [
            ("Message ID", str(message_id)),
            ("Error", str(e)),
        ])
        return None


def parse_snowflake(value: Optional[str]) -> Optional[int]:
    """Stored id string to int, or None when missing or not numeric."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


__all__ = [
    "safe_fetch_channel",
    "safe_fetch_message",
    "parse_snowflake",
]
