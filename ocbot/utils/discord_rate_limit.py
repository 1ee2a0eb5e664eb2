"""
OC Watch Bot - Discord Rate Limit Utilities
===========================================

Send/edit/delete/react helpers that never raise.

A 429 response is retried after Discord's retry_after (or an exponential
fallback); any other HTTP failure is logged and reported through the
return value.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar, Union

import discord

from ocbot.core.config import REACTION_DELAY
from ocbot.core.logger import logger


T = TypeVar("T")

MAX_RETRIES: int = 3
BASE_DELAY: float = 1.0  # seconds, doubled per attempt when Discord gives no retry_after


def _backoff(e: discord.HTTPException, attempt: int) -> float:
    return getattr(e, "retry_after", None) or BASE_DELAY * (2 ** attempt)


async def _with_rate_limit_retry(
    call: Callable[[], Awaitable[T]],
    action: str,
    target: str,
    max_retries: int = MAX_RETRIES,
) -> T:
    """
    Await call(), retrying 429s up to max_retries attempts in total.

    Raises:
        discord.HTTPException: The last error once retries are exhausted,
            or immediately for non-429 failures
    """
    attempt = 0
    while True:
        try:
            return await call()
        except discord.HTTPException as e:
            attempt += 1
            if e.status != 429 or attempt >= max_retries:
                raise
            wait = _backoff(e, attempt - 1)
            logger.warning("Rate Limited", [
                ("Action", action),
                ("Target", target),
                ("Attempt", f"{attempt}/{max_retries}"),
                ("Retry After", f"{wait:.1f}s"),
            ])
            await asyncio.sleep(wait)


# =============================================================================
# Helpers
# =============================================================================

async def add_reactions_with_delay(
    message: discord.Message,
    emojis: Sequence[Union[str, discord.Emoji]],
    delay: float = REACTION_DELAY,
) -> List[bool]:
    """Add reactions in order, pausing between them. Returns one flag per emoji."""
    added: List[bool] = []
    for index, emoji in enumerate(emojis):
        if index:
            await asyncio.sleep(delay)
        try:
            await _with_rate_limit_retry(
                lambda: message.add_reaction(emoji), "react", str(message.id), max_retries=2
            )
            added.append(True)
        except discord.HTTPException as e:
            logger.warning("Failed To Add Reaction", [
                ("Message ID", str(message.id)),
                ("Emoji", str(emoji)),
                ("Error", str(e)),
            ])
            added.append(False)
    return added


async def send_message_with_retry(
    channel: discord.abc.Messageable,
    content: Optional[str] = None,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> Optional[discord.Message]:
    """Send a message; returns it, or None if Discord refused."""
    channel_id = str(getattr(channel, "id", "?"))
    try:
        return await _with_rate_limit_retry(
            lambda: channel.send(content=content, **kwargs), "send", channel_id, max_retries
        )
    except discord.HTTPException as e:
        logger.error("Failed To Send Message", [
            ("Channel", channel_id),
            ("Status", str(e.status)),
            ("Error", str(e)),
        ])
        return None


async def edit_message_with_retry(
    message: discord.Message,
    content: Optional[str] = None,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> bool:
    """Edit a message in place; False if Discord refused."""
    try:
        await _with_rate_limit_retry(
            lambda: message.edit(content=content, **kwargs), "edit", str(message.id), max_retries
        )
        return True
    except discord.HTTPException as e:
        logger.error("Failed To Edit Message", [
            ("Message ID", str(message.id)),
            ("Status", str(e.status)),
            ("Error", str(e)),
        ])
        return False


async def delete_message_safe(message: discord.Message, delay: float = 0.0) -> bool:
    """Delete a message. A message that is already gone counts as deleted."""
    if delay > 0:
        await asyncio.sleep(delay)

    try:
        await message.delete()
    except discord.NotFound:
        return True
    except discord.HTTPException as e:
        logger.warning("Failed To Delete Message", [
            ("Message ID", str(message.id)),
            ("Error", str(e)),
        ])
        return False
    return True


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "add_reactions_with_delay",
    "send_message_with_retry",
    "edit_message_with_retry",
    "delete_message_safe",
]
