"""
OC Watch Bot - Presence Module
==============================

Shows the current "not in OC" count as the bot's activity.
"""

from typing import TYPE_CHECKING, Optional

import discord

from ocbot.core.logger import logger

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot
    from ocbot.services.oc.reconcile import UpdatePlan


def build_presence_text(plan: Optional["UpdatePlan"]) -> str:
    if plan is None or plan.first_import:
        return "faction OCs"
    if plan.not_in_oc == 0:
        return "everyone in an OC"
    return f"{plan.not_in_oc} not in OC"


async def update_presence(bot: "OCWatchBot", plan: Optional["UpdatePlan"] = None) -> None:
    """Best-effort presence update; failures are only logged."""
    text = build_presence_text(plan)
    try:
        await bot.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name=text),
            status=discord.Status.online,
        )
        logger.debug("Presence Updated", [
            ("Text", text),
        ])
    except Exception as e:
        logger.warning("Failed To Update Presence", [
            ("Error", str(e)),
        ])


__all__ = ["build_presence_text", "update_presence"]
