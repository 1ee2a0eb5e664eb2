"""
OC Watch Bot - Escalation Alerts
================================

Sends the 24h "not in OC" alert and collects the single reaction it allows.

An alert message gets ✅ and ❌ reactions. The first ✅ or ❌ from a non-bot
user within the reaction window decides it: ✅ adds one to the member's
infraction tally, ❌ does nothing. Either way, and also on timeout, the
alert message is deleted afterwards.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Set

import discord

from ocbot.core.config import ALERT_REACTION_WINDOW_SECONDS
from ocbot.core.emojis import ALERT_REACTIONS, CONFIRM_EMOJI
from ocbot.core.logger import logger
from ocbot.services.oc.reconcile import AlertDue
from ocbot.utils.discord_rate_limit import (
    add_reactions_with_delay,
    delete_message_safe,
    send_message_with_retry,
)

if TYPE_CHECKING:
    from ocbot.services.database import Database


# =============================================================================
# Alert Notifier
# =============================================================================

class AlertNotifier:
    """Posts escalation alerts and tracks their reaction collectors."""

    def __init__(
        self,
        client: discord.Client,
        db: "Database",
        window_seconds: float = ALERT_REACTION_WINDOW_SECONDS,
    ) -> None:
        self.client = client
        self.db = db
        self.window_seconds = window_seconds
        self._collectors: Set[asyncio.Task] = set()

    @property
    def active_collectors(self) -> int:
        return len(self._collectors)

    async def send_alert(
        self,
        channel: discord.abc.Messageable,
        alert: AlertDue,
        now: int,
    ) -> Optional[discord.Message]:
        """
        Post one alert, record its cooldown and start collecting reactions.

        The cooldown is only recorded when the message was actually sent,
        so a failed send is retried on the next cycle.

        Returns:
            The alert message, or None if it could not be sent
        """
        message = await send_message_with_retry(channel, alert.text)
        if message is None:
            return None

        try:
            self.db.record_alert(alert.member_id, now)
        except Exception as e:
            logger.error_tree("Failed To Record Alert", e, [
                ("Member", f"{alert.name} ({alert.member_id})"),
            ])

        await add_reactions_with_delay(message, ALERT_REACTIONS)

        task = asyncio.create_task(self.collect_reaction(message, alert))
        self._collectors.add(task)
        task.add_done_callback(self._collectors.discard)

        logger.tree("OC Alert Sent", [
            ("Member", f"{alert.name} ({alert.member_id})"),
            ("Out Of OC", f"{alert.out_seconds // 3600}h"),
            ("Message ID", str(message.id)),
        ], emoji="🚨")
        return message

    async def collect_reaction(self, message: discord.Message, alert: AlertDue) -> Optional[str]:
        """
        Wait for the single qualifying reaction on an alert, then delete it.

        Returns:
            The emoji that decided the alert, or None on timeout
        """
        def check(reaction: discord.Reaction, user: discord.abc.User) -> bool:
            return (
                reaction.message.id == message.id
                and str(reaction.emoji) in ALERT_REACTIONS
                and not user.bot
            )

        decided: Optional[str] = None
        try:
            reaction, user = await self.client.wait_for(
                "reaction_add",
                check=check,
                timeout=self.window_seconds,
            )
            decided = str(reaction.emoji)

            if decided == CONFIRM_EMOJI:
                try:
                    self.db.increment_tally(alert.member_id)
                except Exception as e:
                    logger.error_tree("Failed To Increment Tally", e, [
                        ("Member", f"{alert.name} ({alert.member_id})"),
                    ])
                else:
                    logger.tree("Infraction Tally Incremented", [
                        ("Member", f"{alert.name} ({alert.member_id})"),
                        ("By", f"{user.name} ({user.id})"),
                    ], emoji="📝")
            else:
                logger.info("OC Alert Dismissed", [
                    ("Member", f"{alert.name} ({alert.member_id})"),
                    ("By", f"{user.name} ({user.id})"),
                ])
        except asyncio.TimeoutError:
            logger.debug("OC Alert Reaction Window Expired", [
                ("Member", f"{alert.name} ({alert.member_id})"),
            ])
        finally:
            await delete_message_safe(message)

        return decided

    async def cancel_all(self) -> None:
        """Cancel pending collectors (their finally blocks still delete the alerts)."""
        tasks = list(self._collectors)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["AlertNotifier"]
