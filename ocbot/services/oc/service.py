"""
OC Watch Bot - OC Update Service
================================

Runs one update cycle: fetch, reconcile, alert, publish.

The state transition itself lives in reconcile.plan_update(); this module
only resolves configuration and performs the plan's side effects. Every
external call is guarded on its own, so a failing Discord call never undoes
the store writes that already happened. The next tick retries.
"""

import time
from typing import TYPE_CHECKING, Callable, Optional

import discord

from ocbot.core.config import (
    CONFIG_KEY_API_KEY,
    CONFIG_KEY_UPDATE_CHANNEL,
    CONFIG_KEY_UPDATE_MESSAGE,
    load_default_api_key,
)
from ocbot.core.logger import logger
from ocbot.services.database import Database
from ocbot.services.oc.alerts import AlertNotifier
from ocbot.services.oc.reconcile import UpdatePlan, plan_update
from ocbot.services.torn import TornClient
from ocbot.utils.discord_rate_limit import edit_message_with_retry, send_message_with_retry
from ocbot.utils.helpers import parse_snowflake, safe_fetch_channel, safe_fetch_message

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


# =============================================================================
# OC Update Service
# =============================================================================

class OCUpdateService:
    """Owns the update cycle and everything it needs."""

    def __init__(
        self,
        bot: "OCWatchBot",
        db: Database,
        torn: TornClient,
        notifier: Optional[AlertNotifier] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            bot: Discord client used to resolve channels
            db: Store handle shared with the command handlers
            torn: Torn API client
            notifier: Alert notifier, built from bot and db if omitted
            clock: Source of the cycle timestamp
        """
        self.bot = bot
        self.db = db
        self.torn = torn
        self.notifier = notifier or AlertNotifier(bot, db)
        self.clock = clock
        self.last_plan: Optional[UpdatePlan] = None

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def resolve_api_key(self) -> Optional[str]:
        """Environment default first, stored key second."""
        return load_default_api_key() or self.db.get_config(CONFIG_KEY_API_KEY)

    def resolve_channel_id(self) -> Optional[int]:
        return parse_snowflake(self.db.get_config(CONFIG_KEY_UPDATE_CHANNEL))

    # -------------------------------------------------------------------------
    # Update Cycle
    # -------------------------------------------------------------------------

    async def run_update(self, now: Optional[int] = None) -> Optional[UpdatePlan]:
        """
        Run one update cycle.

        Args:
            now: Cycle timestamp, defaults to the clock

        Returns:
            The executed plan, or None if the cycle was skipped
        """
        now = int(self.clock()) if now is None else now

        try:
            api_key = self.resolve_api_key()
            if not api_key:
                logger.warning("No Torn API Key Set", [
                    ("Action", "Skipping OC check"),
                    ("Fix", "!setapikey <APIKEY> or TORN_API_KEY"),
                ])
                return None

            channel_id = self.resolve_channel_id()
            if channel_id is None:
                logger.info("Update Channel Not Set", [
                    ("Action", "Skipping OC check"),
                    ("Fix", "!setchannel #channel"),
                ])
                return None

            fetched = await self.torn.fetch_faction_members(api_key)
            if fetched is None:
                return None

            plan = plan_update(self.db.get_members(), fetched, self.db.get_last_alerts(), now)
            self.db.upsert_members(plan.members)
        except Exception as e:
            logger.error_tree("OC Update Failed", e, [
                ("Stage", "Reconcile"),
            ])
            return None

        self.last_plan = plan

        if plan.first_import:
            logger.tree("Imported Faction Members", [
                ("Members", str(len(plan.members))),
                ("Not In OC", str(sum(1 for m in plan.members if not m.is_in_oc))),
            ], emoji="📥")
            return plan

        channel = await safe_fetch_channel(self.bot, channel_id)
        if channel is None:
            return plan

        alerts_sent = 0
        for alert in plan.alerts:
            try:
                if await self.notifier.send_alert(channel, alert, now) is not None:
                    alerts_sent += 1
            except Exception as e:
                logger.error_tree("Failed To Send OC Alert", e, [
                    ("Member", f"{alert.name} ({alert.member_id})"),
                ])

        await self.publish_summary(channel, plan.summary)

        logger.tree("OC Update Complete", [
            ("Total", str(plan.total)),
            ("In OC", str(plan.in_oc)),
            ("Not In OC", str(plan.not_in_oc)),
            ("Alerts", f"{alerts_sent}/{len(plan.alerts)}"),
        ], emoji="🕵️")
        return plan

    # -------------------------------------------------------------------------
    # Status Message
    # -------------------------------------------------------------------------

    async def publish_summary(self, channel: discord.abc.Messageable, summary: str) -> Optional[int]:
        """
        Edit the stored status message in place, or send a new one.

        A new message is sent (and its id persisted) when no id is stored,
        or when the stored message cannot be fetched or edited.

        Returns:
            Id of the message now showing the summary, or None on failure
        """
        try:
            stored_id = parse_snowflake(self.db.get_config(CONFIG_KEY_UPDATE_MESSAGE))
        except Exception as e:
            logger.error_tree("Failed To Read Status Message Id", e)
            stored_id = None

        if stored_id is not None:
            message = await safe_fetch_message(channel, stored_id)
            if message is not None and await edit_message_with_retry(message, content=summary):
                return message.id
            logger.info("Status Message Missing", [
                ("Old Message ID", str(stored_id)),
                ("Action", "Sending new message"),
            ])

        sent = await send_message_with_retry(channel, summary)
        if sent is None:
            return None

        try:
            self.db.set_config(CONFIG_KEY_UPDATE_MESSAGE, str(sent.id))
        except Exception as e:
            logger.error_tree("Failed To Save Status Message Id", e, [
                ("Message ID", str(sent.id)),
            ])
        return sent.id


__all__ = ["OCUpdateService"]
