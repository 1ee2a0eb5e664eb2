"""
OC Watch Bot - OC Update Scheduler
==================================

Background task that runs the OC update cycle once a minute.

The first tick waits for the next top-of-minute boundary so that the
"Next update in" marker in the status message matches reality.
"""

import asyncio
import time
from typing import TYPE_CHECKING

from discord.ext import tasks

from ocbot.core.config import UPDATE_INTERVAL_SECONDS
from ocbot.core.logger import logger
from ocbot.utils.duration import next_minute_boundary

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


# =============================================================================
# OC Update Scheduler
# =============================================================================

class OCUpdateScheduler:
    """
    Fires bot.run_oc_update() every minute.

    A failing tick is logged and the loop keeps running; the
    next tick is the retry.
    """

    def __init__(self, bot: "OCWatchBot") -> None:
        self.bot = bot

    async def start(self) -> None:
        if not self._tick.is_running():
            self._tick.start()
            logger.info("OC Update Scheduler Started", [
                ("Interval", f"{UPDATE_INTERVAL_SECONDS} seconds"),
            ])

    async def stop(self) -> None:
        if self._tick.is_running():
            self._tick.cancel()
            logger.info("OC Update Scheduler Stopped")

    def is_running(self) -> bool:
        return self._tick.is_running()

    @tasks.loop(seconds=UPDATE_INTERVAL_SECONDS)
    async def _tick(self) -> None:
        try:
            await self.bot.run_oc_update()
        except Exception as e:
            logger.error_tree("OC Update Tick Failed", e)

    @_tick.before_loop
    async def _before_tick(self) -> None:
        """Wait for the gateway, then align to the next full minute."""
        await self.bot.wait_until_ready()
        now = time.time()
        wait_seconds = next_minute_boundary(int(now)) - now
        logger.debug("First OC Update Scheduled", [
            ("In", f"{wait_seconds:.1f}s"),
        ])
        await asyncio.sleep(wait_seconds)


__all__ = ["OCUpdateScheduler"]
