from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import discord

from ocbot.bot import OCWatchBot
from ocbot.commands.ping import PING_REPLY, PingCog
from ocbot.core.presence import build_presence_text, update_presence
from ocbot.handlers.ready import describe_database
from ocbot.handlers.shutdown import shutdown_handler
from ocbot.services.database import Database
from ocbot.services.oc.reconcile import UpdatePlan
from ocbot.services.schedulers import OCUpdateScheduler
from tests.fakes import FakeBot, FakeUser


def _plan(not_in_oc: int, first_import: bool = False) -> UpdatePlan:
    return UpdatePlan(now=0, first_import=first_import, total=5, in_oc=5 - not_in_oc, not_in_oc=not_in_oc)


class PresenceTests(unittest.IsolatedAsyncioTestCase):
    def test_presence_text(self):
        self.assertEqual(build_presence_text(None), "faction OCs")
        self.assertEqual(build_presence_text(_plan(3, first_import=True)), "faction OCs")
        self.assertEqual(build_presence_text(_plan(0)), "everyone in an OC")
        self.assertEqual(build_presence_text(_plan(3)), "3 not in OC")

    async def test_update_presence_sets_watching_activity(self):
        bot = FakeBot()
        await update_presence(bot, _plan(2))

        activity = bot.presence[0]["activity"]
        self.assertEqual(activity.type, discord.ActivityType.watching)
        self.assertEqual(activity.name, "2 not in OC")

    async def test_update_presence_swallows_errors(self):
        bot = FakeBot()
        bot.change_presence = mock.AsyncMock(side_effect=RuntimeError("gateway closed"))
        await update_presence(bot, _plan(1))


class PingTests(unittest.IsolatedAsyncioTestCase):
    async def test_ping_replies_pong(self):
        cog = PingCog(FakeBot())
        interaction = SimpleNamespace(
            response=SimpleNamespace(send_message=mock.AsyncMock()),
            user=FakeUser(),
        )

        await cog.ping_command.callback(cog, interaction)

        interaction.response.send_message.assert_awaited_once_with(PING_REPLY)
        self.assertEqual(PING_REPLY, "Pong!")


class ReadyBannerTests(unittest.TestCase):
    def test_describes_fresh_store(self):
        with tempfile.TemporaryDirectory() as tmp:
            text = describe_database(Database(Path(tmp) / "ocwatch.db").health_check())
        self.assertTrue(text.startswith("Healthy (WAL, "))

    def test_describes_unavailable_store(self):
        health = {"healthy": False, "wal_mode": False, "tables": 0, "size_kb": 0.0, "error": "file is not a database"}
        self.assertEqual(describe_database(health), "Unavailable (file is not a database)")


class ShutdownTests(unittest.IsolatedAsyncioTestCase):
    async def test_stops_everything(self):
        scheduler = SimpleNamespace(is_running=lambda: True, stop=mock.AsyncMock())
        notifier = SimpleNamespace(active_collectors=2, cancel_all=mock.AsyncMock())
        torn = SimpleNamespace(close=mock.AsyncMock())
        bot = SimpleNamespace(oc_scheduler=scheduler, oc_service=SimpleNamespace(notifier=notifier), torn=torn)

        await shutdown_handler(bot)

        scheduler.stop.assert_awaited_once()
        notifier.cancel_all.assert_awaited_once()
        torn.close.assert_awaited_once()

    async def test_one_failure_does_not_block_others(self):
        scheduler = SimpleNamespace(is_running=lambda: True, stop=mock.AsyncMock(side_effect=RuntimeError("x")))
        notifier = SimpleNamespace(active_collectors=0, cancel_all=mock.AsyncMock())
        torn = SimpleNamespace(close=mock.AsyncMock())
        bot = SimpleNamespace(oc_scheduler=scheduler, oc_service=SimpleNamespace(notifier=notifier), torn=torn)

        await shutdown_handler(bot)

        notifier.cancel_all.assert_not_awaited()
        torn.close.assert_awaited_once()


class SchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_tick_runs_one_cycle(self):
        bot = FakeBot()
        await OCUpdateScheduler(bot)._tick()
        self.assertEqual(bot.update_calls, 1)

    async def test_tick_failure_is_contained(self):
        bot = FakeBot()
        bot.run_oc_update = mock.AsyncMock(side_effect=RuntimeError("torn down"))
        scheduler = OCUpdateScheduler(bot)

        await scheduler._tick()

        bot.run_oc_update.assert_awaited_once()
        self.assertFalse(scheduler.is_running())


class RunOCUpdateTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.bot = OCWatchBot(db=Database(Path(self.tmp.name) / "ocwatch.db"))

    async def asyncTearDown(self):
        await self.bot.torn.close()
        self.tmp.cleanup()

    async def test_presence_follows_completed_cycle(self):
        plan = _plan(4)
        self.bot.oc_service.run_update = mock.AsyncMock(return_value=plan)
        with mock.patch("ocbot.bot.update_presence", new=mock.AsyncMock()) as presence:
            result = await self.bot.run_oc_update()

        self.assertIs(result, plan)
        presence.assert_awaited_once_with(self.bot, plan)

    async def test_skipped_or_first_import_leaves_presence(self):
        with mock.patch("ocbot.bot.update_presence", new=mock.AsyncMock()) as presence:
            self.bot.oc_service.run_update = mock.AsyncMock(return_value=None)
            await self.bot.run_oc_update()
            self.bot.oc_service.run_update = mock.AsyncMock(return_value=_plan(1, first_import=True))
            await self.bot.run_oc_update()

        presence.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
