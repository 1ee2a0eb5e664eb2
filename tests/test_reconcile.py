from __future__ import annotations

import unittest

from ocbot.models import FactionMember, MemberRecord
from ocbot.services.oc.reconcile import (
    build_alert_text,
    is_alert_due,
    plan_update,
    reconcile_member,
    render_summary,
)

NOW = 1_700_000_000
DAY = 86400


def _fetched(member_id: int, name: str, in_oc: bool, last_action: int = NOW - 60) -> FactionMember:
    return FactionMember(
        id=member_id,
        name=name,
        is_in_oc=in_oc,
        last_action_status="Online",
        last_action_timestamp=last_action,
    )


def _stored(member_id: int, name: str, in_oc: bool, since=None, tally: int = 0) -> MemberRecord:
    return MemberRecord(
        id=member_id,
        name=name,
        last_action_timestamp=NOW - 600,
        last_action_status="Offline",
        is_in_oc=in_oc,
        not_in_oc_since=since,
        fuckup_tally=tally,
    )


class ReconcileMemberTests(unittest.TestCase):
    def test_out_and_unmarked_starts_clock(self):
        row = reconcile_member(_stored(1, "A", True), _fetched(1, "A", False), NOW)
        self.assertEqual(row.not_in_oc_since, NOW)

    def test_out_and_marked_keeps_clock(self):
        row = reconcile_member(_stored(1, "A", False, since=NOW - 5000), _fetched(1, "A", False), NOW)
        self.assertEqual(row.not_in_oc_since, NOW - 5000)

    def test_in_clears_clock(self):
        row = reconcile_member(_stored(1, "A", False, since=NOW - 5000), _fetched(1, "A", True), NOW)
        self.assertIsNone(row.not_in_oc_since)

    def test_unknown_member_out_starts_clock(self):
        row = reconcile_member(None, _fetched(9, "New", False), NOW)
        self.assertEqual(row.not_in_oc_since, NOW)
        self.assertEqual(row.fuckup_tally, 0)

    def test_refreshes_fields_and_keeps_tally(self):
        row = reconcile_member(_stored(1, "Old", False, since=NOW - 10, tally=3), _fetched(1, "New", False), NOW)
        self.assertEqual(row.name, "New")
        self.assertEqual(row.last_action_status, "Online")
        self.assertEqual(row.last_action_timestamp, NOW - 60)
        self.assertEqual(row.fuckup_tally, 3)

    def test_repeated_out_ticks_never_move_clock(self):
        stored = {1: _stored(1, "A", True)}
        since = None
        for tick in range(5):
            plan = plan_update(stored, [_fetched(1, "A", False)], {}, NOW + tick * 60)
            row = plan.members[0]
            if since is None:
                since = row.not_in_oc_since
            self.assertEqual(row.not_in_oc_since, since)
            stored = {1: row}
        self.assertEqual(since, NOW)


class FirstImportTests(unittest.TestCase):
    def test_empty_store_imports_without_summary_or_alerts(self):
        fetched = [_fetched(1, "A", True), _fetched(2, "B", False)]
        plan = plan_update({}, fetched, {}, NOW)

        self.assertTrue(plan.first_import)
        self.assertIsNone(plan.summary)
        self.assertEqual(plan.alerts, [])
        by_id = {m.id: m for m in plan.members}
        self.assertIsNone(by_id[1].not_in_oc_since)
        self.assertEqual(by_id[2].not_in_oc_since, NOW)


class AlertDueTests(unittest.TestCase):
    def test_threshold(self):
        self.assertFalse(is_alert_due(DAY - 1, None, NOW))
        self.assertTrue(is_alert_due(DAY, None, NOW))

    def test_cooldown(self):
        self.assertFalse(is_alert_due(2 * DAY, NOW - DAY + 1, NOW))
        self.assertTrue(is_alert_due(2 * DAY, NOW - DAY, NOW))

    def test_plan_alerts_exactly_once_per_cooldown(self):
        stored = {1: _stored(1, "Slacker", False, since=NOW - DAY)}
        fetched = [_fetched(1, "Slacker", False)]

        plan = plan_update(stored, fetched, {}, NOW)
        self.assertEqual([a.member_id for a in plan.alerts], [1])

        last_alerts = {1: NOW}
        for offset in (60, 3600, DAY - 1):
            plan = plan_update(stored, fetched, last_alerts, NOW + offset)
            self.assertEqual(plan.alerts, [], f"unexpected alert at +{offset}")

        plan = plan_update(stored, fetched, last_alerts, NOW + DAY)
        self.assertEqual(len(plan.alerts), 1)

    def test_alert_text(self):
        self.assertEqual(
            build_alert_text("Bob"),
            "⚠️ <@&everyone> Bob has not been in an OC for 24h! "
            "React ✅ to increment their tally, ❌ to ignore.",
        )


class SummaryTests(unittest.TestCase):
    def test_summary_format(self):
        stored = {
            1: _stored(1, "Alice", False, since=NOW - 3661),
            2: _stored(2, "Bob", True),
        }
        fetched = [_fetched(1, "Alice", False, last_action=NOW - 59), _fetched(2, "Bob", True)]
        plan = plan_update(stored, fetched, {}, NOW)

        self.assertEqual(
            plan.summary,
            "**Faction OC Status**\n"
            "Total: 2\n"
            "In OC: 1\n"
            "Not in OC: 1\n"
            "\n"
            "**Not in OC:**\n"
            "• Alice (Not in OC: 1h 1m, Last action: 0m)\n"
            "\n"
            "Last updated: <t:1700000000:R>\n"
            "Next update in: <t:1700000040:R>",
        )

    def test_everyone_in_oc(self):
        stored = {1: _stored(1, "A", True)}
        plan = plan_update(stored, [_fetched(1, "A", True)], {}, NOW)
        self.assertIn("**Not in OC:**\nNone!\n\nLast updated", plan.summary)
        self.assertEqual(plan.not_in_oc, 0)

    def test_longest_out_first(self):
        stored = {
            1: _stored(1, "Recent", False, since=NOW - 60),
            2: _stored(2, "Oldest", False, since=NOW - 7200),
            3: _stored(3, "Middle", False, since=NOW - 3600),
        }
        fetched = [_fetched(i, stored[i].name, False) for i in (1, 2, 3)]
        plan = plan_update(stored, fetched, {}, NOW)
        self.assertEqual([e.name for e in plan.out_of_oc], ["Oldest", "Middle", "Recent"])

    def test_departed_members_are_not_listed(self):
        stored = {
            1: _stored(1, "Stays", False, since=NOW - 60),
            2: _stored(2, "Left", False, since=NOW - 60),
        }
        plan = plan_update(stored, [_fetched(1, "Stays", False)], {}, NOW)
        self.assertEqual(plan.total, 1)
        self.assertNotIn("Left", plan.summary)

    def test_long_list_is_truncated(self):
        stored = {
            i: _stored(i, f"Member{i:03d}-with-a-rather-long-name", False, since=NOW - i * 60)
            for i in range(1, 101)
        }
        fetched = [_fetched(i, stored[i].name, False) for i in stored]
        plan = plan_update(stored, fetched, {}, NOW)

        self.assertLessEqual(len(plan.summary), 2000)
        self.assertTrue(plan.summary.endswith("Next update in: <t:1700000040:R>"))

        shown = [line for line in plan.summary.splitlines() if line.startswith("• Member")]
        overflow = [line for line in plan.summary.splitlines() if line.startswith("• ...and")]
        self.assertEqual(len(overflow), 1)
        self.assertEqual(overflow[0], f"• ...and {100 - len(shown)} more")
        self.assertTrue(shown[0].startswith("• Member100"))

    def test_render_fits_without_truncation(self):
        text = render_summary(0, 0, 0, [], NOW)
        self.assertNotIn("more", text)


if __name__ == "__main__":
    unittest.main()
