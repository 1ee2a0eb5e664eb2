from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from ocbot.core.config import CONFIG_KEY_API_KEY, CONFIG_KEY_UPDATE_CHANNEL
from ocbot.models import MemberRecord
from ocbot.services.database import Database, DatabaseUnavailableError


def _record(member_id: int, name: str = "A", in_oc: bool = False, since=1000, tally: int = 0) -> MemberRecord:
    return MemberRecord(
        id=member_id,
        name=name,
        last_action_timestamp=900,
        last_action_status="Idle",
        is_in_oc=in_oc,
        not_in_oc_since=since,
        fuckup_tally=tally,
    )


class DatabaseTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db = Database(Path(self.tmp.name) / "nested" / "ocwatch.db")

    def tearDown(self):
        self.tmp.cleanup()

    def test_creates_tables_in_wal_mode(self):
        health = self.db.health_check()
        self.assertTrue(health["healthy"])
        self.assertGreaterEqual(health["tables"], 3)

    def test_config_upsert(self):
        self.assertIsNone(self.db.get_config(CONFIG_KEY_API_KEY))
        self.db.set_config(CONFIG_KEY_API_KEY, "first")
        self.db.set_config(CONFIG_KEY_API_KEY, "second")
        self.assertEqual(self.db.get_config(CONFIG_KEY_API_KEY), "second")

    def test_config_values_are_text(self):
        self.db.set_config(CONFIG_KEY_UPDATE_CHANNEL, 123456789012345678)
        self.assertEqual(self.db.get_config(CONFIG_KEY_UPDATE_CHANNEL), "123456789012345678")

    def test_upsert_members_roundtrip(self):
        written = self.db.upsert_members([_record(1, "A"), _record(2, "B", in_oc=True, since=None)])
        self.assertEqual(written, 2)
        self.assertEqual(self.db.count_members(), 2)

        members = self.db.get_members()
        self.assertEqual(set(members), {1, 2})
        self.assertTrue(members[2].is_in_oc)
        self.assertIsNone(members[2].not_in_oc_since)
        self.assertEqual(members[1].not_in_oc_since, 1000)

    def test_upsert_never_resets_tally(self):
        self.db.upsert_members([_record(1)])
        self.db.increment_tally(1)
        self.db.increment_tally(1)

        self.db.upsert_members([_record(1, name="Renamed", in_oc=True, since=None, tally=0)])

        member = self.db.get_member(1)
        self.assertEqual(member.name, "Renamed")
        self.assertEqual(member.fuckup_tally, 2)

    def test_upsert_empty_is_noop(self):
        self.assertEqual(self.db.upsert_members([]), 0)

    def test_increment_unknown_member_is_noop(self):
        self.db.increment_tally(404)
        self.assertIsNone(self.db.get_member(404))

    def test_alert_cursor(self):
        self.assertIsNone(self.db.get_last_alert(1))
        self.db.record_alert(1, 5000)
        self.db.record_alert(1, 9000)
        self.db.record_alert(2, 7000)
        self.assertEqual(self.db.get_last_alert(1), 9000)
        self.assertEqual(self.db.get_last_alerts(), {1: 9000, 2: 7000})

    def test_reopen_keeps_data(self):
        self.db.set_config(CONFIG_KEY_API_KEY, "kept")
        reopened = Database(Path(self.db.db_path))
        self.assertEqual(reopened.get_config(CONFIG_KEY_API_KEY), "kept")


class CorruptDatabaseTests(unittest.TestCase):
    def test_garbage_file_is_marked_unavailable(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.db"
            path.write_bytes(b"this is not a sqlite database" * 100)

            db = Database(path)

            self.assertFalse(db.is_healthy)
            self.assertIsNotNone(db.corruption_reason)
            with self.assertRaises(DatabaseUnavailableError):
                db.get_config(CONFIG_KEY_API_KEY)


if __name__ == "__main__":
    unittest.main()
