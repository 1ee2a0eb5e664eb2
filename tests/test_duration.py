from __future__ import annotations

import unittest

from ocbot.utils.duration import format_duration, format_since, next_minute_boundary


class FormatDurationTests(unittest.TestCase):
    def test_under_a_minute_is_zero_minutes(self):
        self.assertEqual(format_duration(0), "0m")
        self.assertEqual(format_duration(59), "0m")

    def test_hours_segment_shown_when_nonzero(self):
        self.assertEqual(format_duration(3600), "1h 0m")
        self.assertEqual(format_duration(3661), "1h 1m")
        self.assertEqual(format_duration(90061), "25h 1m")

    def test_minutes_only(self):
        self.assertEqual(format_duration(125), "2m")

    def test_missing_and_negative(self):
        self.assertEqual(format_duration(None), "0m")
        self.assertEqual(format_duration(-300), "0m")


class FormatSinceTests(unittest.TestCase):
    def test_absent_timestamp(self):
        self.assertEqual(format_since(None, 1_700_000_000), "0m")
        self.assertEqual(format_since(0, 1_700_000_000), "0m")

    def test_span_to_now(self):
        self.assertEqual(format_since(1_700_000_000 - 7260, 1_700_000_000), "2h 1m")


class NextMinuteBoundaryTests(unittest.TestCase):
    def test_mid_minute(self):
        self.assertEqual(next_minute_boundary(1_700_000_000), 1_700_000_040)

    def test_exact_boundary_moves_a_full_minute(self):
        self.assertEqual(next_minute_boundary(1_699_999_980), 1_700_000_040)


if __name__ == "__main__":
    unittest.main()
