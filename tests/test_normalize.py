from __future__ import annotations

import unittest
from datetime import date, datetime, timezone

from journal_insights.normalize import (
    EPOCH,
    normalize_check_in,
    normalize_finance_entry,
    normalize_goal,
    normalize_journal_entry,
    normalize_many,
    normalize_task,
    parse_timestamp,
)
from journal_insights.windows import (
    day_key,
    display_date,
    previous_day_key,
    week_key,
    window_for_days,
    window_for_period,
    within,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class NormalizeTests(unittest.TestCase):
    def test_parse_timestamp_accepts_sqlite_and_z_suffix(self) -> None:
        self.assertEqual(parse_timestamp("2024-01-02 03:04:05"), _utc(2024, 1, 2, 3, 4, 5))
        self.assertEqual(parse_timestamp("2024-01-02T03:04:05Z"), _utc(2024, 1, 2, 3, 4, 5))
        self.assertEqual(parse_timestamp("2024-01-02T05:04:05+02:00"), _utc(2024, 1, 2, 3, 4, 5))
        self.assertIsNone(parse_timestamp("yesterday"))
        self.assertIsNone(parse_timestamp(None))

    def test_journal_entry_text_prefers_transcription(self) -> None:
        e = normalize_journal_entry({
            "id": "e1",
            "content": "typed",
            "transcription": "spoken words",
            "created_at": "2024-05-01T10:00:00Z",
        })
        self.assertEqual(e.text, "spoken words")
        self.assertEqual(e.length, 12)
        self.assertEqual(e.updated_at, e.created_at)

        typed = normalize_journal_entry({"id": "e2", "content": "typed", "transcription": None})
        self.assertEqual(typed.text, "typed")
        self.assertEqual(normalize_journal_entry({}).text, "")

    def test_unparseable_timestamp_becomes_epoch(self) -> None:
        e = normalize_journal_entry({"id": "e1", "created_at": "not a date"})
        self.assertEqual(e.created_at, EPOCH)

    def test_check_in_defaults_and_sleep_total(self) -> None:
        c = normalize_check_in({"id": "c1", "energy": "7", "sleep_hours": 7, "sleep_minutes": 30})
        self.assertEqual(c.mood, "neutral")
        self.assertEqual(c.energy, 7.0)
        self.assertAlmostEqual(c.sleep_total, 7.5)

        empty = normalize_check_in({"mood": "", "energy": None})
        self.assertEqual(empty.mood, "neutral")
        self.assertEqual(empty.energy, 0.0)

    def test_status_underscores_are_normalised(self) -> None:
        g = normalize_goal({"id": "g1", "status": "in_progress", "progress": "40"})
        self.assertEqual(g.status, "in-progress")
        self.assertEqual(g.progress, 40.0)
        self.assertIsNone(g.target_date)

        t = normalize_task({"id": "t1", "status": None})
        self.assertEqual(t.status, "pending")

    def test_finance_date_falls_back_to_created_at(self) -> None:
        f = normalize_finance_entry({"id": "f1", "amount": 12.5, "created_at": "2024-05-01T00:00:00Z"})
        self.assertEqual(f.date, _utc(2024, 5, 1))
        self.assertEqual(f.category, "expense")

    def test_normalize_many_keeps_order(self) -> None:
        rows = [{"id": "b"}, {"id": "a"}]
        self.assertEqual([g.id for g in normalize_many(rows, normalize_goal)], ["b", "a"])


class WindowTests(unittest.TestCase):
    def test_within_is_inclusive(self) -> None:
        start, end = _utc(2024, 5, 1), _utc(2024, 5, 8)
        entries = [
            normalize_journal_entry({"id": "before", "created_at": "2024-04-30T23:59:59Z"}),
            normalize_journal_entry({"id": "start", "created_at": "2024-05-01T00:00:00Z"}),
            normalize_journal_entry({"id": "end", "created_at": "2024-05-08T00:00:00Z"}),
            normalize_journal_entry({"id": "after", "created_at": "2024-05-08T00:00:01Z"}),
        ]
        self.assertEqual([e.id for e in within(entries, start, end)], ["start", "end"])

    def test_within_by_finance_date(self) -> None:
        f = normalize_finance_entry({"id": "f1", "date": "2024-05-03", "created_at": "2024-06-01"})
        self.assertEqual(len(within([f], _utc(2024, 5, 1), _utc(2024, 5, 8), key="date")), 1)
        self.assertEqual(within([f], _utc(2024, 5, 1), _utc(2024, 5, 8)), [])

    def test_windows(self) -> None:
        now = _utc(2024, 3, 31, 12)
        self.assertEqual(window_for_days(7, now), (_utc(2024, 3, 24, 12), now))
        self.assertEqual(window_for_period("weekly", now)[0], _utc(2024, 3, 24, 12))
        # February 2024 has 29 days
        self.assertEqual(window_for_period("monthly", now)[0], _utc(2024, 2, 29, 12))
        self.assertEqual(window_for_period("monthly", _utc(2024, 1, 15))[0], _utc(2023, 12, 15))

    def test_day_and_week_keys(self) -> None:
        self.assertEqual(day_key(_utc(2024, 10, 19, 23, 30)), "2024-10-19")
        self.assertEqual(previous_day_key(_utc(2024, 3, 1, 8)), "2024-02-29")
        # 2024-10-13 and 2024-10-20 are Sundays
        self.assertEqual(week_key(_utc(2024, 10, 13)), "2024-10-13")
        self.assertEqual(week_key(_utc(2024, 10, 19, 23, 59)), "2024-10-13")
        self.assertEqual(week_key(_utc(2024, 10, 20)), "2024-10-20")

    def test_display_date(self) -> None:
        self.assertEqual(display_date("2024-03-05"), "3/5/2024")
        self.assertEqual(display_date(date(2024, 12, 25)), "12/25/2024")


if __name__ == "__main__":
    unittest.main()
