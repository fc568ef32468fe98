from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from journal_insights.life_areas import (
    DEFAULT_LIFE_AREAS,
    analyze_life_area,
    apply_area_update,
    area_keywords,
    default_area,
    entry_frequency,
    key_themes,
    most_active_month,
    sentiment_trend,
)
from journal_insights.normalize import JournalEntry

NOW = datetime(2024, 6, 10, 12, tzinfo=timezone.utc)


def _entry(id: str, text: str, days_ago: float) -> JournalEntry:
    at = NOW - timedelta(days=days_ago)
    return JournalEntry(id, "u1", text, "", "full-analysis", "draft", at, at)


class HelperTests(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(len(DEFAULT_LIFE_AREAS), 8)
        self.assertEqual(default_area("career")["name"], "Career & Work")
        self.assertIsNone(default_area("astrology"))

    def test_finances_alias_uses_finance_keywords(self) -> None:
        self.assertIn("budget", area_keywords("finances"))
        self.assertEqual(area_keywords("environment"), ())

    def test_sentiment_trend(self) -> None:
        self.assertEqual(sentiment_trend([1]), "stable")
        self.assertEqual(sentiment_trend([0, 0, 2, 2, 2]), "improving")
        self.assertEqual(sentiment_trend([2, 2, -1, -1, -1]), "declining")
        # only recent scores: compared with themselves
        self.assertEqual(sentiment_trend([1, 3]), "stable")

    def test_entry_frequency(self) -> None:
        self.assertEqual(entry_frequency([], NOW), "No entries")
        daily = [_entry(str(i), "x", i + 1) for i in range(4)]
        self.assertEqual(entry_frequency(daily, NOW), "Daily")
        self.assertEqual(entry_frequency([_entry("a", "x", 20)], NOW), "Occasionally")
        self.assertEqual(entry_frequency([_entry("a", "x", 0)], NOW), "Occasionally")

    def test_key_themes_and_month(self) -> None:
        entries = [_entry("a", "work meeting", 1), _entry("b", "work again", 40)]
        self.assertEqual(key_themes(entries, ("meeting", "work")), ["work", "meeting"])
        self.assertEqual(most_active_month(entries), "June 2024")
        self.assertEqual(most_active_month([]), "No entries")


class AnalyzeTests(unittest.TestCase):
    def test_related_entries_and_sentiment(self) -> None:
        entries = [
            _entry("old", "Work was stressed and tired", 3),
            _entry("new", "Good meeting at work, I feel happy", 0),
            _entry("other", "Went hiking", 1),
        ]
        area = {"id": "career", "name": "Career & Work"}
        out = analyze_life_area(entries, "career", area, NOW)
        self.assertEqual(out["journalAnalysis"]["totalEntries"], 2)
        self.assertEqual([e["id"] for e in out["relatedEntries"]], ["new", "old"])
        self.assertEqual([e["sentiment"] for e in out["relatedEntries"]], [1, -2])
        self.assertEqual(out["journalAnalysis"]["averageSentiment"], -0.5)
        self.assertEqual(out["keyThemes"], ["work", "meeting"])
        self.assertEqual(out["sentimentTrend"], "stable")
        self.assertEqual(out["insights"][0]["type"], "negative")
        self.assertEqual(out["insights"][0]["source"], "analysis")
        self.assertEqual(out["insights"][0]["lifeAreaId"], "career")
        self.assertEqual(out["recommendations"][0], "Focus on positive aspects of Career & Work in your journaling")

    def test_repeated_words_count_once(self) -> None:
        entries = [_entry("a", "work was happy happy happy but sad", 0)]
        out = analyze_life_area(entries, "career", {"id": "career", "name": "Career & Work"}, NOW)
        self.assertEqual(out["relatedEntries"][0]["sentiment"], 0)
        self.assertEqual(out["journalAnalysis"]["averageSentiment"], 0)

    def test_trend_compares_newest_entries_with_older_ones(self) -> None:
        entries = [
            _entry("n1", "work happy", 0),
            _entry("o1", "work stressed", 10),
            _entry("n2", "work happy", 1),
            _entry("o2", "work stressed", 9),
            _entry("n3", "work happy", 2),
        ]
        out = analyze_life_area(entries, "career", {"id": "career", "name": "Career & Work"}, NOW)
        self.assertEqual(out["sentimentTrend"], "improving")

    def test_progress_history_covers_seven_days(self) -> None:
        out = analyze_life_area([_entry("a", "gym workout, happy", 0)], "health", {"id": "health", "name": "Health"}, NOW)
        history = out["progressHistory"]
        self.assertEqual(len(history), 7)
        self.assertEqual(history[-1]["notes"], "1 entries")
        # 5 + 1 * 0.5 + 1 * 0.5 = 6
        self.assertEqual(history[-1]["score"], 6)
        # 5 + 0.5 = 5.5 rounds half up
        self.assertEqual(history[0]["score"], 6)
        self.assertEqual(history[0]["notes"], "No entries")

    def test_no_related_entries(self) -> None:
        out = analyze_life_area([], "spirituality", {"id": "spirituality", "name": "Spirituality"}, NOW)
        self.assertEqual(len(out["insights"]), 1)
        self.assertEqual(out["insights"][0]["type"], "neutral")
        self.assertEqual(out["sentimentTrend"], "stable")
        self.assertEqual(out["journalAnalysis"]["mostActiveMonth"], "No entries")
        self.assertEqual(out["recommendations"], ["Journal more frequently about Spirituality for better tracking"])


class UpdateTests(unittest.TestCase):
    def test_update_keeps_falsy_values(self) -> None:
        areas = [{"id": "career", "currentScore": 5, "targetScore": 8, "description": "old"}]
        updated = apply_area_update(areas, "career", current_score=7, target_score=None, description="")
        self.assertEqual(updated[0], {"id": "career", "currentScore": 7, "targetScore": 8, "description": "old"})
        self.assertEqual(areas[0]["currentScore"], 5)

    def test_missing_area(self) -> None:
        with self.assertRaises(LookupError):
            apply_area_update([{"id": "career"}], "health", current_score=5)


if __name__ == "__main__":
    unittest.main()
