from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from journal_insights.normalize import CheckIn, FinanceEntry, Goal, Person
from journal_insights.nudges import build_nudges, prioritize_nudges, relevance_score, rule_based_nudges

NOW = datetime(2024, 6, 10, 12, tzinfo=timezone.utc)
STAMP = int(NOW.timestamp() * 1000)


def _check_in(mood: str, days_ago: int) -> CheckIn:
    at = NOW - timedelta(days=days_ago)
    return CheckIn(f"c{days_ago}", "u1", mood, 5, 7, 0, "", at)


def _goal(status: str, target: datetime | None) -> Goal:
    return Goal("g", "u1", "Goal", "", status, 0, "", "medium", target, NOW, NOW)


def _person(sentiment: str) -> Person:
    return Person("p", "u1", "Someone", "friend", sentiment, NOW)


def _finance(priority: str) -> FinanceEntry:
    return FinanceEntry("f", "u1", 10, "x", "expense", priority, NOW, NOW)


def _rules(**kwargs):
    data = {"check_ins": [], "goals": [], "people": [], "finance_entries": [], "life_areas": None, "now": NOW}
    data.update(kwargs)
    return rule_based_nudges(**data)


class RuleTests(unittest.TestCase):
    def test_mood_rule_reads_three_newest(self) -> None:
        # newest three are sad; older happy ones are ignored
        check_ins = [_check_in("😢", 0), _check_in("😞", 1), _check_in("😞", 2)] + [_check_in("😊", d) for d in range(3, 9)]
        [nudge] = _rules(check_ins=check_ins)
        self.assertEqual(nudge["id"], f"wellness-mood-{STAMP}")
        self.assertEqual(nudge["priority"], "high")
        self.assertEqual(nudge["timing"], "now")

        happy_now = [_check_in("😊", 0), _check_in("😊", 1), _check_in("😊", 2), _check_in("😢", 3)]
        self.assertEqual(_rules(check_ins=happy_now), [])

    def test_overdue_goals(self) -> None:
        goals = [
            _goal("pending", NOW - timedelta(days=2)),
            _goal("in-progress", NOW - timedelta(days=1)),
            _goal("completed", NOW - timedelta(days=1)),
            _goal("pending", NOW + timedelta(days=1)),
            _goal("pending", None),
        ]
        [nudge] = _rules(goals=goals)
        self.assertEqual(nudge["message"], "You have 2 overdue goals. Consider reviewing and adjusting them.")

    def test_relationships_and_finance(self) -> None:
        out = _rules(
            people=[_person("negative"), _person("negative"), _person("positive")],
            finance_entries=[_finance("high")] * 4,
        )
        self.assertEqual([n["type"] for n in out], ["relationships", "finance"])
        self.assertEqual(_rules(finance_entries=[_finance("high")] * 3), [])

    def test_life_balance_uses_first_low_area(self) -> None:
        areas = [
            {"id": "career", "name": "Career", "currentScore": 7},
            {"id": "health", "name": "Health", "currentScore": 4},
            {"id": "finances", "name": "Finances", "currentScore": 2},
            {"id": "fun", "currentScore": None},
        ]
        [nudge] = _rules(life_areas=areas)
        self.assertEqual(nudge["title"], "Focus on Health")
        self.assertEqual(nudge["id"], f"life-balance-Health-{STAMP}")
        self.assertIn("(4/10)", nudge["message"])


class RankingTests(unittest.TestCase):
    def test_relevance_score(self) -> None:
        nudge = {"priority": "high", "timing": "now", "actionable": True, "actions": [{"label": "x"}]}
        self.assertEqual(relevance_score(nudge, has_entries=True, has_check_ins=True, has_goals=False), 70)
        self.assertEqual(relevance_score({}, has_entries=False, has_check_ins=False, has_goals=False), 0)

    def test_prioritize_sorts_and_caps(self) -> None:
        nudges = [{"id": str(i), "priority": "low"} for i in range(12)] + [{"id": "top", "priority": "high"}]
        out = prioritize_nudges(nudges, has_entries=False, has_check_ins=False, has_goals=False)
        self.assertEqual(len(out), 10)
        self.assertEqual(out[0]["id"], "top")
        self.assertEqual([n["id"] for n in out[1:4]], ["0", "1", "2"])

    def test_build_nudges_summary(self) -> None:
        out = build_nudges(
            entry_count=3,
            check_ins=[_check_in("😢", 0)],
            goals=[_goal("pending", NOW - timedelta(days=1))],
            people=[_person("negative")],
            finance_entries=[],
            now=NOW,
        )
        self.assertEqual([n["type"] for n in out["nudges"]], ["wellness", "goals", "relationships"])
        self.assertEqual(out["nudges"][0]["relevanceScore"], 30 + 20 + 15 + 10 + 5)
        self.assertEqual(out["summary"], {
            "totalNudges": 3,
            "highPriority": 2,
            "mediumPriority": 1,
            "lowPriority": 0,
            "categories": ["emotional", "productivity", "social"],
        })

    def test_build_nudges_without_data(self) -> None:
        out = build_nudges(entry_count=0, check_ins=[], goals=[], people=[], finance_entries=[], now=NOW)
        self.assertEqual(out["nudges"], [])
        self.assertEqual(out["summary"]["totalNudges"], 0)


if __name__ == "__main__":
    unittest.main()
