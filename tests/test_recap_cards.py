from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from journal_insights.normalize import CheckIn, FinanceEntry, Goal, JournalEntry, Person, Task
from journal_insights.recap_cards import (
    build_recap_cards,
    extract_places,
    finance_card,
    goals_card,
    growth_card,
    growth_mindset,
    mood_card,
    most_active_day,
    people_card,
    places_card,
    savings_rate,
)

END = datetime(2024, 6, 8, 12, tzinfo=timezone.utc)
START = END - timedelta(days=7)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 6, day, hour, tzinfo=timezone.utc)


def _entry(id: str, text: str, at: datetime | None = None) -> JournalEntry:
    at = at or _at(5)
    return JournalEntry(id, "u1", text, "", "full-analysis", "draft", at, at)


def _check_in(mood: str, at: datetime) -> CheckIn:
    return CheckIn(f"c-{at.day}", "u1", mood, 5, 7, 0, "", at)


def _finance(id: str, amount: float, category: str, description: str = "x") -> FinanceEntry:
    return FinanceEntry(id, "u1", amount, description, category, "medium", _at(3), _at(3))


class PeopleCardTests(unittest.TestCase):
    def test_most_mentioned_person(self) -> None:
        people = [
            Person("p1", "u1", "Alice", "friend", "positive", _at(1) - timedelta(days=30)),
            Person("p2", "u1", "Bob", "colleague", "neutral", _at(6)),
        ]
        entries = [
            _entry("e1", "Lunch with alice", _at(4)),
            _entry("e2", "Alice and Bob came over", _at(4, 18)),
        ]
        card = people_card(people, entries, START, END)
        self.assertEqual(card.title, "You talked about Alice the most")
        self.assertEqual(card.data["totalMentions"], 3)
        self.assertEqual([p["name"] for p in card.data["newPeople"]], ["Bob"])
        self.assertIn("Alice was mentioned 2 times", card.highlights)
        self.assertIn("Most active day for social interactions: 6/4/2024", card.highlights)
        self.assertIn("You added 1 new person to your network", card.insights)

    def test_no_people_or_no_activity(self) -> None:
        self.assertIsNone(people_card([], [], START, END))
        old = Person("p1", "u1", "Carol", "", "neutral", _at(1) - timedelta(days=30))
        self.assertIsNone(people_card([old], [_entry("e1", "quiet week")], START, END))


class MoodCardTests(unittest.TestCase):
    def test_label_scale_and_trend(self) -> None:
        check_ins = [
            _check_in("sad", _at(2)),
            _check_in("sad", _at(3)),
            _check_in("Happy", _at(4)),
            _check_in("excited", _at(5)),
        ]
        card = mood_card(check_ins)
        self.assertEqual(card.data["avgMood"], 4.75)
        self.assertEqual(card.data["moodTrend"], "improving")
        self.assertEqual(card.data["dominantMood"], "sad")
        self.assertIn("You felt your best on 6/5/2024", card.insights)
        self.assertIn("You had a challenging day on 6/2/2024", card.insights)
        self.assertIn("Best mood: 9/10", card.highlights)

    def test_dominant_mood_tie_goes_to_the_later_mood(self) -> None:
        card = mood_card([_check_in("sad", _at(2)), _check_in("happy", _at(3))])
        self.assertEqual(card.data["dominantMood"], "happy")
        self.assertEqual(card.title, "Your mood was mostly happy this week")
        self.assertEqual(card.data["moodScores"][2]["score"], 8)

    def test_angry_scores_zero(self) -> None:
        card = mood_card([_check_in("angry", _at(2))])
        self.assertEqual(card.data["avgMood"], 0.0)
        self.assertEqual(card.data["moodTrend"], "stable")

    def test_empty(self) -> None:
        self.assertIsNone(mood_card([]))


class PlacesAndGrowthTests(unittest.TestCase):
    def test_places(self) -> None:
        entries = [
            _entry("e1", "Gym then home", _at(3)),
            _entry("e2", "Back at the gym", _at(4)),
        ]
        self.assertEqual(extract_places(entries)[0], {"name": "gym", "count": 2})
        card = places_card(entries)
        self.assertEqual(card.title, "You visited gym the most")
        self.assertEqual(card.data["totalPlaces"], 2)
        self.assertIsNone(places_card([_entry("e3", "nothing here")]))

    def test_growth(self) -> None:
        entries = [
            _entry("e1", "I learned a new recipe"),
            _entry("e2", "It was difficult but I solved it"),
            _entry("e3", "Trying to improve"),
        ]
        card = growth_card(entries)
        self.assertEqual(card.data["learningMoments"], ["e1"])
        self.assertEqual(card.data["challengesOvercome"], ["e2"])
        self.assertEqual(card.data["growthKeywords"], ["e3"])
        self.assertEqual(card.data["totalGrowth"], 3)
        self.assertEqual(growth_mindset(entries), "Developing")
        self.assertIsNone(growth_card([_entry("e4", "ordinary day")]))


class GoalsAndFinanceTests(unittest.TestCase):
    def test_goals_card(self) -> None:
        tasks = [
            Task("t1", "u1", "a", "completed", "medium", None, _at(3), _at(3)),
            Task("t2", "u1", "b", "pending", "medium", None, _at(3), _at(3)),
        ]
        goals = [Goal("g1", "u1", "g", "", "completed", 100, "", "medium", None, _at(1), _at(1))]
        card = goals_card(goals, tasks)
        self.assertEqual(card.title, "You completed 1 tasks and 1 goals")
        self.assertEqual(card.data["taskCompletionRate"], 50.0)
        self.assertEqual(card.data["goalCompletionRate"], 100.0)
        self.assertIn("Most productive day: 6/3/2024", card.highlights)
        self.assertIsNone(goals_card([], []))

    def test_finance_card(self) -> None:
        card = finance_card([
            _finance("f1", 1000, "income"),
            _finance("f2", 300, "expense", "Rent"),
            _finance("f3", 50, "expense", "Food"),
        ])
        self.assertEqual(card.title, "You saved $650.00 this week")
        self.assertEqual(card.data["savingsRate"], 65.0)
        self.assertEqual(card.data["topExpense"]["description"], "Rent")
        self.assertIn("Biggest expense: Rent ($300)", card.highlights)

    def test_finance_without_income(self) -> None:
        card = finance_card([_finance("f1", 40, "expense")])
        self.assertEqual(card.data["savingsRate"], 0.0)
        self.assertEqual(card.title, "You spent $40.00 more than you earned")
        self.assertEqual(savings_rate(0, -40), 0.0)
        self.assertIsNone(finance_card([]))


class BuildCardsTests(unittest.TestCase):
    def test_empty_inputs_produce_no_cards(self) -> None:
        cards = build_recap_cards(
            entries=[], check_ins=[], people=[], finance_entries=[], tasks=[], goals=[], start=START, end=END,
        )
        self.assertEqual(cards, [])

    def test_card_order(self) -> None:
        cards = build_recap_cards(
            entries=[_entry("e1", "Learned something at the cafe")],
            check_ins=[_check_in("happy", _at(4))],
            people=[],
            finance_entries=[_finance("f1", 10, "income")],
            tasks=[],
            goals=[],
            start=START,
            end=END,
        )
        self.assertEqual([c.id for c in cards], ["mood-card", "places-card", "growth-card", "finance-card"])
        self.assertEqual(cards[0].as_dict()["category"], "mood")

    def test_most_active_day(self) -> None:
        self.assertEqual(most_active_day([]), "No data")
        self.assertEqual(most_active_day([_at(2), _at(3), _at(3, 20)]), "6/3/2024")
        # tie: the later day wins
        self.assertEqual(most_active_day([_at(3), _at(2)]), "6/2/2024")
        self.assertEqual(most_active_day([_at(2), _at(3)]), "6/3/2024")


if __name__ == "__main__":
    unittest.main()
