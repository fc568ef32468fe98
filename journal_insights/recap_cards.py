"""Weekly recap cards.

Each builder returns ``None`` when its category has nothing to show, and
``build_recap_cards`` drops those. Text matching uses the entry's effective
text (transcription, then content).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from .aggregate import last_most_frequent
from .keywords import GROWTH_KEYWORDS, LABEL_MOOD_SCALE, PLACE_KEYWORDS, MoodScale
from .normalize import CheckIn, FinanceEntry, Goal, JournalEntry, Person, Task, check_in_to_json
from .trends import RelativeTrend
from .windows import day_key, display_date

MOOD_CARD_TREND = RelativeTrend()


@dataclass(frozen=True)
class RecapCard:
    id: str
    category: str
    title: str
    subtitle: str
    content: str
    insights: list[str] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "subtitle": self.subtitle,
            "content": self.content,
            "insights": list(self.insights),
            "highlights": list(self.highlights),
            "data": self.data,
        }


def _present(*items: str | None) -> list[str]:
    return [i for i in items if i]


def _s(n: int, word: str, plural: str | None = None) -> str:
    return word if n == 1 else (plural or word + "s")


def _amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def most_active_day(timestamps: Iterable[datetime]) -> str:
    counts: dict[str, int] = {}
    for ts in timestamps:
        key = day_key(ts)
        counts[key] = counts.get(key, 0) + 1
    if not counts:
        return "No data"
    return display_date(last_most_frequent(counts))


# -- people -------------------------------------------------------------------

def _people_content(most: dict[str, Any] | None, new_count: int, total: int, unique: int) -> str:
    text = ""
    if most:
        text += f"This week, you talked about {most['name']} the most in your journal entries. "
    if new_count > 0:
        text += f"You also added {new_count} new {_s(new_count, 'person', 'persons')} to your network. "
    text += f"In total, you mentioned {total} people across {unique} different connections. "
    if unique > 3:
        text += "You're maintaining a diverse social network!"
    elif unique > 0:
        text += "You're building meaningful relationships."
    return text


def people_card(
    people: Sequence[Person],
    entries: Sequence[JournalEntry],
    start: datetime,
    end: datetime,
) -> RecapCard | None:
    if not people:
        return None

    mentions: list[dict[str, Any]] = []
    for p in people:
        name = p.name.lower()
        count = sum(1 for e in entries if name and name in e.text.lower())
        if count > 0:
            mentions.append({
                "id": p.id,
                "name": p.name,
                "relationship": p.relationship,
                "sentiment": p.sentiment,
                "mentions": count,
            })
    mentions.sort(key=lambda m: m["mentions"], reverse=True)
    new_people = [p for p in people if start <= p.created_at <= end]
    if not mentions and not new_people:
        return None

    most = mentions[0] if mentions else None
    total = sum(m["mentions"] for m in mentions)
    n_new = len(new_people)
    return RecapCard(
        id="people-card",
        category="people",
        title=f"You talked about {most['name']} the most" if most else "Your social connections",
        subtitle="People & Relationships",
        content=_people_content(most, n_new, total, len(mentions)),
        insights=_present(
            f"You added {n_new} new {_s(n_new, 'person', 'persons')} to your network" if n_new else None,
            f"You mentioned {total} people in your journal entries" if total else None,
            f"You interacted with {len(mentions)} different people this week" if len(mentions) > 1 else None,
        ),
        highlights=_present(
            f"{most['name']} was mentioned {most['mentions']} times" if most else None,
            f"New connection: {new_people[0].name}" if new_people else None,
            f"Most active day for social interactions: {most_active_day(e.created_at for e in entries)}"
            if mentions else None,
        ),
        data={
            "peopleMentions": mentions,
            "newPeople": [{"id": p.id, "name": p.name, "relationship": p.relationship} for p in new_people],
            "totalMentions": total,
        },
    )


# -- mood ---------------------------------------------------------------------

def _mood_content(avg: float, best: dict[str, Any] | None, trend: str) -> str:
    if avg >= 7:
        text = f"You had a great week emotionally! Your average mood was {avg:.1f}/10. "
    elif avg >= 5:
        text = f"You had a balanced week with an average mood of {avg:.1f}/10. "
    else:
        text = f"You had some challenging moments this week, with an average mood of {avg:.1f}/10. "
    if best:
        text += f"Your best day was {best['date']} when you felt {best['mood']}. "
    if trend == "improving":
        text += "Your mood trended upward throughout the week!"
    elif trend == "declining":
        text += "You faced some emotional challenges this week."
    else:
        text += "Your mood remained relatively stable."
    return text


def mood_card(
    check_ins: Sequence[CheckIn],
    mood_scale: MoodScale = LABEL_MOOD_SCALE,
    trend: RelativeTrend = MOOD_CARD_TREND,
) -> RecapCard | None:
    if not check_ins:
        return None

    scored = [(c, mood_scale.score(c.mood)) for c in check_ins]
    scores = [s for _, s in scored]
    avg = sum(scores) / len(scores)
    best_score, worst_score = max(scores), min(scores)
    best_ci = next(c for c, s in scored if s == best_score)
    worst_ci = next(c for c, s in scored if s == worst_score)
    best = {"date": display_date(best_ci.created_at), "mood": best_ci.mood}
    direction = trend.direction(scores)
    mood_counts: dict[str, int] = {}
    for c in check_ins:
        mood_counts[c.mood] = mood_counts.get(c.mood, 0) + 1
    dominant = last_most_frequent(mood_counts)

    return RecapCard(
        id="mood-card",
        category="mood",
        title=f"Your mood was mostly {dominant} this week",
        subtitle="Emotional Journey",
        content=_mood_content(avg, best, direction),
        insights=[
            f"Your average mood was {avg:.1f}/10 this week",
            f"You felt your best on {best['date']}",
            f"You had a challenging day on {display_date(worst_ci.created_at)}",
            f"You completed {len(check_ins)} mood check-ins",
        ],
        highlights=[
            f"Best mood: {best_score}/10",
            f"Mood trend: {direction}",
            f"Most frequent mood: {dominant}",
        ],
        data={
            "moodScores": [dict(check_in_to_json(c), score=s) for c, s in scored],
            "avgMood": avg,
            "dominantMood": dominant,
            "moodTrend": direction,
        },
    )


# -- places -------------------------------------------------------------------

def extract_places(entries: Sequence[JournalEntry], keywords: Sequence[str] = PLACE_KEYWORDS) -> list[dict[str, Any]]:
    """Per place keyword, how many entries mention it; most frequent first."""
    counts: dict[str, int] = {}
    for e in entries:
        text = e.text.lower()
        for kw in keywords:
            if kw in text:
                counts[kw] = counts.get(kw, 0) + 1
    places = [{"name": name, "count": n} for name, n in counts.items()]
    places.sort(key=lambda p: p["count"], reverse=True)
    return places


def _places_content(top: dict[str, Any], total: int) -> str:
    text = f"This week, you visited {top['name']} the most ({top['count']} times). "
    if total > 3:
        text += f"You were quite active, visiting {total} different places. "
    elif total > 1:
        text += f"You visited {total} different places this week. "
    if top["count"] > 3:
        text += f"It seems like {top['name']} is becoming a regular part of your routine!"
    else:
        text += "You're exploring different places and activities."
    return text


def places_card(entries: Sequence[JournalEntry]) -> RecapCard | None:
    if not entries:
        return None
    places = extract_places(entries)
    if not places:
        return None
    top, total = places[0], len(places)
    active = most_active_day(e.created_at for e in entries)
    return RecapCard(
        id="places-card",
        category="places",
        title=f"You visited {top['name']} the most",
        subtitle="Places & Activities",
        content=_places_content(top, total),
        insights=[
            f"You mentioned {total} different places this week",
            f"Your most frequent location was {top['name']} ({top['count']} times)",
            f"You were most active on {active}",
        ],
        highlights=[
            f"Favorite place: {top['name']}",
            f"Total places visited: {total}",
            f"Most active day: {active}",
        ],
        data={"places": places, "mostFrequentPlace": top, "totalPlaces": total},
    )


# -- growth -------------------------------------------------------------------

def _entries_matching(entries: Sequence[JournalEntry], category: str) -> list[JournalEntry]:
    return [e for e in entries if GROWTH_KEYWORDS.matches_category(e.text, category)]


def growth_mindset(entries: Sequence[JournalEntry]) -> str:
    mentions = len(_entries_matching(entries, "mindset"))
    if mentions > 5:
        return "Strong"
    if mentions > 2:
        return "Moderate"
    return "Developing"


def _growth_content(learning: int, challenges: int, growth: int) -> str:
    text = ""
    if learning:
        text += f"You had {learning} learning {_s(learning, 'moment')} this week. "
    if challenges:
        text += f"You overcame {challenges} {_s(challenges, 'challenge')}. "
    if growth:
        text += f"You used {growth} growth-related words in your reflections. "
    total = learning + challenges + growth
    if total > 5:
        text += "You're showing excellent personal development this week!"
    elif total > 2:
        text += "You're making steady progress in your personal growth."
    else:
        text += "Every small step counts towards your growth."
    return text


def growth_card(entries: Sequence[JournalEntry]) -> RecapCard | None:
    if not entries:
        return None
    learning = _entries_matching(entries, "learning")
    challenges = _entries_matching(entries, "challenges")
    growth = _entries_matching(entries, "growth")
    total = len(learning) + len(challenges) + len(growth)
    if total == 0:
        return None
    return RecapCard(
        id="growth-card",
        category="growth",
        title=f"You grew in {total} different ways this week",
        subtitle="Personal Development",
        content=_growth_content(len(learning), len(challenges), len(growth)),
        insights=_present(
            f"You had {len(learning)} learning moments" if learning else None,
            f"You overcame {len(challenges)} challenges" if challenges else None,
            f"You used {len(growth)} growth-related words" if growth else None,
        ),
        highlights=_present(
            f"Learned: {learning[0].text[:50]}..." if learning else None,
            f"Overcame: {challenges[0].text[:50]}..." if challenges else None,
            f"Growth mindset: {growth_mindset(entries)}",
        ),
        data={
            "learningMoments": [e.id for e in learning],
            "challengesOvercome": [e.id for e in challenges],
            "growthKeywords": [e.id for e in growth],
            "totalGrowth": total,
        },
    )


# -- goals --------------------------------------------------------------------

def _goals_content(done_tasks: int, tasks: int, done_goals: int, goals: int, task_rate: float, goal_rate: float) -> str:
    text = ""
    if done_tasks:
        text += f"You completed {done_tasks} out of {tasks} tasks this week. "
    if done_goals:
        text += f"You achieved {done_goals} out of {goals} goals. "
    if task_rate >= 80:
        text += f"You had an excellent task completion rate of {task_rate:.1f}%! "
    elif task_rate >= 60:
        text += f"You had a good task completion rate of {task_rate:.1f}%. "
    elif tasks:
        text += f"You completed {task_rate:.1f}% of your tasks. "
    if goal_rate >= 80:
        text += "You're making excellent progress on your goals!"
    elif goal_rate >= 60:
        text += "You're making steady progress on your goals."
    elif goals:
        text += "Keep working towards your goals!"
    return text


def goals_card(goals: Sequence[Goal], tasks: Sequence[Task]) -> RecapCard | None:
    total_tasks, total_goals = len(tasks), len(goals)
    if total_tasks == 0 and total_goals == 0:
        return None
    done_tasks = sum(1 for t in tasks if t.status == "completed")
    done_goals = sum(1 for g in goals if g.status == "completed")
    task_rate = done_tasks / total_tasks * 100 if total_tasks else 0.0
    goal_rate = done_goals / total_goals * 100 if total_goals else 0.0
    return RecapCard(
        id="goals-card",
        category="goals",
        title=f"You completed {done_tasks} tasks and {done_goals} goals",
        subtitle="Achievements & Progress",
        content=_goals_content(done_tasks, total_tasks, done_goals, total_goals, task_rate, goal_rate),
        insights=_present(
            f"Task completion rate: {task_rate:.1f}%" if total_tasks else None,
            f"Goal completion rate: {goal_rate:.1f}%" if total_goals else None,
            f"You made progress on {total_tasks + total_goals} items this week",
        ),
        highlights=_present(
            f"Completed {done_tasks} tasks" if done_tasks else None,
            f"Achieved {done_goals} goals" if done_goals else None,
            f"Most productive day: {most_active_day(t.created_at for t in tasks)}",
        ),
        data={
            "completedTasks": done_tasks,
            "totalTasks": total_tasks,
            "completedGoals": done_goals,
            "totalGoals": total_goals,
            "taskCompletionRate": task_rate,
            "goalCompletionRate": goal_rate,
        },
    )


# -- finance ------------------------------------------------------------------

def savings_rate(income: float, savings: float) -> float:
    return savings / income * 100 if income > 0 else 0.0


def _finance_content(income: float, expenses: float, savings: float, rate: float) -> str:
    if savings >= 0:
        text = f"Great job! You saved ${savings:.2f} this week. "
    else:
        text = f"You spent ${abs(savings):.2f} more than you earned this week. "
    if income > 0:
        text += f"Your total income was ${income:.2f}. "
    if expenses > 0:
        text += f"Your total expenses were ${expenses:.2f}. "
    if rate >= 20:
        text += f"You're maintaining an excellent savings rate of {rate:.1f}%!"
    elif rate >= 10:
        text += f"You're building good savings habits with a {rate:.1f}% savings rate."
    elif rate > 0:
        text += f"You're starting to build your savings with a {rate:.1f}% rate."
    else:
        text += "Consider reviewing your spending patterns."
    return text


def finance_card(finance_entries: Sequence[FinanceEntry]) -> RecapCard | None:
    if not finance_entries:
        return None
    income = sum(f.amount for f in finance_entries if f.category == "income")
    expense_rows = [f for f in finance_entries if f.category == "expense"]
    expenses = sum(f.amount for f in expense_rows)
    savings = income - expenses
    rate = savings_rate(income, savings)
    top = max(expense_rows, key=lambda f: f.amount) if expense_rows else None
    top_json = (
        {
            "id": top.id,
            "amount": top.amount,
            "description": top.description,
            "category": top.category,
            "date": top.date.isoformat(),
        }
        if top else None
    )
    n = len(finance_entries)
    return RecapCard(
        id="finance-card",
        category="finance",
        title=(
            f"You saved ${savings:.2f} this week" if savings >= 0
            else f"You spent ${abs(savings):.2f} more than you earned"
        ),
        subtitle="Financial Journey",
        content=_finance_content(income, expenses, savings, rate),
        insights=_present(
            f"Total income: ${income:.2f}",
            f"Total expenses: ${expenses:.2f}",
            f"Savings rate: {rate:.1f}%" if rate > 0 else None,
            f"You tracked {n} financial entries",
        ),
        highlights=_present(
            f"Saved ${savings:.2f}" if savings >= 0 else f"Overspent by ${abs(savings):.2f}",
            f"Biggest expense: {top.description} (${_amount(top.amount)})" if top else None,
            f"Financial tracking: {n} entries",
        ),
        data={
            "income": income,
            "expenses": expenses,
            "savings": savings,
            "savingsRate": rate,
            "topExpense": top_json,
            "totalEntries": n,
        },
    )


def build_recap_cards(
    *,
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    people: Sequence[Person],
    finance_entries: Sequence[FinanceEntry],
    tasks: Sequence[Task],
    goals: Sequence[Goal],
    start: datetime,
    end: datetime,
) -> list[RecapCard]:
    """Cards in display order. Inputs other than ``people`` and ``goals`` are
    expected to be filtered to ``[start, end]`` already."""
    cards = [
        people_card(people, entries, start, end),
        mood_card(check_ins),
        places_card(entries),
        growth_card(entries),
        goals_card(goals, tasks),
        finance_card(finance_entries),
    ]
    return [c for c in cards if c is not None]
