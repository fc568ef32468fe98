"""Threshold rules that turn aggregates into insight records.

Every rule is evaluated independently; several may fire for the same input and
none suppresses another. Rules over an empty collection do not fire.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .keywords import EMOJI_MOOD_SCALE
from .normalize import CheckIn, FinanceEntry, Goal, JournalEntry, Person, Task, goal_to_json


@dataclass(frozen=True)
class Insight:
    type: str
    title: str
    message: str
    priority: str
    actionable: bool | None = None
    data: Any = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "priority": self.priority,
        }
        if self.actionable is not None:
            out["actionable"] = self.actionable
        if self.data is not None:
            out["data"] = self.data
        return out


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n > 1 else ''}"


def correlation_insights(analysis: Mapping[str, Any]) -> list[Insight]:
    out: list[Insight] = []

    moods = analysis.get("moodCorrelations") or []
    high_mood = sum(1 for c in moods if c["mood"] > 7)
    low_mood = sum(1 for c in moods if c["mood"] < 4)
    if high_mood > low_mood:
        out.append(Insight(
            "mood_trend",
            "Positive Mood Trend",
            f"You've had {high_mood} high-mood days vs {low_mood} low-mood days. "
            "Your overall mood trend is positive.",
            "low",
        ))
    elif low_mood > high_mood:
        out.append(Insight(
            "mood_trend",
            "Mood Improvement Opportunity",
            f"You've had {low_mood} low-mood days vs {high_mood} high-mood days. "
            "Consider activities that boost your mood.",
            "high",
        ))

    energies = analysis.get("energyCorrelations") or []
    high_energy = sum(1 for c in energies if c["energy"] > 7)
    low_energy = sum(1 for c in energies if c["energy"] < 4)
    if high_energy > low_energy:
        out.append(Insight(
            "energy_trend",
            "Good Energy Levels",
            f"You tend to journal more when your energy is high "
            f"({high_energy} vs {low_energy} low-energy entries).",
            "low",
        ))

    sleeps = analysis.get("sleepCorrelations") or []
    good_sleep = sum(1 for c in sleeps if c["previousDaySleep"] >= 7)
    poor_sleep = sum(1 for c in sleeps if c["previousDaySleep"] < 6)
    if poor_sleep > good_sleep:
        out.append(Insight(
            "sleep_trend",
            "Sleep Quality Impact",
            f"Poor sleep ({poor_sleep} days) seems to affect your journaling more "
            f"than good sleep ({good_sleep} days).",
            "medium",
        ))
    return out


def recap_insights(
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
) -> list[Insight]:
    out: list[Insight] = []

    if entries:
        avg_length = _mean([e.length for e in entries])
        if avg_length > 500:
            out.append(Insight(
                "writing",
                "Deep Reflection",
                "You engaged in detailed journaling this period, showing a commitment to self-reflection.",
                "medium",
            ))
        elif avg_length < 200:
            out.append(Insight(
                "writing",
                "Concise Expression",
                "Your entries were brief but focused, indicating efficient self-expression.",
                "low",
            ))

    if check_ins:
        avg_mood = _mean([EMOJI_MOOD_SCALE.score(c.mood) for c in check_ins])
        if avg_mood > 7:
            out.append(Insight(
                "wellness",
                "Positive Outlook",
                "Your average mood was high, indicating good emotional well-being.",
                "positive",
            ))
        elif avg_mood < 4:
            out.append(Insight(
                "wellness",
                "Emotional Challenges",
                "You experienced lower mood levels, suggesting a need for self-care.",
                "high",
            ))

    active = [g for g in goals if g.status == "in-progress"]
    if active:
        avg_progress = _mean([g.progress for g in active])
        if avg_progress > 70:
            out.append(Insight(
                "goals",
                "Strong Progress",
                "You made excellent progress on your goals this period.",
                "positive",
            ))
        elif avg_progress < 30:
            out.append(Insight(
                "goals",
                "Goal Focus Needed",
                "Consider revisiting your goals and breaking them into smaller steps.",
                "medium",
            ))
    return out


def recap_recommendations(
    wellness: Mapping[str, Any],
    goal_summary: Mapping[str, Any],
    entry_count: int,
) -> list[dict[str, str]]:
    out: list[dict[str, str]] = []
    if wellness["averageMood"] < 5:
        out.append({
            "type": "wellness",
            "title": "Boost Your Mood",
            "description": "Consider activities that bring you joy, such as spending time with "
                           "loved ones or pursuing hobbies.",
            "priority": "high",
        })
    # completionRate is a percentage
    if goal_summary["completionRate"] < 30:
        out.append({
            "type": "productivity",
            "title": "Goal Setting Review",
            "description": "Review your goals and break them into smaller, more manageable tasks.",
            "priority": "medium",
        })
    if entry_count < 3:
        out.append({
            "type": "reflection",
            "title": "Increase Journaling",
            "description": "Try to journal more regularly to better track your thoughts and progress.",
            "priority": "medium",
        })
    return out


# -- enhanced insights (dashboard) -------------------------------------------

def life_area_insights(life_areas: Sequence[Mapping[str, Any]], priorities: Sequence[Any]) -> list[Insight]:
    out = [Insight(
        "priority_areas",
        "Focus Areas",
        f"Your top priorities are: {', '.join(str(p) for p in priorities[:3])}",
        "high",
        actionable=True,
    )]
    low = [
        a for a in life_areas
        if isinstance(a.get("currentScore"), (int, float)) and a["currentScore"] < 6
    ]
    if low:
        out.append(Insight(
            "low_scoring",
            "Areas Needing Attention",
            f"{', '.join(str(a.get('name', '')) for a in low)} are scoring below 6/10",
            "high",
            actionable=True,
        ))
    return out


def goal_insights(goals: Sequence[Goal], now: datetime) -> list[Insight]:
    if not goals:
        return []
    out: list[Insight] = []
    overdue = [g for g in goals if g.target_date is not None and g.target_date < now and g.status != "completed"]
    high = [g for g in goals if g.priority == "high" and g.status != "completed"]
    completion = sum(1 for g in goals if g.status == "completed") / len(goals) * 100

    if overdue:
        out.append(Insight(
            "overdue", "Overdue Goals", f"You have {_plural(len(overdue), 'overdue goal')}",
            "high", actionable=True, data=[goal_to_json(g) for g in overdue],
        ))
    if high:
        out.append(Insight(
            "high_priority", "High Priority Goals", f"Focus on {_plural(len(high), 'high-priority goal')}",
            "medium", actionable=True, data=[goal_to_json(g) for g in high],
        ))
    if completion < 50:
        out.append(Insight(
            "low_completion",
            "Goal Completion",
            f"Your goal completion rate is {completion:.1f}%. Consider breaking down larger goals.",
            "medium",
            actionable=True,
        ))
    return out


def wellness_insights(check_ins: Sequence[CheckIn], recent: int = 7) -> list[Insight]:
    """Rules over the ``recent`` newest check-ins (input is newest first)."""
    window = list(check_ins[:recent])
    if not window:
        return []
    out: list[Insight] = []
    avg_mood = _mean([EMOJI_MOOD_SCALE.score(c.mood) for c in window])
    avg_energy = _mean([c.energy for c in window])
    avg_sleep = _mean([c.sleep_total for c in window])
    if avg_mood < 6:
        out.append(Insight(
            "low_mood",
            "Mood Trend",
            "Your average mood has been lower than usual. Consider activities that boost your mood.",
            "high",
            actionable=True,
        ))
    if avg_energy < 6:
        out.append(Insight(
            "low_energy",
            "Energy Levels",
            "Your energy levels have been low. Focus on sleep, nutrition, and movement.",
            "medium",
            actionable=True,
        ))
    if avg_sleep < 7:
        out.append(Insight(
            "sleep",
            "Sleep Quality",
            f"You're averaging {avg_sleep:.1f} hours of sleep. Aim for 7-9 hours for optimal health.",
            "medium",
            actionable=True,
        ))
    return out


def relationship_insights(people: Sequence[Person]) -> list[Insight]:
    positive = sum(1 for p in people if p.sentiment == "positive")
    negative = sum(1 for p in people if p.sentiment == "negative")
    if negative > positive:
        return [Insight(
            "relationship_balance",
            "Relationship Balance",
            "You have more challenging relationships than positive ones. Consider nurturing positive connections.",
            "medium",
            actionable=True,
        )]
    return []


def finance_insights(finance_entries: Sequence[FinanceEntry]) -> list[Insight]:
    if not finance_entries:
        return []
    expenses = sum(f.amount for f in finance_entries if f.category == "expense")
    income = sum(f.amount for f in finance_entries if f.category == "income")
    if expenses > income * 0.9:
        return [Insight(
            "spending_high",
            "High Spending",
            "Your expenses are high relative to income. Consider reviewing your spending patterns.",
            "medium",
            actionable=True,
        )]
    return []


def productivity_insights(tasks: Sequence[Task], now: datetime) -> list[Insight]:
    if not tasks:
        return []
    out: list[Insight] = []
    completed = sum(1 for t in tasks if t.status == "completed")
    overdue = [t for t in tasks if t.deadline is not None and t.deadline < now and t.status != "completed"]
    rate = completed / len(tasks) * 100
    if overdue:
        out.append(Insight(
            "overdue_tasks",
            "Overdue Tasks",
            f"You have {_plural(len(overdue), 'overdue task')}. Consider prioritizing or delegating.",
            "high",
            actionable=True,
        ))
    if rate < 60:
        out.append(Insight(
            "low_productivity",
            "Task Completion",
            f"Your task completion rate is {rate:.1f}%. Try breaking tasks into smaller steps.",
            "medium",
            actionable=True,
        ))
    return out


def _trait_score(traits: Mapping[str, Any], name: str) -> float | None:
    trait = traits.get(name)
    if isinstance(trait, Mapping) and isinstance(trait.get("score"), (int, float)):
        return float(trait["score"])
    return None


def personality_trait_insights(traits: Mapping[str, Any]) -> list[Insight]:
    out: list[Insight] = []
    neuroticism = _trait_score(traits, "neuroticism")
    extraversion = _trait_score(traits, "extraversion")
    if neuroticism is not None and neuroticism > 7:
        out.append(Insight(
            "stress_management",
            "Stress Management",
            "You may benefit from stress management techniques and mindfulness practices.",
            "medium",
            actionable=True,
        ))
    if extraversion is not None and extraversion < 4:
        out.append(Insight(
            "social_connections",
            "Social Connections",
            "Consider reaching out to friends or joining social activities to boost your well-being.",
            "low",
            actionable=True,
        ))
    return out


def priority_insights(groups: Sequence[Sequence[Insight]], high: int = 3, medium: int = 2) -> list[Insight]:
    flat = [i for group in groups for i in group if i.actionable]
    return (
        [i for i in flat if i.priority == "high"][:high]
        + [i for i in flat if i.priority == "medium"][:medium]
    )


def enhanced_insights(
    *,
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
    people: Sequence[Person],
    finance_entries: Sequence[FinanceEntry],
    tasks: Sequence[Task],
    life_areas: Sequence[Mapping[str, Any]] | None = None,
    priorities: Sequence[Any] = (),
    traits: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Dashboard insights grouped by area, plus a short ``priority`` list.

    ``life_areas`` is ``None`` when the user has no Wheel-of-Life record and
    ``traits`` is ``None`` without a personality record; those groups are then
    empty. ``check_ins`` must be newest first.
    """
    now = now or datetime.now(timezone.utc)
    groups = {
        "lifeAreas": life_area_insights(life_areas, priorities) if life_areas is not None else [],
        "goals": goal_insights(goals, now),
        "wellness": wellness_insights(check_ins),
        "relationships": relationship_insights(people),
        "finance": finance_insights(finance_entries),
        "productivity": productivity_insights(tasks, now),
        "personality": personality_trait_insights(traits) if traits is not None else [],
    }
    out: dict[str, Any] = {
        "priority": [i.as_dict() for i in priority_insights(list(groups.values()))],
    }
    out.update({name: [i.as_dict() for i in items] for name, items in groups.items()})
    return out
