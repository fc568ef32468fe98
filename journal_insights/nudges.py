from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .keywords import EMOJI_MOOD_SCALE
from .normalize import CheckIn, FinanceEntry, Goal, Person

MAX_NUDGES = 10


def _actions(*pairs: tuple[str, str]) -> list[dict[str, str]]:
    return [{"label": label, "impact": impact} for label, impact in pairs]


def rule_based_nudges(
    *,
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
    people: Sequence[Person],
    finance_entries: Sequence[FinanceEntry],
    life_areas: Sequence[Mapping[str, Any]] | None,
    now: datetime,
) -> list[dict[str, Any]]:
    """``check_ins`` are newest first; the mood rule reads the three newest."""
    stamp = int(now.timestamp() * 1000)
    out: list[dict[str, Any]] = []

    recent = list(check_ins[:3])
    if recent:
        avg_mood = sum(EMOJI_MOOD_SCALE.score(c.mood) for c in recent) / len(recent)
        if avg_mood < 5:
            out.append({
                "id": f"wellness-mood-{stamp}",
                "type": "wellness",
                "category": "emotional",
                "title": "Boost Your Mood",
                "message": "Your recent mood has been lower than usual. "
                           "Consider activities that typically lift your spirits.",
                "priority": "high",
                "actionable": True,
                "actions": _actions(("Take a walk", "medium"), ("Call a friend", "high"),
                                    ("Practice gratitude", "medium")),
                "timing": "now",
                "frequency": "daily",
                "lifeArea": "emotional-wellbeing",
            })

    overdue = [g for g in goals if g.target_date is not None and g.target_date < now and g.status != "completed"]
    if overdue:
        n = len(overdue)
        out.append({
            "id": f"goals-overdue-{stamp}",
            "type": "goals",
            "category": "productivity",
            "title": "Overdue Goals",
            "message": f"You have {n} overdue goal{'s' if n > 1 else ''}. Consider reviewing and adjusting them.",
            "priority": "high",
            "actionable": True,
            "actions": _actions(("Review goals", "high"), ("Break down tasks", "medium"),
                                ("Set new deadlines", "medium")),
            "timing": "today",
            "frequency": "weekly",
            "lifeArea": "goals",
        })

    positive = sum(1 for p in people if p.sentiment == "positive")
    negative = sum(1 for p in people if p.sentiment == "negative")
    if negative > positive:
        out.append({
            "id": f"relationships-balance-{stamp}",
            "type": "relationships",
            "category": "social",
            "title": "Relationship Balance",
            "message": "You have more challenging relationships than positive ones. "
                       "Consider nurturing your positive connections.",
            "priority": "medium",
            "actionable": True,
            "actions": _actions(("Reach out to positive people", "high"), ("Address conflicts", "medium"),
                                ("Set boundaries", "medium")),
            "timing": "this-week",
            "frequency": "weekly",
            "lifeArea": "relationships",
        })

    if sum(1 for f in finance_entries if f.priority == "high") > 3:
        out.append({
            "id": f"finance-priorities-{stamp}",
            "type": "finance",
            "category": "financial",
            "title": "Financial Priorities",
            "message": "You have several high-priority financial items. Consider reviewing your spending priorities.",
            "priority": "medium",
            "actionable": True,
            "actions": _actions(("Review expenses", "high"), ("Create budget", "medium"),
                                ("Set savings goals", "medium")),
            "timing": "this-week",
            "frequency": "monthly",
            "lifeArea": "finance",
        })

    low = [
        a for a in (life_areas or [])
        if isinstance(a.get("currentScore"), (int, float)) and a["currentScore"] < 6
    ]
    if low:
        area = low[0]
        name = area.get("name", area.get("id", ""))
        out.append({
            "id": f"life-balance-{name}-{stamp}",
            "type": "life-balance",
            "category": "holistic",
            "title": f"Focus on {name}",
            "message": f"Your {name} area is scoring low ({area['currentScore']}/10). "
                       "Consider dedicating more attention to this area.",
            "priority": "high",
            "actionable": True,
            "actions": _actions(("Set specific goals", "high"), ("Schedule time for this area", "medium"),
                                ("Seek resources or support", "medium")),
            "timing": "this-week",
            "frequency": "weekly",
            "lifeArea": name,
        })
    return out


def relevance_score(nudge: Mapping[str, Any], *, has_entries: bool, has_check_ins: bool, has_goals: bool) -> int:
    score = 10 * sum((has_entries, has_check_ins, has_goals))
    if nudge.get("priority") == "high":
        score += 20
    if nudge.get("timing") == "now":
        score += 15
    if nudge.get("timing") == "today":
        score += 10
    if nudge.get("actionable"):
        score += 10
    if nudge.get("actions"):
        score += 5
    return score


def prioritize_nudges(
    nudges: Sequence[Mapping[str, Any]],
    *,
    has_entries: bool,
    has_check_ins: bool,
    has_goals: bool,
    limit: int = MAX_NUDGES,
) -> list[dict[str, Any]]:
    scored = [
        dict(n, relevanceScore=relevance_score(
            n, has_entries=has_entries, has_check_ins=has_check_ins, has_goals=has_goals,
        ))
        for n in nudges
    ]
    # stable: equal scores keep rule order
    scored.sort(key=lambda n: n["relevanceScore"], reverse=True)
    return scored[:limit]


def build_nudges(
    *,
    entry_count: int,
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
    people: Sequence[Person],
    finance_entries: Sequence[FinanceEntry],
    life_areas: Sequence[Mapping[str, Any]] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    nudges = prioritize_nudges(
        rule_based_nudges(
            check_ins=check_ins,
            goals=goals,
            people=people,
            finance_entries=finance_entries,
            life_areas=life_areas,
            now=now,
        ),
        has_entries=entry_count > 0,
        has_check_ins=bool(check_ins),
        has_goals=bool(goals),
    )
    categories: list[str] = []
    for n in nudges:
        if n["category"] not in categories:
            categories.append(n["category"])
    return {
        "nudges": nudges,
        "summary": {
            "totalNudges": len(nudges),
            "highPriority": sum(1 for n in nudges if n["priority"] == "high"),
            "mediumPriority": sum(1 for n in nudges if n["priority"] == "medium"),
            "lowPriority": sum(1 for n in nudges if n["priority"] == "low"),
            "categories": categories,
        },
    }
