"""Keyword-based Big Five estimates and how they move over time.

Scores are ``clamp(1, 10, 5 + (raising - lowering) * weight)`` where the counts
are how many of a trait's words occur in the entry text.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any, Mapping, Sequence

from .content import substring_sentiment
from .keywords import CONTENT_THEMES, EMOJI_MOOD_SCALE, LIFE_EVENT_KEYWORDS, TRAIT_RULES
from .normalize import CheckIn, JournalEntry
from .trends import ThresholdTrend
from .windows import day_key, week_start

TRAITS = tuple(TRAIT_RULES)

TRAIT_TREND = ThresholdTrend(delta=0.5, up="increasing", down="decreasing")

LIFE_EVENT_IMPACT = {
    "career": (0.6, "Career-related event"),
    "relationship": (0.8, "Relationship event"),
    "health": (0.7, "Health-related event"),
    "personal_growth": (0.5, "Personal growth event"),
}

IDEAL_PROFILE = {
    "extraversion": 7.0,
    "neuroticism": 3.0,
    "openness": 8.0,
    "conscientiousness": 7.0,
    "agreeableness": 8.0,
}

GROWTH_SUGGESTIONS = {
    "extraversion": [
        "Try joining a social group or club",
        "Practice initiating conversations",
        "Attend social events regularly",
    ],
    "neuroticism": [
        "Practice mindfulness and meditation",
        "Develop stress management techniques",
        "Consider therapy or counseling",
    ],
    "openness": [
        "Try new hobbies or activities",
        "Read diverse books and articles",
        "Travel to new places",
    ],
    "conscientiousness": [
        "Set clear goals and deadlines",
        "Create daily routines and schedules",
        "Practice time management skills",
    ],
    "agreeableness": [
        "Practice active listening",
        "Show empathy in conversations",
        "Volunteer or help others",
    ],
}

GRANULARITIES = ("daily", "weekly", "monthly")

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _clamp(value: float, low: float = 1.0, high: float = 10.0) -> float:
    return max(low, min(high, value))


def variance(values: Sequence[float]) -> float:
    """Population variance; 0 for an empty series."""
    if not values:
        return 0.0
    m = _mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def trait_scores(text: str) -> dict[str, float]:
    lowered = text.lower()
    out = {}
    for trait, rule in TRAIT_RULES.items():
        up = sum(1 for w in rule.raising if w in lowered)
        down = sum(1 for w in rule.lowering if w in lowered)
        out[trait] = _clamp(5 + (up - down) * rule.weight)
    return out


def confidence(length: int) -> float:
    return min(1.0, max(0.1, length / 1000))


def trait_context(text: str, trait: str, limit: int = 200) -> str:
    """Up to two sentences mentioning the trait's words."""
    words = TRAIT_RULES[trait].raising
    sentences = [s for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 10]
    relevant = [s for s in sentences if any(w in s.lower() for w in words)]
    return " ".join(relevant[:2])[:limit] + "..."


def trait_evolution(entries: Sequence[JournalEntry]) -> dict[str, list[dict[str, Any]]]:
    """Per trait, one point per entry in the given order.

    With more than one point each point also carries the series ``trend`` and
    its ``change`` from the previous point.
    """
    series: dict[str, list[dict[str, Any]]] = {t: [] for t in TRAITS}
    for e in entries:
        scores = trait_scores(e.text)
        for trait in TRAITS:
            series[trait].append({
                "date": e.created_at.isoformat(),
                "score": scores[trait],
                "confidence": confidence(e.length),
                "context": trait_context(e.text, trait),
            })
    for trait, points in series.items():
        if len(points) > 1:
            direction = TRAIT_TREND.direction([p["score"] for p in points])
            prev = None
            for p in points:
                p["trend"] = direction
                p["change"] = p["score"] - prev if prev is not None else 0.0
                prev = p["score"]
    return series


def personality_impact(event_type: str, impact: float, text: str) -> dict[str, float]:
    out = {t: 0.0 for t in TRAITS}
    negative = substring_sentiment(text) == "negative"
    if event_type == "career":
        out["conscientiousness"] += impact * 0.3
        out["neuroticism"] += impact * 0.2 if negative else -impact * 0.1
    elif event_type == "relationship":
        out["agreeableness"] += impact * 0.2
        out["extraversion"] += impact * 0.2
        out["neuroticism"] += impact * 0.3 if negative else -impact * 0.2
    elif event_type == "health":
        out["neuroticism"] += impact * 0.4 if negative else -impact * 0.2
        out["conscientiousness"] += impact * 0.2
    elif event_type == "personal_growth":
        out["openness"] += impact * 0.3
        out["conscientiousness"] += impact * 0.2
    return out


def life_events(entries: Sequence[JournalEntry]) -> list[dict[str, Any]]:
    events = []
    for e in entries:
        for kind in LIFE_EVENT_KEYWORDS.matches(e.text):
            impact, description = LIFE_EVENT_IMPACT[kind]
            events.append({
                "date": e.created_at,
                "type": kind,
                "impact": impact,
                "description": description,
                "personalityImpact": personality_impact(kind, impact, e.text),
            })
    events.sort(key=lambda ev: ev["date"])
    return [dict(ev, date=ev["date"].isoformat()) for ev in events]


def trait_stability(evolution: Mapping[str, Sequence[Mapping[str, Any]]]) -> dict[str, dict[str, float]]:
    out = {}
    for trait, points in evolution.items():
        scores = [p["score"] for p in points]
        out[trait] = {
            "variance": variance(scores),
            "mean": _mean(scores),
            "range": max(scores) - min(scores) if scores else 0.0,
        }
    return out


# -- timeline -----------------------------------------------------------------

def _period_metrics(entries: Sequence[JournalEntry], check_ins: Sequence[CheckIn]) -> dict[str, Any]:
    themes: list[str] = []
    for e in entries:
        for t in CONTENT_THEMES.matches(e.text):
            if t not in themes:
                themes.append(t)
    return {
        "entryCount": len(entries),
        "totalWords": sum(e.length for e in entries),
        "avgMood": _mean([EMOJI_MOOD_SCALE.score(c.mood) for c in check_ins]),
        "avgEnergy": _mean([c.energy for c in check_ins]),
        "themes": themes,
    }


def personality_snapshot(m: Mapping[str, Any]) -> dict[str, float]:
    return {
        "extraversion": 5 + (m["avgMood"] - 5) * 0.2 + (0.5 if m["entryCount"] > 3 else 0),
        "neuroticism": 5 + (5 - m["avgMood"]) * 0.3 + (0.3 if m["avgEnergy"] < 5 else 0),
        "openness": 5 + (0.5 if len(m["themes"]) > 2 else 0) + (0.3 if m["totalWords"] > 1000 else 0),
        "conscientiousness": 5 + (0.4 if m["entryCount"] > 2 else 0) + (0.3 if m["totalWords"] > 500 else 0),
        "agreeableness": 5 + (0.3 if m["avgMood"] > 6 else 0) + (0.4 if "relationships" in m["themes"] else 0),
    }


def _month_start(dt: datetime) -> datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _next_month(dt: datetime) -> datetime:
    return dt.replace(year=dt.year + 1, month=1) if dt.month == 12 else dt.replace(month=dt.month + 1)


def timeline(
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    granularity: str = "weekly",
) -> list[dict[str, Any]]:
    ordered = sorted(entries, key=lambda e: e.created_at)
    buckets: list[tuple[datetime, datetime, list[JournalEntry]]] = []

    if granularity == "daily":
        for e in ordered:
            start = e.created_at.replace(hour=0, minute=0, second=0, microsecond=0)
            buckets.append((start, start + timedelta(days=1), [e]))
    else:
        groups: dict[datetime, list[JournalEntry]] = {}
        for e in ordered:
            if granularity == "monthly":
                start = _month_start(e.created_at)
            else:
                ws = week_start(e.created_at)
                start = e.created_at.replace(year=ws.year, month=ws.month, day=ws.day,
                                             hour=0, minute=0, second=0, microsecond=0)
            groups.setdefault(start, []).append(e)
        for start, group in groups.items():
            end = _next_month(start) if granularity == "monthly" else start + timedelta(days=7)
            buckets.append((start, end, group))

    out = []
    for index, (start, end, group) in enumerate(buckets):
        if granularity == "daily":
            in_period = [c for c in check_ins if day_key(c.created_at) == day_key(start)]
        else:
            in_period = [c for c in check_ins if start <= c.created_at < end]
        metrics = _period_metrics(group, in_period)
        out.append({
            "period": group[0].created_at.isoformat() if granularity == "daily" else start.date().isoformat(),
            "type": granularity,
            "index": index,
            "metrics": metrics,
            "personalitySnapshot": personality_snapshot(metrics),
        })
    return out


# -- insights and metrics -----------------------------------------------------

def _snapshot_mean(snapshot: Mapping[str, float]) -> float:
    return sum(snapshot.values()) / len(TRAITS)


def growth_patterns(points: Sequence[Mapping[str, Any]]) -> dict[str, int]:
    positive = negative = 0
    for prev, cur in zip(points, points[1:]):
        a = _snapshot_mean(prev["personalitySnapshot"])
        b = _snapshot_mean(cur["personalitySnapshot"])
        if b > a:
            positive += 1
        elif b < a:
            negative += 1
    return {"positiveGrowth": positive, "negativeGrowth": negative}


def personality_insights(
    evolution: Mapping[str, Sequence[Mapping[str, Any]]],
    points: Sequence[Mapping[str, Any]],
    events: Sequence[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for trait, stats in trait_stability(evolution).items():
        if stats["variance"] > 0.5:
            out.append({
                "type": "trait_volatility",
                "trait": trait,
                "message": f"Your {trait} shows significant variation, suggesting you're adapting "
                           "to changing circumstances.",
                "priority": "medium",
            })
        elif stats["variance"] < 0.1:
            out.append({
                "type": "trait_stability",
                "trait": trait,
                "message": f"Your {trait} remains remarkably stable, indicating a strong core personality trait.",
                "priority": "low",
            })

    growth = growth_patterns(points)
    if growth["positiveGrowth"] > growth["negativeGrowth"]:
        out.append({
            "type": "positive_evolution",
            "message": "Your personality shows positive evolution with increasing emotional maturity "
                       "and self-awareness.",
            "priority": "high",
        })

    significant = [ev for ev in events if ev["impact"] > 0.7]
    if significant:
        out.append({
            "type": "life_event_impact",
            "message": f"{len(significant)} significant life events have influenced your personality development.",
            "priority": "medium",
        })
    return out


def growth_areas(evolution: Mapping[str, Sequence[Mapping[str, Any]]]) -> list[dict[str, Any]]:
    out = []
    for trait, points in evolution.items():
        if not points:
            continue
        average = _mean([p["score"] for p in points])
        ideal = IDEAL_PROFILE[trait]
        gap = ideal - average
        if gap > 0.3:
            out.append({
                "trait": trait,
                "currentLevel": average,
                "idealLevel": ideal,
                "gap": gap,
                "suggestions": list(GROWTH_SUGGESTIONS[trait]),
            })
    return out


def stability_metrics(
    evolution: Mapping[str, Sequence[Mapping[str, Any]]],
    points: Sequence[Mapping[str, Any]],
    events: Sequence[Mapping[str, Any]],
) -> dict[str, Any]:
    variances = {t: variance([p["score"] for p in pts]) for t, pts in evolution.items()}
    growth_rate = 0.0
    if len(points) > 1:
        first = _snapshot_mean(points[0]["personalitySnapshot"])
        last = _snapshot_mean(points[-1]["personalitySnapshot"])
        growth_rate = (last - first) / 10
    adaptation = 0.0
    if events:
        adaptation = min(1.0, sum(1 for ev in events if ev["impact"] > 0.5) / 10)
    return {
        "overallStability": 1 - _mean(list(variances.values())),
        "traitStability": {t: 1 - v for t, v in variances.items()},
        "growthRate": growth_rate,
        "adaptationScore": adaptation,
    }


def build_personality_evolution(
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    granularity: str = "weekly",
) -> dict[str, Any]:
    if granularity not in GRANULARITIES:
        raise ValueError(f"unknown granularity: {granularity}")
    ordered = sorted(entries, key=lambda e: e.created_at)
    points = timeline(ordered, check_ins, granularity)
    evolution = trait_evolution(ordered)
    events = life_events(ordered)
    return {
        "timeline": points,
        "traitEvolution": evolution,
        "lifeEvents": events,
        "personalityInsights": personality_insights(evolution, points, events),
        "growthAreas": growth_areas(evolution),
        "stabilityMetrics": stability_metrics(evolution, points, events),
    }
