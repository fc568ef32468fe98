"""Wheel-of-Life area detail: keyword-matched entries, token sentiment and a
simulated 7-day progress history."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

from .content import token_sentiment_score
from .keywords import LIFE_AREA_ALIASES, LIFE_AREA_KEYWORDS
from .normalize import JournalEntry
from .windows import day_key, month_label

DEFAULT_LIFE_AREAS: list[dict[str, str]] = [
    {"id": "career", "name": "Career & Work", "description": "Job satisfaction, professional growth",
     "color": "#3B82F6", "icon": "💼"},
    {"id": "finances", "name": "Finances", "description": "Financial security, money management",
     "color": "#10B981", "icon": "💰"},
    {"id": "health", "name": "Health & Fitness", "description": "Physical health, exercise, nutrition",
     "color": "#EF4444", "icon": "🏃‍♂️"},
    {"id": "relationships", "name": "Relationships", "description": "Family, friends, romantic relationships",
     "color": "#F59E0B", "icon": "❤️"},
    {"id": "personal-growth", "name": "Personal Growth", "description": "Learning, skills development",
     "color": "#8B5CF6", "icon": "📚"},
    {"id": "recreation", "name": "Recreation & Fun", "description": "Hobbies, entertainment, leisure",
     "color": "#EC4899", "icon": "🎮"},
    {"id": "spirituality", "name": "Spirituality", "description": "Faith, purpose, meaning",
     "color": "#6366F1", "icon": "🕊️"},
    {"id": "environment", "name": "Environment", "description": "Living space, surroundings",
     "color": "#059669", "icon": "🏠"},
]


def default_area(slug: str) -> dict[str, str] | None:
    for area in DEFAULT_LIFE_AREAS:
        if area["id"] == slug:
            return dict(area)
    return None


def area_keywords(slug: str) -> Sequence[str]:
    return LIFE_AREA_KEYWORDS.keywords(LIFE_AREA_ALIASES.get(slug, slug))


def key_themes(entries: Sequence[JournalEntry], keywords: Sequence[str], limit: int = 5) -> list[str]:
    counts: dict[str, int] = {}
    for e in entries:
        text = e.text.lower()
        for kw in keywords:
            if kw in text:
                counts[kw] = counts.get(kw, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [kw for kw, _ in ranked[:limit]]


def sentiment_trend(scores: Sequence[float], recent: int = 3, delta: float = 0.5) -> str:
    """Mean of the last ``recent`` scores against the mean of the rest."""
    if len(scores) < 2:
        return "stable"
    last = scores[-recent:]
    earlier = scores[:-recent]
    last_avg = sum(last) / len(last)
    earlier_avg = sum(earlier) / len(earlier) if earlier else last_avg
    if last_avg > earlier_avg + delta:
        return "improving"
    if last_avg < earlier_avg - delta:
        return "declining"
    return "stable"


def entry_frequency(entries: Sequence[JournalEntry], now: datetime) -> str:
    if not entries:
        return "No entries"
    first = min(e.created_at for e in entries)
    days = (now - first).total_seconds() / 86400
    rate = len(entries) / days if days > 0 else 0.0
    if rate >= 1:
        return "Daily"
    if rate >= 0.5:
        return "Every other day"
    if rate >= 0.25:
        return "Weekly"
    if rate >= 0.1:
        return "Monthly"
    return "Occasionally"


def most_active_month(entries: Sequence[JournalEntry]) -> str:
    if not entries:
        return "No entries"
    counts: dict[str, int] = {}
    for e in entries:
        label = month_label(e.created_at)
        counts[label] = counts.get(label, 0) + 1
    best = max(counts.values())
    return next(label for label, n in counts.items() if n == best)


def progress_history(entries: Sequence[JournalEntry], sentiment: float, now: datetime) -> list[dict[str, Any]]:
    out = []
    for i in range(6, -1, -1):
        day = now - timedelta(days=i)
        n = sum(1 for e in entries if day_key(e.created_at) == day_key(day))
        score = max(1.0, min(10.0, 5 + sentiment * 0.5 + n * 0.5))
        out.append({
            "date": day.isoformat(),
            # half up
            "score": int(score + 0.5),
            "notes": f"{n} entries" if n else "No entries",
        })
    return out


def _insight(n: str, kind: str, content: str, area: Mapping[str, Any], now: datetime) -> dict[str, Any]:
    return {
        "id": n,
        "type": kind,
        "content": content,
        "source": "analysis",
        "date": now.isoformat(),
        "lifeAreaId": area["id"],
    }


def area_insights(
    entries: Sequence[JournalEntry],
    sentiment: float,
    themes: Sequence[str],
    area: Mapping[str, Any],
    now: datetime,
) -> list[dict[str, Any]]:
    name = area["name"]
    if not entries:
        return [_insight(
            "1", "neutral",
            f"No journal entries found related to {name}. "
            "Start journaling about this area to get personalized insights.",
            area, now,
        )]
    out = []
    if sentiment > 0:
        out.append(_insight(
            "1", "positive",
            f"You've been feeling positive about {name} recently. Keep up the great work!",
            area, now,
        ))
    elif sentiment < 0:
        out.append(_insight(
            "2", "negative",
            f"You've been experiencing challenges in {name}. Consider focusing on this area for improvement.",
            area, now,
        ))
    if themes:
        out.append(_insight("3", "neutral", f"Key themes in your {name} entries: {', '.join(themes)}", area, now))
    return out


def area_recommendations(sentiment: float, themes: Sequence[str], area: Mapping[str, Any]) -> list[str]:
    name = area["name"]
    out = []
    if sentiment < 0:
        out.append(f"Focus on positive aspects of {name} in your journaling")
        out.append(f"Set specific goals to improve your {name} satisfaction")
    if themes:
        out.append(f"Explore deeper insights about: {', '.join(themes)}")
    out.append(f"Journal more frequently about {name} for better tracking")
    return out


def analyze_life_area(
    entries: Sequence[JournalEntry],
    slug: str,
    area: Mapping[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Analysis block for one area. ``area`` needs ``id`` and ``name``."""
    now = now or datetime.now(timezone.utc)
    keywords = area_keywords(slug)
    related = [e for e in entries if any(kw in e.text.lower() for kw in keywords)]
    related.sort(key=lambda e: e.created_at, reverse=True)

    scores = [token_sentiment_score(e.text) for e in related]
    average = sum(scores) / len(scores) if scores else 0.0
    themes = key_themes(related, keywords)

    return {
        "insights": area_insights(related, average, themes, area, now),
        "progressHistory": progress_history(related, average, now),
        "journalAnalysis": {
            "totalEntries": len(related),
            "averageSentiment": average,
            "mostActiveMonth": most_active_month(related),
            "entryFrequency": entry_frequency(related, now),
        },
        "relatedEntries": [
            {
                "id": e.id,
                "content": e.text,
                "date": e.created_at.isoformat(),
                "sentiment": s,
            }
            for e, s in list(zip(related, scores))[:5]
        ],
        # scores are newest first; the trend reads oldest to newest
        "sentimentTrend": sentiment_trend(scores[::-1]),
        "keyThemes": themes,
        "recommendations": area_recommendations(average, themes, area),
    }


def apply_area_update(
    areas: Sequence[Mapping[str, Any]],
    slug: str,
    *,
    current_score: float | None = None,
    target_score: float | None = None,
    description: str | None = None,
) -> list[dict[str, Any]]:
    """New area list with one area patched. Falsy values keep the stored value.

    Raises ``LookupError`` when no area has id ``slug``.
    """
    out = [dict(a) for a in areas]
    for area in out:
        if area.get("id") == slug:
            area["currentScore"] = current_score or area.get("currentScore")
            area["targetScore"] = target_score or area.get("targetScore")
            area["description"] = description or area.get("description")
            return out
    raise LookupError(slug)
