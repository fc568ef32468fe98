"""Weekly / monthly recap documents and their stored form."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Sequence

from .aggregate import last_most_frequent
from .db import dumps_payload
from .insights import recap_insights, recap_recommendations
from .keywords import EMOJI_MOOD_SCALE, RECAP_THEMES
from .normalize import CheckIn, Goal, JournalEntry, parse_timestamp
from .stored import load_json_list, load_json_object
from .trends import ThresholdTrend
from .windows import day_key

WELLNESS_TREND = ThresholdTrend(delta=0.5)

THEME_NAMES = {
    "work": "professional development",
    "relationships": "personal connections",
    "health": "wellness and self-care",
    "finance": "financial planning",
    "personal": "personal growth",
}


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _short_date(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}"


def recap_title(period: str, start: datetime, end: datetime) -> str:
    name = "Week" if period == "weekly" else "Month"
    return f"{name} of {_short_date(start)} - {_short_date(end)}"


def recap_summary(period: str, entries: Sequence[JournalEntry], check_ins: Sequence[CheckIn], goals: Sequence[Goal]) -> str:
    avg_mood = _mean([EMOJI_MOOD_SCALE.score(c.mood) for c in check_ins])
    total_chars = sum(e.length for e in entries)
    return (
        f"This {period} was filled with {len(entries)} journal entries totaling {total_chars} words. "
        f"You completed {len(check_ins)} wellness check-ins with an average mood of {avg_mood:.1f}/10. "
        f"{len(goals)} goals were active during this period."
    )


def recap_highlights(
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    if entries:
        longest = entries[0]
        for e in entries[1:]:
            if e.length > longest.length:
                longest = e
        out.append({
            "type": "journal",
            "title": "Most Detailed Entry",
            "description": f"Your longest entry was {longest.length} characters long",
            "date": longest.created_at.isoformat(),
            "impact": "high",
        })

    if check_ins:
        scores = [EMOJI_MOOD_SCALE.score(c.mood) for c in check_ins]
        best, worst = max(scores), min(scores)
        if best >= 8:
            out.append({
                "type": "mood",
                "title": "Peak Happiness",
                "description": f"You experienced your highest mood of {best}/10",
                "date": check_ins[scores.index(best)].created_at.isoformat(),
                "impact": "positive",
            })
        if worst <= 3:
            out.append({
                "type": "mood",
                "title": "Challenging Moment",
                "description": f"You faced a difficult day with mood of {worst}/10",
                "date": check_ins[scores.index(worst)].created_at.isoformat(),
                "impact": "learning",
            })

    completed = [g for g in goals if g.status == "completed"]
    if completed:
        n = len(completed)
        out.append({
            "type": "goal",
            "title": "Goal Achievement",
            "description": f"You completed {n} goal{'s' if n > 1 else ''}",
            "date": completed[0].updated_at.isoformat(),
            "impact": "achievement",
        })
    return out


def goal_summary(goals: Sequence[Goal]) -> dict[str, Any]:
    total = len(goals)
    completed = sum(1 for g in goals if g.status == "completed")
    in_progress = [g for g in goals if g.status == "in-progress"]
    return {
        "total": total,
        "completed": completed,
        "inProgress": len(in_progress),
        "pending": sum(1 for g in goals if g.status == "pending"),
        "averageProgress": _mean([g.progress for g in in_progress]),
        "completionRate": completed / total * 100 if total else 0.0,
    }


def wellness_summary(check_ins: Sequence[CheckIn], trend: ThresholdTrend = WELLNESS_TREND) -> dict[str, Any]:
    moods = [float(EMOJI_MOOD_SCALE.score(c.mood)) for c in check_ins]
    energies = [c.energy for c in check_ins]
    sleep = [c.sleep_total for c in check_ins]
    return {
        "averageMood": _mean(moods),
        "averageEnergy": _mean(energies),
        "averageSleep": _mean(sleep),
        "moodTrend": trend.direction(moods),
        "energyTrend": trend.direction(energies),
        "sleepTrend": trend.direction(sleep),
    }


def theme_analysis(entries: Sequence[JournalEntry]) -> dict[str, Any]:
    """Entries per recap theme; ``dominantTheme`` is None when nothing matched."""
    themes = {name: 0 for name in RECAP_THEMES.rules}
    for e in entries:
        for name in RECAP_THEMES.matches(e.text):
            themes[name] += 1
    total = sum(themes.values())
    dominant = last_most_frequent(themes) if total else None
    return {"themes": themes, "dominantTheme": dominant, "totalMentions": total}


def narrative_story(
    period_name: str,
    entry_count: int,
    wellness: Mapping[str, Any],
    goals: Mapping[str, Any],
    themes: Mapping[str, Any],
) -> str:
    mood = wellness["averageMood"]
    story = f"This {period_name} was a journey of {entry_count} moments captured in your journal. "
    if mood > 7:
        story += (f"Your spirits were high, with an average mood of {mood:.1f}/10, "
                  "reflecting a period of positivity and contentment. ")
    elif mood < 4:
        story += (f"You faced some challenges, with an average mood of {mood:.1f}/10, "
                  "showing resilience through difficult times. ")
    else:
        story += f"Your mood remained balanced at {mood:.1f}/10, showing steady emotional well-being. "
    done = goals["completed"]
    if done > 0:
        story += (f"You celebrated {done} achievement{'s' if done > 1 else ''}, "
                  "marking significant progress in your personal growth. ")
    if themes["dominantTheme"]:
        story += (f"Your reflections often centered around {THEME_NAMES[themes['dominantTheme']]}, "
                  "showing where your focus and energy were directed. ")
    story += f"As this {period_name} comes to a close, you've created {entry_count} opportunities for self-reflection and growth. "
    return story


def timeline_story(entries: Sequence[JournalEntry], check_ins: Sequence[CheckIn]) -> list[dict[str, Any]]:
    by_day: dict[str, list[JournalEntry]] = {}
    for e in entries:
        by_day.setdefault(day_key(e.created_at), []).append(e)
    first_mood: dict[str, str] = {}
    for c in check_ins:
        first_mood.setdefault(day_key(c.created_at), c.mood)

    timeline = []
    for day in sorted(by_day):
        day_entries = by_day[day]
        chars = sum(e.length for e in day_entries)
        if len(day_entries) > 2:
            highlight = "Most Active Day"
        elif chars > 500:
            highlight = "Deep Reflection Day"
        else:
            highlight = "Regular Day"
        timeline.append({
            "date": day,
            "entries": len(day_entries),
            "totalWords": chars,
            "mood": first_mood.get(day, "😐"),
            "highlight": highlight,
        })
    return timeline


def character_story(entry_count: int, wellness: Mapping[str, Any], goals: Mapping[str, Any]) -> dict[str, Any]:
    mood = wellness["averageMood"]
    rate = goals["completionRate"]
    traits: list[str] = []
    growth: list[str] = []
    challenges: list[str] = []
    achievements: list[str] = []

    if mood > 7:
        traits += ["Optimistic", "Resilient", "Content"]
    elif mood < 4:
        traits += ["Persevering", "Strong", "Learning"]
    else:
        traits += ["Balanced", "Steady", "Reflective"]
    if rate > 70:
        traits += ["Determined", "Focused", "Achiever"]
    if entry_count > 10:
        traits += ["Thoughtful", "Self-aware", "Dedicated"]

    if mood < 6:
        growth += ["Emotional resilience", "Self-care practices"]
    if rate < 50:
        growth += ["Goal setting", "Time management"]

    if mood < 4:
        challenges += ["Managing difficult emotions", "Finding balance"]
    if entry_count < 3:
        challenges.append("Maintaining consistent reflection")

    done = goals["completed"]
    if done > 0:
        achievements.append(f"Completed {done} goal{'s' if done > 1 else ''}")
    if entry_count > 5:
        achievements.append("Maintained regular journaling practice")

    return {
        "name": "Your Journey",
        "traits": traits,
        "growth": growth,
        "challenges": challenges,
        "achievements": achievements,
    }


def journey_story(
    period: str,
    start: datetime,
    entries: Sequence[JournalEntry],
    wellness: Mapping[str, Any],
    goals: Mapping[str, Any],
) -> dict[str, Any]:
    """Weekly chapters from ``start`` (one for a weekly recap, four for monthly),
    plus milestones and lessons."""
    period_name = "week" if period == "weekly" else "month"
    chapters = []
    for i in range(1 if period == "weekly" else 4):
        week_from = start + timedelta(days=7 * i)
        week_to = week_from + timedelta(days=6)
        n = sum(1 for e in entries if week_from <= e.created_at <= week_to)
        chapters.append({
            "week": i + 1,
            "title": f"Week {i + 1}: {'Active Reflection' if n else 'Quiet Contemplation'}",
            "entries": n,
            "theme": "Growth" if n else "Rest",
            "summary": f"A week of {n} reflections and insights" if n
            else "A period of quiet observation and internal processing",
        })

    mood = wellness["averageMood"]
    done = goals["completed"]
    milestones = []
    if done > 0:
        milestones.append({
            "type": "achievement",
            "title": "Goal Completion",
            "description": f"Reached {done} milestone{'s' if done > 1 else ''}",
            "impact": "high",
        })
    if mood > 7:
        milestones.append({
            "type": "wellness",
            "title": "Emotional Peak",
            "description": "Experienced sustained positive mood",
            "impact": "positive",
        })
    if len(entries) > 10:
        milestones.append({
            "type": "practice",
            "title": "Consistent Reflection",
            "description": "Maintained regular journaling practice",
            "impact": "growth",
        })

    lessons = []
    if mood < 5:
        lessons.append({
            "lesson": "Resilience in challenging times",
            "insight": "Difficult periods often lead to the most growth",
            "application": "Use these experiences to build emotional strength",
        })
    if goals["completionRate"] > 70:
        lessons.append({
            "lesson": "The power of focused effort",
            "insight": "Clear goals and consistent action lead to achievement",
            "application": "Apply this focus to other areas of life",
        })

    return {
        "title": f"Your {period_name.capitalize()} Journey",
        "chapters": chapters,
        "milestones": milestones,
        "lessons": lessons,
    }


REFLECTION_QUESTIONS = (
    "What was the most significant moment of this period?",
    "How did your mood patterns reflect your overall well-being?",
    "What goals did you make progress on, and what helped or hindered you?",
    "What themes emerged in your thoughts and reflections?",
    "How have you grown or changed during this time?",
)


def reflection_story(
    entries: Sequence[JournalEntry],
    wellness: Mapping[str, Any],
    goals: Mapping[str, Any],
    themes: Mapping[str, Any],
) -> dict[str, Any]:
    mood = wellness["averageMood"]
    rate = goals["completionRate"]
    insights = []
    if mood > 7:
        insights.append({
            "category": "Emotional Well-being",
            "insight": "You experienced sustained positive emotions",
            "reflection": "Consider what contributed to this positive state and how to maintain it",
        })
    if rate > 70:
        insights.append({
            "category": "Goal Achievement",
            "insight": "You demonstrated strong follow-through on your goals",
            "reflection": "What strategies worked well for you? How can you apply them to future goals?",
        })
    if themes["dominantTheme"]:
        insights.append({
            "category": "Focus Areas",
            "insight": f"Your attention was primarily focused on {themes['dominantTheme']}",
            "reflection": "Is this alignment with your priorities? What might need adjustment?",
        })

    patterns: list[str] = []
    if entries:
        # content first here, unlike the effective text used elsewhere
        avg_length = _mean([len(e.content or e.transcription) for e in entries])
        if avg_length > 500:
            patterns += ["Deep reflection style", "Detailed self-exploration"]
        elif avg_length < 200:
            patterns += ["Concise expression", "Focused thinking"]

    growth: list[str] = []
    if mood < 6:
        growth += ["Emotional regulation", "Stress management"]
    if rate < 50:
        growth += ["Goal setting strategies", "Action planning"]

    return {
        "questions": list(REFLECTION_QUESTIONS),
        "insights": insights,
        "patterns": patterns,
        "growth": growth,
    }


def generate_recap(
    period: str,
    start: datetime,
    end: datetime,
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    goals: Sequence[Goal],
) -> dict[str, Any]:
    """Build a recap over records already filtered to ``[start, end]``.

    ``check_ins`` order decides trend direction and which check-in a
    highlight points at, so pass them chronologically.
    """
    period_name = "week" if period == "weekly" else "month"
    wellness = wellness_summary(check_ins)
    goals_out = goal_summary(goals)
    themes = theme_analysis(entries)
    return {
        "period": period,
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "title": recap_title(period, start, end),
        "summary": recap_summary(period, entries, check_ins, goals),
        "highlights": recap_highlights(entries, check_ins, goals),
        "insights": [i.as_dict() for i in recap_insights(entries, check_ins, goals)],
        "goals": goals_out,
        "wellness": wellness,
        "themes": themes,
        "recommendations": recap_recommendations(wellness, goals_out, len(entries)),
        "story": {
            "narrative": narrative_story(period_name, len(entries), wellness, goals_out, themes),
            "timeline": timeline_story(entries, check_ins),
            "character": character_story(len(entries), wellness, goals_out),
            "journey": journey_story(period, start, entries, wellness, goals_out),
            "reflection": reflection_story(entries, wellness, goals_out, themes),
        },
    }


def recap_storage_fields(recap: Mapping[str, Any]) -> dict[str, str]:
    content = {k: recap[k] for k in ("title", "summary", "highlights", "insights", "recommendations")}
    return {
        "period_start": recap["startDate"],
        "period_end": recap["endDate"],
        "content": dumps_payload(content),
        "insights": dumps_payload(recap["insights"]),
        "recommendations": dumps_payload(recap["recommendations"]),
    }


def load_stored_recap(row: Mapping[str, Any]) -> dict[str, Any]:
    """Decode a ``recaps`` row; raises ``MalformedStoredDataError``."""
    content = load_json_object("recap content", row.get("content"))
    created = parse_timestamp(row.get("created_at"))
    return {
        "id": row.get("id"),
        "type": row.get("type"),
        "periodStart": row.get("period_start"),
        "periodEnd": row.get("period_end"),
        "title": content.get("title", ""),
        "summary": content.get("summary", ""),
        "highlights": content.get("highlights", []),
        "insights": load_json_list("recap insights", row.get("insights")),
        "recommendations": load_json_list("recap recommendations", row.get("recommendations")),
        "createdAt": created.isoformat() if created else None,
    }
