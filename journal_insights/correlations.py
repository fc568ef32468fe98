"""Join daily check-in aggregates with journal entries.

Entries on days without check-ins produce no record. All thresholds are
strict except the ``>= 7`` sleep comparisons.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from .aggregate import DailyAggregate, aggregate_daily
from .content import content_flags, extract_content_themes, substring_sentiment, word_count
from .insights import correlation_insights
from .keywords import EMOJI_MOOD_SCALE
from .normalize import CheckIn, JournalEntry
from .trends import weekly_trends
from .windows import day_key, previous_day_key

ANALYSIS_TYPES = ("all", "mood", "energy", "sleep", "content")
ANALYZED_STATUSES = ("analyzed", "completed")


def mood_writing_pattern(mood: float, length: int) -> str:
    if mood > 7 and length > 500:
        return "high_mood_long_writing"
    if mood < 4 and length < 200:
        return "low_mood_short_writing"
    if mood > 7 and length < 200:
        return "high_mood_concise"
    if mood < 4 and length > 500:
        return "low_mood_detailed"
    return "balanced"


def energy_writing_pattern(energy: float, length: int) -> str:
    if energy > 7 and length > 500:
        return "high_energy_detailed"
    if energy < 4 and length < 200:
        return "low_energy_brief"
    if energy > 7 and length < 200:
        return "high_energy_focused"
    if energy < 4 and length > 500:
        return "low_energy_rambling"
    return "balanced"


def sleep_writing_pattern(sleep: float, length: int, hour: int) -> str:
    if sleep >= 7 and length > 400:
        return "well_rested_detailed"
    if sleep < 6 and length < 200:
        return "tired_brief"
    if sleep >= 7 and hour < 12:
        return "well_rested_morning"
    if sleep < 6 and hour > 22:
        return "tired_late_night"
    return "balanced"


def mood_correlations(entries: Iterable[JournalEntry], daily: dict[str, DailyAggregate]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for e in entries:
        day = daily.get(day_key(e.created_at))
        if day is None:
            continue
        mood, length = day.average_mood, e.length
        out.append({
            "date": day.date,
            "mood": mood,
            "dominantMood": day.dominant_mood,
            "entryLength": length,
            "hasAnalysis": e.processing_status in ANALYZED_STATUSES,
            "correlation": {
                "highMoodLongEntries": mood > 7 and length > 500,
                "lowMoodShortEntries": mood < 4 and length < 200,
                "moodWritingPattern": mood_writing_pattern(mood, length),
            },
        })
    return out


def energy_correlations(entries: Iterable[JournalEntry], daily: dict[str, DailyAggregate]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for e in entries:
        day = daily.get(day_key(e.created_at))
        if day is None:
            continue
        energy, length = day.average_energy, e.length
        out.append({
            "date": day.date,
            "energy": energy,
            "energyRange": dict(day.energy_range),
            "entryLength": length,
            "processingType": e.processing_type,
            "correlation": {
                "highEnergyFullAnalysis": energy > 7 and e.processing_type == "full-analysis",
                "lowEnergyBasicProcessing": energy < 4 and e.processing_type == "transcribe-only",
                "energyWritingPattern": energy_writing_pattern(energy, length),
            },
        })
    return out


def sleep_correlations(entries: Iterable[JournalEntry], daily: dict[str, DailyAggregate]) -> list[dict[str, Any]]:
    """Match each entry with the sleep logged on the previous UTC day."""
    out: list[dict[str, Any]] = []
    for e in entries:
        day = daily.get(previous_day_key(e.created_at))
        if day is None:
            continue
        sleep, length, hour = day.average_sleep, e.length, e.created_at.hour
        out.append({
            "date": day_key(e.created_at),
            "previousDaySleep": sleep,
            "sleepQuality": day.sleep_quality,
            "entryLength": length,
            "entryTime": hour,
            "correlation": {
                "goodSleepLongEntries": sleep >= 7 and length > 400,
                "poorSleepShortEntries": sleep < 6 and length < 200,
                "sleepWritingPattern": sleep_writing_pattern(sleep, length, hour),
            },
        })
    return out


def content_patterns(entries: Iterable[JournalEntry], daily: dict[str, DailyAggregate]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for e in entries:
        day = daily.get(day_key(e.created_at))
        if day is None:
            continue
        text = e.text
        out.append({
            "date": day.date,
            "contentLength": len(text),
            "wordCount": word_count(text),
            "sentiment": substring_sentiment(text),
            "themes": extract_content_themes(text),
            "mood": day.average_mood,
            "energy": day.average_energy,
            "patterns": content_flags(text),
        })
    return out


def build_correlation_analysis(
    entries: Sequence[JournalEntry],
    check_ins: Sequence[CheckIn],
    analysis_type: str = "all",
) -> dict[str, Any]:
    if analysis_type not in ANALYSIS_TYPES:
        raise ValueError(f"unknown analysis type: {analysis_type}")

    daily = aggregate_daily(check_ins, EMOJI_MOOD_SCALE)

    def wanted(kind: str) -> bool:
        return analysis_type in ("all", kind)

    analysis: dict[str, Any] = {
        "moodCorrelations": mood_correlations(entries, daily) if wanted("mood") else [],
        "energyCorrelations": energy_correlations(entries, daily) if wanted("energy") else [],
        "sleepCorrelations": sleep_correlations(entries, daily) if wanted("sleep") else [],
        "contentPatterns": content_patterns(entries, daily) if wanted("content") else [],
        "trends": weekly_trends(entries, check_ins),
    }
    analysis["insights"] = [i.as_dict() for i in correlation_insights(analysis)]
    return analysis
