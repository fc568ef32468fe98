from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .keywords import EMOJI_MOOD_SCALE, MoodScale
from .normalize import CheckIn
from .windows import day_key


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def sleep_quality(hours: float) -> str:
    if hours >= 8:
        return "excellent"
    if hours >= 7:
        return "good"
    if hours >= 6:
        return "fair"
    return "poor"


def dominant_mood(moods: Iterable[str], fallback: str = "😐") -> str:
    counts: dict[str, int] = {}
    for m in moods:
        counts[m] = counts.get(m, 0) + 1
    best = fallback
    best_count = 0
    # strict > keeps the first label that reached the max
    for label, n in counts.items():
        if n > best_count:
            best, best_count = label, n
    return best


def last_most_frequent(counts: Mapping[str, int]) -> str | None:
    """Key with the highest count; ties go to the key inserted last."""
    best = None
    best_count = None
    for key, n in counts.items():
        if best_count is None or n >= best_count:
            best, best_count = key, n
    return best


@dataclass(frozen=True)
class DailyAggregate:
    date: str
    average_mood: float
    mood_count: int
    dominant_mood: str
    average_energy: float
    energy_range: dict[str, float]
    average_sleep: float
    sleep_quality: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "averageMood": self.average_mood,
            "moodCount": self.mood_count,
            "dominantMood": self.dominant_mood,
            "averageEnergy": self.average_energy,
            "energyRange": dict(self.energy_range),
            "averageSleep": self.average_sleep,
            "sleepQuality": self.sleep_quality,
        }


def aggregate_daily(
    check_ins: Iterable[CheckIn],
    mood_scale: MoodScale = EMOJI_MOOD_SCALE,
) -> dict[str, DailyAggregate]:
    """Group check-ins by UTC day and summarise each day.

    Days appear in the order their first check-in was seen.
    """
    groups: dict[str, list[CheckIn]] = {}
    for c in check_ins:
        groups.setdefault(day_key(c.created_at), []).append(c)

    out: dict[str, DailyAggregate] = {}
    for key, day in groups.items():
        energies = [c.energy for c in day]
        avg_sleep = _mean([c.sleep_total for c in day])
        out[key] = DailyAggregate(
            date=key,
            average_mood=_mean([float(mood_scale.score(c.mood)) for c in day]),
            mood_count=len(day),
            dominant_mood=dominant_mood((c.mood for c in day), mood_scale.fallback_label),
            average_energy=_mean(energies),
            energy_range={"min": min(energies), "max": max(energies)},
            average_sleep=avg_sleep,
            sleep_quality=sleep_quality(avg_sleep),
        )
    return out
