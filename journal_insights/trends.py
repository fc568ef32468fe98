"""Weekly buckets and trend-direction strategies.

Two trend formulas are in use and are kept as separate named strategies:

* ``RelativeTrend``: second-half mean vs first-half mean scaled by 1.1 / 0.9.
  Used for weekly analytics trends and the mood recap card.
* ``ThresholdTrend``: second-half mean vs first-half mean +/- an absolute delta.
  Used for periodic recap wellness and personality traits.

Both split the series at ``len // 2`` and report ``stable`` for fewer than two
values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .keywords import EMOJI_MOOD_SCALE, MoodScale
from .normalize import CheckIn, JournalEntry
from .windows import week_key


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _halves(values: Sequence[float]) -> tuple[float, float] | None:
    if len(values) < 2:
        return None
    mid = len(values) // 2
    return _mean(values[:mid]), _mean(values[mid:])


@dataclass(frozen=True)
class RelativeTrend:
    up: str = "improving"
    down: str = "declining"
    flat: str = "stable"
    rise: float = 1.1
    fall: float = 0.9

    def direction(self, values: Sequence[float]) -> str:
        halves = _halves(values)
        if halves is None:
            return self.flat
        first, second = halves
        if second > first * self.rise:
            return self.up
        if second < first * self.fall:
            return self.down
        return self.flat


@dataclass(frozen=True)
class ThresholdTrend:
    delta: float = 0.5
    up: str = "improving"
    down: str = "declining"
    flat: str = "stable"

    def direction(self, values: Sequence[float]) -> str:
        halves = _halves(values)
        if halves is None:
            return self.flat
        first, second = halves
        if second > first + self.delta:
            return self.up
        if second < first - self.delta:
            return self.down
        return self.flat


WEEKLY_TREND = RelativeTrend()


def group_by_week(
    entries: Iterable[JournalEntry],
    check_ins: Iterable[CheckIn],
    mood_scale: MoodScale = EMOJI_MOOD_SCALE,
) -> list[dict[str, Any]]:
    """Bucket check-ins by Sunday-start week; entries only join existing weeks."""
    weeks: dict[str, dict[str, list[float]]] = {}
    for c in sorted(check_ins, key=lambda c: c.created_at):
        w = weeks.setdefault(
            week_key(c.created_at),
            {"moods": [], "energies": [], "sleep": [], "lengths": []},
        )
        w["moods"].append(float(mood_scale.score(c.mood)))
        w["energies"].append(c.energy)
        w["sleep"].append(c.sleep_total)

    for e in entries:
        w = weeks.get(week_key(e.created_at))
        if w is not None:
            w["lengths"].append(float(e.length))

    return [
        {
            "week": key,
            "moods": w["moods"],
            "averageMood": _mean(w["moods"]),
            "averageEnergy": _mean(w["energies"]),
            "averageSleep": _mean(w["sleep"]),
            "journalCount": len(w["lengths"]),
            "averageEntryLength": _mean(w["lengths"]),
        }
        for key, w in sorted(weeks.items())
    ]


def weekly_trends(
    entries: Iterable[JournalEntry],
    check_ins: Iterable[CheckIn],
    trend: RelativeTrend = WEEKLY_TREND,
) -> list[dict[str, Any]]:
    return [
        {
            "period": week["week"],
            "type": "weekly",
            "metrics": {
                "averageMood": week["averageMood"],
                "averageEnergy": week["averageEnergy"],
                "averageSleep": week["averageSleep"],
                "journalFrequency": week["journalCount"],
                "averageEntryLength": week["averageEntryLength"],
                "trend": trend.direction(week["moods"]),
            },
        }
        for week in group_by_week(entries, check_ins)
    ]
