"""Convert stored snake_case rows into typed, immutable pipeline records.

Normalisation never raises for a row mapping: missing or unparseable values
fall back to ``0``, ``""``, ``"neutral"`` or the Unix epoch.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, TypeVar

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

T = TypeVar("T")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO-ish strings (``Z`` suffix, sqlite ``YYYY-MM-DD HH:MM:SS``,
    bare dates) into aware UTC datetimes. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _ts(value: Any) -> datetime:
    return parse_timestamp(value) or EPOCH


def _num(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _status(value: Any, default: str) -> str:
    return _str(value, default).replace("_", "-") or default


@dataclass(frozen=True)
class JournalEntry:
    id: str
    user_id: str
    content: str
    transcription: str
    processing_type: str
    processing_status: str
    created_at: datetime
    updated_at: datetime

    @property
    def text(self) -> str:
        return self.transcription or self.content or ""

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class CheckIn:
    id: str
    user_id: str
    mood: str
    energy: float
    sleep_hours: float
    sleep_minutes: float
    note: str
    created_at: datetime

    @property
    def sleep_total(self) -> float:
        return self.sleep_hours + self.sleep_minutes / 60


@dataclass(frozen=True)
class Person:
    id: str
    user_id: str
    name: str
    relationship: str
    sentiment: str
    created_at: datetime


@dataclass(frozen=True)
class FinanceEntry:
    id: str
    user_id: str
    amount: float
    description: str
    category: str
    priority: str
    date: datetime
    created_at: datetime


@dataclass(frozen=True)
class Task:
    id: str
    user_id: str
    title: str
    status: str
    priority: str
    deadline: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Goal:
    id: str
    user_id: str
    title: str
    description: str
    status: str
    progress: float
    life_area_id: str
    priority: str
    target_date: datetime | None
    created_at: datetime
    updated_at: datetime


def normalize_journal_entry(row: Mapping[str, Any]) -> JournalEntry:
    created = _ts(row.get("created_at"))
    return JournalEntry(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        content=_str(row.get("content")),
        transcription=_str(row.get("transcription")),
        processing_type=_str(row.get("processing_type"), "transcribe-only"),
        processing_status=_str(row.get("processing_status"), "draft"),
        created_at=created,
        updated_at=parse_timestamp(row.get("updated_at")) or created,
    )


def normalize_check_in(row: Mapping[str, Any]) -> CheckIn:
    return CheckIn(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        mood=_str(row.get("mood"), "neutral") or "neutral",
        energy=_num(row.get("energy")),
        sleep_hours=_num(row.get("sleep_hours")),
        sleep_minutes=_num(row.get("sleep_minutes")),
        note=_str(row.get("note")),
        created_at=_ts(row.get("created_at")),
    )


def normalize_person(row: Mapping[str, Any]) -> Person:
    return Person(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        name=_str(row.get("name")),
        relationship=_str(row.get("relationship")),
        sentiment=_str(row.get("sentiment"), "neutral") or "neutral",
        created_at=_ts(row.get("created_at")),
    )


def normalize_finance_entry(row: Mapping[str, Any]) -> FinanceEntry:
    created = _ts(row.get("created_at"))
    return FinanceEntry(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        amount=_num(row.get("amount")),
        description=_str(row.get("description")),
        category=_str(row.get("category"), "expense"),
        priority=_str(row.get("priority"), "medium"),
        date=parse_timestamp(row.get("date")) or created,
        created_at=created,
    )


def normalize_task(row: Mapping[str, Any]) -> Task:
    created = _ts(row.get("created_at"))
    return Task(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        title=_str(row.get("title")),
        status=_status(row.get("status"), "pending"),
        priority=_str(row.get("priority"), "medium"),
        deadline=parse_timestamp(row.get("deadline")),
        created_at=created,
        updated_at=parse_timestamp(row.get("updated_at")) or created,
    )


def normalize_goal(row: Mapping[str, Any]) -> Goal:
    created = _ts(row.get("created_at"))
    return Goal(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        title=_str(row.get("title")),
        description=_str(row.get("description")),
        status=_status(row.get("status"), "pending"),
        progress=_num(row.get("progress")),
        life_area_id=_str(row.get("life_area_id")),
        priority=_str(row.get("priority"), "medium"),
        target_date=parse_timestamp(row.get("target_date")),
        created_at=created,
        updated_at=parse_timestamp(row.get("updated_at")) or created,
    )


def normalize_many(rows: Iterable[Mapping[str, Any]], fn: Callable[[Mapping[str, Any]], T]) -> list[T]:
    return [fn(r) for r in rows]


def entry_to_json(entry: JournalEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "content": entry.content,
        "transcription": entry.transcription,
        "processingType": entry.processing_type,
        "processingStatus": entry.processing_status,
        "createdAt": entry.created_at.isoformat(),
        "updatedAt": entry.updated_at.isoformat(),
    }


def check_in_to_json(check_in: CheckIn) -> dict[str, Any]:
    return {
        "id": check_in.id,
        "mood": check_in.mood,
        "energy": check_in.energy,
        "sleepHours": check_in.sleep_hours,
        "sleepMinutes": check_in.sleep_minutes,
        "note": check_in.note,
        "createdAt": check_in.created_at.isoformat(),
    }


def goal_to_json(goal: Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "description": goal.description,
        "status": goal.status,
        "progress": goal.progress,
        "lifeAreaId": goal.life_area_id,
        "priority": goal.priority,
        "targetDate": goal.target_date.isoformat() if goal.target_date else None,
        "createdAt": goal.created_at.isoformat(),
        "updatedAt": goal.updated_at.isoformat(),
    }
