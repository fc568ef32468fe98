from __future__ import annotations

import json
import logging
import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
      id TEXT PRIMARY KEY,
      email TEXT UNIQUE NOT NULL,
      name TEXT,
      created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
      token TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      created_at TEXT NOT NULL,
      FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS journal_entries (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      content TEXT,
      audio_url TEXT,
      transcription TEXT,
      processing_type TEXT CHECK(processing_type IN ('transcribe-only', 'full-analysis')),
      processing_status TEXT CHECK(processing_status IN ('draft', 'transcribed', 'analyzed', 'completed')),
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS analysis_results (
      id TEXT PRIMARY KEY,
      journal_entry_id TEXT NOT NULL,
      sentiment TEXT,
      topics TEXT,
      summary TEXT,
      created_at TEXT NOT NULL,
      FOREIGN KEY(journal_entry_id) REFERENCES journal_entries(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS check_ins (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      mood TEXT,
      energy REAL,
      sleep_hours REAL,
      sleep_minutes REAL,
      note TEXT,
      created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS people (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      name TEXT NOT NULL,
      relationship TEXT,
      sentiment TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS finance_entries (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      amount REAL NOT NULL,
      description TEXT NOT NULL,
      category TEXT NOT NULL DEFAULT 'expense',
      priority TEXT DEFAULT 'medium',
      date TEXT,
      created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      title TEXT NOT NULL,
      description TEXT,
      status TEXT DEFAULT 'pending',
      priority TEXT DEFAULT 'medium',
      deadline TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS goals (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      title TEXT NOT NULL,
      description TEXT,
      status TEXT DEFAULT 'pending',
      progress REAL DEFAULT 0,
      life_area_id TEXT,
      priority TEXT DEFAULT 'medium',
      target_date TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    );
    """,
    # life_areas / priorities / traits are JSON text, decoded in stored.py
    """
    CREATE TABLE IF NOT EXISTS wheel_of_life (
      user_id TEXT PRIMARY KEY,
      life_areas TEXT,
      priorities TEXT,
      is_completed INTEGER NOT NULL DEFAULT 0,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS soul_matrix (
      user_id TEXT PRIMARY KEY,
      traits TEXT,
      updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS recaps (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      type TEXT CHECK(type IN ('weekly', 'monthly')),
      period_start TEXT,
      period_end TEXT,
      content TEXT,
      insights TEXT,
      recommendations TEXT,
      created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS nudge_interactions (
      id TEXT PRIMARY KEY,
      user_id TEXT NOT NULL,
      nudge_id TEXT,
      action TEXT,
      feedback TEXT,
      created_at TEXT NOT NULL
    );
    """,
)

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_journal_entries_user ON journal_entries(user_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_check_ins_user ON check_ins(user_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_people_user ON people(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_finance_entries_user ON finance_entries(user_id, date);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_goals_user ON goals(user_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_recaps_user ON recaps(user_id, created_at);",
)

# Columns a partial update may touch, per table.
_UPDATABLE = {
    "journal_entries": {"content", "transcription", "audio_url", "processing_type", "processing_status"},
    "goals": {"title", "description", "status", "progress", "life_area_id", "priority", "target_date"},
    "tasks": {"title", "description", "status", "priority", "deadline"},
}

_CAMEL_RE = re.compile(r"([A-Z])")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def dumps_payload(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=str)


def snake_case(key: str) -> str:
    return _CAMEL_RE.sub(r"_\1", key).lower()


def _new_id() -> str:
    return str(uuid.uuid4())


class JournalStore:
    """sqlite-backed data store. Every read returns plain snake_case dict rows."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connection() as conn:
            for ddl in _SCHEMA:
                conn.execute(ddl)
            for ddl in _INDEXES:
                conn.execute(ddl)
        logger.debug("schema ready at %s", self.path)

    # generic helpers

    def _insert(self, table: str, fields: dict[str, Any]) -> str:
        row = {"id": _new_id(), **fields}
        cols = ", ".join(row.keys())
        marks = ", ".join(f":{k}" for k in row.keys())
        with self.connection() as conn:
            conn.execute(f"INSERT INTO {table}({cols}) VALUES({marks})", row)
        return row["id"]

    def _get_by_id(self, table: str, row_id: str) -> dict[str, Any] | None:
        with self.connection() as conn:
            row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,)).fetchone()
        return dict(row) if row else None

    def _get_by_user(
        self, table: str, user_id: str, limit: int, offset: int, order_by: str = "created_at"
    ) -> list[dict[str, Any]]:
        with self.connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM {table} WHERE user_id = ? ORDER BY {order_by} DESC LIMIT ? OFFSET ?",
                (user_id, limit, offset),
            ).fetchall()
        return [dict(r) for r in rows]

    def _update(self, table: str, row_id: str, partial: dict[str, Any]) -> dict[str, Any] | None:
        allowed = _UPDATABLE[table]
        fields = {snake_case(k): v for k, v in partial.items()}
        fields = {k: v for k, v in fields.items() if k in allowed}
        if fields:
            fields["updated_at"] = now_iso()
            assignments = ", ".join(f"{k} = :{k}" for k in fields.keys())
            with self.connection() as conn:
                conn.execute(f"UPDATE {table} SET {assignments} WHERE id = :id", {**fields, "id": row_id})
        return self._get_by_id(table, row_id)

    # users / sessions

    def create_user(self, *, email: str, name: str | None = None) -> str:
        return self._insert("users", {"email": email, "name": name, "created_at": now_iso()})

    def create_session(self, user_id: str, token: str) -> None:
        with self.connection() as conn:
            conn.execute(
                "INSERT INTO sessions(token, user_id, created_at) VALUES(?, ?, ?)",
                (token, user_id, now_iso()),
            )

    def get_user_id_for_session(self, token: str) -> str | None:
        with self.connection() as conn:
            row = conn.execute("SELECT user_id FROM sessions WHERE token = ?", (token,)).fetchone()
        return row["user_id"] if row else None

    # journal entries

    def create_journal_entry(
        self,
        *,
        user_id: str,
        content: str = "",
        transcription: str | None = None,
        audio_url: str | None = None,
        processing_type: str = "transcribe-only",
        processing_status: str = "draft",
        created_at: str | None = None,
    ) -> str:
        ts = created_at or now_iso()
        return self._insert(
            "journal_entries",
            {
                "user_id": user_id,
                "content": content,
                "transcription": transcription,
                "audio_url": audio_url,
                "processing_type": processing_type,
                "processing_status": processing_status,
                "created_at": ts,
                "updated_at": ts,
            },
        )

    def get_journal_entry_by_id(self, entry_id: str) -> dict[str, Any] | None:
        return self._get_by_id("journal_entries", entry_id)

    def get_journal_entries_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("journal_entries", user_id, limit, offset)

    def update_journal_entry(self, entry_id: str, partial: dict[str, Any]) -> dict[str, Any] | None:
        return self._update("journal_entries", entry_id, partial)

    def delete_journal_entry(self, entry_id: str) -> bool:
        with self.connection() as conn:
            cur = conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
        return cur.rowcount > 0

    def create_analysis_result(
        self, *, journal_entry_id: str, sentiment: str | None = None, topics: str | None = None, summary: str | None = None
    ) -> str:
        return self._insert(
            "analysis_results",
            {
                "journal_entry_id": journal_entry_id,
                "sentiment": sentiment,
                "topics": topics,
                "summary": summary,
                "created_at": now_iso(),
            },
        )

    def get_analysis_result_by_journal_entry_id(self, entry_id: str) -> dict[str, Any] | None:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT * FROM analysis_results WHERE journal_entry_id = ?", (entry_id,)
            ).fetchone()
        return dict(row) if row else None

    # check-ins

    def create_check_in(
        self,
        *,
        user_id: str,
        mood: str,
        energy: float = 0,
        sleep_hours: float = 0,
        sleep_minutes: float = 0,
        note: str | None = None,
        created_at: str | None = None,
    ) -> str:
        return self._insert(
            "check_ins",
            {
                "user_id": user_id,
                "mood": mood,
                "energy": energy,
                "sleep_hours": sleep_hours,
                "sleep_minutes": sleep_minutes,
                "note": note,
                "created_at": created_at or now_iso(),
            },
        )

    def get_check_ins_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("check_ins", user_id, limit, offset)

    # people

    def create_person(
        self,
        *,
        user_id: str,
        name: str,
        relationship: str | None = None,
        sentiment: str = "neutral",
        created_at: str | None = None,
    ) -> str:
        ts = created_at or now_iso()
        return self._insert(
            "people",
            {
                "user_id": user_id,
                "name": name,
                "relationship": relationship,
                "sentiment": sentiment,
                "created_at": ts,
                "updated_at": ts,
            },
        )

    def get_people_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("people", user_id, limit, offset)

    # finance

    def create_finance_entry(
        self,
        *,
        user_id: str,
        amount: float,
        description: str,
        category: str = "expense",
        priority: str = "medium",
        date: str | None = None,
    ) -> str:
        ts = now_iso()
        return self._insert(
            "finance_entries",
            {
                "user_id": user_id,
                "amount": amount,
                "description": description,
                "category": category,
                "priority": priority,
                "date": date or ts,
                "created_at": ts,
            },
        )

    def get_finance_entries_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("finance_entries", user_id, limit, offset, order_by="date")

    # tasks

    def create_task(
        self,
        *,
        user_id: str,
        title: str,
        description: str | None = None,
        status: str = "pending",
        priority: str = "medium",
        deadline: str | None = None,
        created_at: str | None = None,
    ) -> str:
        ts = created_at or now_iso()
        return self._insert(
            "tasks",
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "status": status,
                "priority": priority,
                "deadline": deadline,
                "created_at": ts,
                "updated_at": ts,
            },
        )

    def get_tasks_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("tasks", user_id, limit, offset)

    def update_task(self, task_id: str, partial: dict[str, Any]) -> dict[str, Any] | None:
        return self._update("tasks", task_id, partial)

    # goals

    def create_goal(
        self,
        *,
        user_id: str,
        title: str,
        description: str | None = None,
        status: str = "pending",
        progress: float = 0,
        life_area_id: str | None = None,
        priority: str = "medium",
        target_date: str | None = None,
        created_at: str | None = None,
    ) -> str:
        ts = created_at or now_iso()
        return self._insert(
            "goals",
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "status": status,
                "progress": progress,
                "life_area_id": life_area_id,
                "priority": priority,
                "target_date": target_date,
                "created_at": ts,
                "updated_at": ts,
            },
        )

    def get_goals_by_user_id(self, user_id: str, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("goals", user_id, limit, offset)

    def update_goal(self, goal_id: str, partial: dict[str, Any]) -> dict[str, Any] | None:
        return self._update("goals", goal_id, partial)

    # wheel of life / soul matrix (one row per user, JSON text columns)

    def get_wheel_of_life_by_user_id(self, user_id: str) -> dict[str, Any] | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM wheel_of_life WHERE user_id = ?", (user_id,)).fetchone()
        return dict(row) if row else None

    def upsert_wheel_of_life(
        self, user_id: str, *, life_areas: str, priorities: str | None, is_completed: bool = False
    ) -> dict[str, Any]:
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO wheel_of_life(user_id, life_areas, priorities, is_completed, updated_at)
                VALUES(?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                  life_areas=excluded.life_areas,
                  priorities=excluded.priorities,
                  is_completed=excluded.is_completed,
                  updated_at=excluded.updated_at
                """,
                (user_id, life_areas, priorities, int(bool(is_completed)), now_iso()),
            )
        return self.get_wheel_of_life_by_user_id(user_id)  # type: ignore[return-value]

    def get_soul_matrix_by_user_id(self, user_id: str) -> dict[str, Any] | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM soul_matrix WHERE user_id = ?", (user_id,)).fetchone()
        return dict(row) if row else None

    def upsert_soul_matrix(self, user_id: str, *, traits: str) -> None:
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO soul_matrix(user_id, traits, updated_at) VALUES(?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET traits=excluded.traits, updated_at=excluded.updated_at
                """,
                (user_id, traits, now_iso()),
            )

    # recaps / nudges

    def create_recap(
        self,
        *,
        user_id: str,
        type: str,
        period_start: str,
        period_end: str,
        content: str,
        insights: str,
        recommendations: str,
    ) -> str:
        return self._insert(
            "recaps",
            {
                "user_id": user_id,
                "type": type,
                "period_start": period_start,
                "period_end": period_end,
                "content": content,
                "insights": insights,
                "recommendations": recommendations,
                "created_at": now_iso(),
            },
        )

    def get_recaps_by_user_id(self, user_id: str, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        return self._get_by_user("recaps", user_id, limit, offset)

    def save_nudge_interaction(
        self, *, user_id: str, nudge_id: str, action: str, feedback: str | None = None
    ) -> str:
        return self._insert(
            "nudge_interactions",
            {
                "user_id": user_id,
                "nudge_id": nudge_id,
                "action": action,
                "feedback": feedback,
                "created_at": now_iso(),
            },
        )
