from __future__ import annotations

import os


def get_env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


DB_PATH = get_env("DB_PATH", os.path.join(os.path.dirname(__file__), "..", "journal.db"))
SESSION_COOKIE = get_env("SESSION_COOKIE", "session")
ROW_LIMIT = int(get_env("ROW_LIMIT", "1000"))  # rows fetched per entity per request
LOG_LEVEL = get_env("LOG_LEVEL", "INFO").upper()

HOST = get_env("HOST", "0.0.0.0")
PORT = int(get_env("PORT", "8765"))
