from __future__ import annotations

from fastapi import Cookie, Depends, HTTPException, Request

from .db import JournalStore
from .settings import SESSION_COOKIE


def get_store(request: Request) -> JournalStore:
    return request.app.state.store


def require_user(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    store: JournalStore = Depends(get_store),
) -> str:
    """Resolve the session cookie to a user id."""
    if not session_token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user_id = store.get_user_id_for_session(session_token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
