from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .correlations import ANALYSIS_TYPES, build_correlation_analysis
from .db import JournalStore, dumps_payload
from .insights import enhanced_insights
from .life_areas import analyze_life_area, apply_area_update, default_area
from .models import (
    CheckInCreateRequest,
    CreatedResponse,
    JournalEntryCreateRequest,
    JournalEntryUpdateRequest,
    LifeAreaUpdateRequest,
    NudgeInteractionRequest,
    RecapGenerateRequest,
)
from .normalize import (
    CheckIn,
    FinanceEntry,
    Goal,
    JournalEntry,
    Person,
    Task,
    check_in_to_json,
    entry_to_json,
    goal_to_json,
    normalize_check_in,
    normalize_finance_entry,
    normalize_goal,
    normalize_journal_entry,
    normalize_many,
    normalize_person,
    normalize_task,
)
from .nudges import build_nudges
from .personality import GRANULARITIES, build_personality_evolution
from .recap import generate_recap, load_stored_recap, recap_storage_fields
from .recap_cards import build_recap_cards
from .security import get_store, require_user
from .settings import DB_PATH, ROW_LIMIT
from .stored import MalformedStoredDataError, load_life_areas, load_priorities, load_traits
from .windows import window_for_days, window_for_period, within

logger = logging.getLogger(__name__)

router = APIRouter()


# -- loading ------------------------------------------------------------------

def _entries(store: JournalStore, user_id: str) -> list[JournalEntry]:
    return normalize_many(store.get_journal_entries_by_user_id(user_id, ROW_LIMIT, 0), normalize_journal_entry)


def _check_ins(store: JournalStore, user_id: str) -> list[CheckIn]:
    """Newest first."""
    return normalize_many(store.get_check_ins_by_user_id(user_id, ROW_LIMIT, 0), normalize_check_in)


def _goals(store: JournalStore, user_id: str) -> list[Goal]:
    return normalize_many(store.get_goals_by_user_id(user_id, ROW_LIMIT, 0), normalize_goal)


def _people(store: JournalStore, user_id: str) -> list[Person]:
    return normalize_many(store.get_people_by_user_id(user_id, ROW_LIMIT, 0), normalize_person)


def _finance(store: JournalStore, user_id: str) -> list[FinanceEntry]:
    return normalize_many(store.get_finance_entries_by_user_id(user_id, ROW_LIMIT, 0), normalize_finance_entry)


def _tasks(store: JournalStore, user_id: str) -> list[Task]:
    return normalize_many(store.get_tasks_by_user_id(user_id, ROW_LIMIT, 0), normalize_task)


def _chronological(check_ins: list[CheckIn]) -> list[CheckIn]:
    return sorted(check_ins, key=lambda c: c.created_at)


def _priorities(row: dict[str, Any], user_id: str) -> list[str]:
    try:
        return load_priorities(row.get("priorities"))
    except MalformedStoredDataError as e:
        logger.warning("ignoring priorities for user %s: %s", user_id, e)
        return []


def _wheel(store: JournalStore, user_id: str) -> tuple[list[dict[str, Any]] | None, list[str]]:
    """Life areas (None when absent or unreadable) and priorities."""
    row = store.get_wheel_of_life_by_user_id(user_id)
    if not row:
        return None, []
    try:
        areas = load_life_areas(row.get("life_areas"))
    except MalformedStoredDataError as e:
        logger.warning("skipping life areas for user %s: %s", user_id, e)
        areas = None
    return areas, _priorities(row, user_id)


def _traits(store: JournalStore, user_id: str) -> dict[str, Any] | None:
    row = store.get_soul_matrix_by_user_id(user_id)
    if not row:
        return None
    try:
        return load_traits(row.get("traits"))
    except MalformedStoredDataError as e:
        logger.warning("skipping personality traits for user %s: %s", user_id, e)
        return None


def _period_days(raw: str) -> int:
    try:
        days = int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid period: {raw}") from None
    if days <= 0:
        raise HTTPException(status_code=400, detail=f"Invalid period: {raw}")
    return days


def _owned_entry(store: JournalStore, entry_id: str, user_id: str) -> dict[str, Any]:
    row = store.get_journal_entry_by_id(entry_id)
    if not row:
        raise HTTPException(status_code=404, detail="Entry not found")
    if row["user_id"] != user_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return row


def _entry_json(row: dict[str, Any]) -> dict[str, Any]:
    return {**entry_to_json(normalize_journal_entry(row)), "audioUrl": row.get("audio_url")}


# -- routes -------------------------------------------------------------------

@router.get("/api/health")
def health() -> dict[str, Any]:
    return {"ok": True}


@router.get("/api/analytics/correlations")
def correlations(
    period: str = "30",
    analysis_type: str = Query(default="all", alias="type"),
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    days = _period_days(period)
    if analysis_type not in ANALYSIS_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid analysis type: {analysis_type}")
    start, end = window_for_days(days)
    entries = within(_entries(store, user_id), start, end)
    check_ins = within(_check_ins(store, user_id), start, end)
    return build_correlation_analysis(entries, check_ins, analysis_type)


@router.get("/api/analytics/personality-evolution")
def personality_evolution(
    period: str = "90",
    granularity: str = "weekly",
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    days = _period_days(period)
    if granularity not in GRANULARITIES:
        raise HTTPException(status_code=400, detail=f"Invalid granularity: {granularity}")
    start, end = window_for_days(days)
    entries = within(_entries(store, user_id), start, end)
    check_ins = within(_check_ins(store, user_id), start, end)
    return build_personality_evolution(entries, check_ins, granularity)


@router.get("/api/recaps/generate-cards")
def generate_cards(
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> list[dict[str, Any]]:
    start, end = window_for_days(7)
    cards = build_recap_cards(
        entries=within(_entries(store, user_id), start, end),
        check_ins=_chronological(within(_check_ins(store, user_id), start, end)),
        people=_people(store, user_id),
        finance_entries=within(_finance(store, user_id), start, end, key="date"),
        tasks=within(_tasks(store, user_id), start, end),
        goals=_goals(store, user_id),
        start=start,
        end=end,
    )
    return [c.as_dict() for c in cards]


@router.post("/api/recaps/generate")
def generate_periodic_recap(
    req: RecapGenerateRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    if req.userId != user_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    start, end = window_for_period(req.type)
    recap = generate_recap(
        req.type,
        start,
        end,
        within(_entries(store, user_id), start, end),
        _chronological(within(_check_ins(store, user_id), start, end)),
        within(_goals(store, user_id), start, end),
    )
    recap_id = store.create_recap(user_id=user_id, type=req.type, **recap_storage_fields(recap))
    logger.info("stored %s recap %s for user %s", req.type, recap_id, user_id)
    return {"id": recap_id, "message": f"{req.type} recap generated successfully", "recap": recap}


@router.get("/api/recaps")
def list_recaps(
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> list[dict[str, Any]]:
    out = []
    for row in store.get_recaps_by_user_id(user_id):
        try:
            out.append(load_stored_recap(row))
        except MalformedStoredDataError as e:
            logger.warning("skipping recap %s: %s", row.get("id"), e)
    return out


@router.get("/api/insights")
def insights(
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    life_areas, priorities = _wheel(store, user_id)
    return enhanced_insights(
        check_ins=_check_ins(store, user_id),
        goals=_goals(store, user_id),
        people=_people(store, user_id),
        finance_entries=_finance(store, user_id),
        tasks=_tasks(store, user_id),
        life_areas=life_areas,
        priorities=priorities,
        traits=_traits(store, user_id),
    )


@router.get("/api/nudges")
def nudges(
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    life_areas, _ = _wheel(store, user_id)
    return build_nudges(
        entry_count=len(store.get_journal_entries_by_user_id(user_id, ROW_LIMIT, 0)),
        check_ins=_check_ins(store, user_id),
        goals=_goals(store, user_id),
        people=_people(store, user_id),
        finance_entries=_finance(store, user_id),
        life_areas=life_areas,
    )


@router.post("/api/nudges")
def nudge_interaction(
    req: NudgeInteractionRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    interaction_id = store.save_nudge_interaction(
        user_id=user_id, nudge_id=req.nudgeId, action=req.action, feedback=req.feedback
    )
    return {"success": True, "result": {"id": interaction_id}}


@router.get("/api/wheel-of-life/area/{slug}")
def life_area(
    slug: str,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    row = store.get_wheel_of_life_by_user_id(user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Wheel of Life not found")
    try:
        areas = load_life_areas(row.get("life_areas"))
    except MalformedStoredDataError as e:
        logger.warning("life areas unreadable for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Invalid life areas data format") from e
    priorities = _priorities(row, user_id)

    stored_area = next((a for a in areas if a.get("id") == slug), None)
    if stored_area is None:
        raise HTTPException(status_code=404, detail="Life area not found")

    area = {**(default_area(slug) or {}), **stored_area}
    area.setdefault("name", area["id"])
    area_goals = [goal_to_json(g) for g in _goals(store, user_id) if g.life_area_id == slug]
    analysis = analyze_life_area(_entries(store, user_id), slug, area)
    return {
        **area,
        "priority": priorities.index(slug) + 1 if slug in priorities else 0,
        "goals": area_goals,
        **analysis,
    }


@router.put("/api/wheel-of-life/area/{slug}")
def update_life_area(
    slug: str,
    req: LifeAreaUpdateRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    row = store.get_wheel_of_life_by_user_id(user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Wheel of Life not found")
    try:
        areas = load_life_areas(row.get("life_areas"))
    except MalformedStoredDataError as e:
        logger.warning("life areas unreadable for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Invalid life areas data format") from e
    try:
        updated = apply_area_update(
            areas,
            slug,
            current_score=req.currentScore,
            target_score=req.targetScore,
            description=req.description,
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="Life area not found") from None
    store.upsert_wheel_of_life(
        user_id,
        life_areas=dumps_payload(updated),
        priorities=row.get("priorities"),
        is_completed=bool(row.get("is_completed")),
    )
    return {"success": True}


@router.get("/api/journal/entries")
def list_journal_entries(
    limit: int = Query(default=100, ge=1, le=ROW_LIMIT),
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> list[dict[str, Any]]:
    return [_entry_json(r) for r in store.get_journal_entries_by_user_id(user_id, limit, 0)]


@router.post("/api/journal/entries", status_code=201, response_model=CreatedResponse)
def create_journal_entry(
    req: JournalEntryCreateRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> CreatedResponse:
    entry_id = store.create_journal_entry(
        user_id=user_id,
        content=req.content,
        transcription=req.transcription,
        audio_url=req.audioUrl,
        processing_type=req.processingType,
        processing_status=req.processingStatus,
    )
    return CreatedResponse(id=entry_id)


@router.get("/api/journal/entries/{entry_id}")
def get_journal_entry(
    entry_id: str,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    row = _owned_entry(store, entry_id, user_id)
    return {
        "entry": _entry_json(row),
        "analysis": store.get_analysis_result_by_journal_entry_id(entry_id),
    }


@router.put("/api/journal/entries/{entry_id}")
def update_journal_entry(
    entry_id: str,
    req: JournalEntryUpdateRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    _owned_entry(store, entry_id, user_id)
    row = store.update_journal_entry(entry_id, req.model_dump(exclude_unset=True))
    if row is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return _entry_json(row)


@router.delete("/api/journal/entries/{entry_id}")
def delete_journal_entry(
    entry_id: str,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> dict[str, Any]:
    _owned_entry(store, entry_id, user_id)
    store.delete_journal_entry(entry_id)
    return {"message": "Entry deleted successfully"}


@router.get("/api/check-ins")
def list_check_ins(
    limit: int = Query(default=10, ge=1, le=ROW_LIMIT),
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> list[dict[str, Any]]:
    rows = store.get_check_ins_by_user_id(user_id, limit, 0)
    return [check_in_to_json(c) for c in normalize_many(rows, normalize_check_in)]


@router.post("/api/check-ins", status_code=201, response_model=CreatedResponse)
def create_check_in(
    req: CheckInCreateRequest,
    user_id: str = Depends(require_user),
    store: JournalStore = Depends(get_store),
) -> CreatedResponse:
    check_in_id = store.create_check_in(
        user_id=user_id,
        mood=req.mood,
        energy=req.energy,
        sleep_hours=req.sleepHours,
        sleep_minutes=req.sleepMinutes,
        note=req.note,
    )
    return CreatedResponse(id=check_in_id)


# -- app ----------------------------------------------------------------------

async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"message": "Invalid request", "errors": jsonable_encoder(exc.errors())}, status_code=422)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"message": "Internal server error"}, status_code=500)


def create_app(store: JournalStore | None = None) -> FastAPI:
    store = store or JournalStore(DB_PATH)
    store.init_db()

    app = FastAPI(title="Journal Insights", version="0.1.0")
    app.state.store = store
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)
    app.include_router(router)
    return app
