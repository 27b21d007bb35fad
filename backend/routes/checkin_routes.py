# ---------- routes/checkin_routes.py ----------
"""
Check-in routes: what to prompt, submit a (partial) check-in, edit a past day,
read logs and state, and rebuild totals from the logs.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user
from database import get_db
from domain import STACKS, BadHabitEntry, HabitEntry
from services.admin_task_service import AdminTaskService
from services.checkin_service import CheckinService
from services.day_log_service import DayLogService, today_str
from services.escalation_service import NotificationEscalation
from services.habit_service import HabitService
from services.quote_service import QuoteService
from services.sprint_service import SprintService
from services.state_store import StateStore
from services.xp_service import XPService

router = APIRouter(prefix="/api/v1/checkin", tags=["Check-in"])


# ── Pydantic schemas ──────────────────────────────────────────────
class CheckinSubmit(BaseModel):
    date: Optional[str] = None  # defaults to today
    entries: dict[str, HabitEntry] = Field(default_factory=dict)
    bad_entries: dict[str, BadHabitEntry] = Field(default_factory=dict)


class LogEdit(BaseModel):
    entries: dict[str, HabitEntry] = Field(default_factory=dict)
    bad_entries: dict[str, BadHabitEntry] = Field(default_factory=dict)


# ── Routes ────────────────────────────────────────────────────────
@router.get("/context")
async def checkin_context(stack: Optional[str] = None, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Sprint context plus the habits to prompt for a stack (all stacks in single-checkin mode)."""
    if stack is not None and stack not in STACKS:
        raise HTTPException(status_code=400, detail=f"Unknown stack '{stack}'")
    state = StateStore.load(db, user_id)
    ctx = SprintService.derive_sprint_context(state.active_sprint)
    settings = HabitService.get_settings(db, user_id)
    resolved = HabitService.resolve(HabitService.get_base_habits(db, user_id), settings)

    today = today_str()
    habits = HabitService.checkin_habits(resolved, settings, None if ctx.single_checkin else stack, today=today)
    prompted, extras = SprintService.prompted_habits(habits, ctx)
    log = DayLogService.find_log(state, today)
    targets = {}
    for h in prompted + extras:
        target = SprintService.scaled_target(h.slug, ctx)
        if target is not None:
            targets[h.slug] = target
    return {
        "date": today,
        "sprint": ctx.model_dump(),
        "habits": [h.model_dump() for h in prompted],
        "extras": [h.model_dump() for h in extras],
        "targets": targets,
        "log": log.model_dump() if log else None,
        "quote": QuoteService.quote_of_the_day(today, settings).model_dump(),
    }


@router.post("")
async def submit_checkin(body: CheckinSubmit, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    date = body.date or today_str()
    try:
        state = StateStore.load(db, user_id)
        settings = HabitService.get_settings(db, user_id)
        habits = HabitService.resolve(HabitService.get_base_habits(db, user_id), settings)

        log, result = CheckinService.submit_checkin(
            state, date, body.entries, body.bad_entries, habits,
            admin_summary=AdminTaskService.summary(db, user_id, date),
            escalation=NotificationEscalation(db, user_id),
            settings=settings,
        )
        StateStore.save(db, user_id, state)
        return {"status": "success", "data": {"log": log.model_dump(), "result": result.model_dump()}}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/logs/{date}")
async def edit_log(date: str, body: LogEdit, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    settings = HabitService.get_settings(db, user_id)
    habits = HabitService.resolve(HabitService.get_base_habits(db, user_id), settings)

    outcome = CheckinService.edit_day_log(state, date, body.entries, body.bad_entries, habits, settings=settings)
    if outcome is None:
        raise HTTPException(status_code=404, detail=f"No check-in logged for {date}")
    log, result = outcome
    try:
        StateStore.save(db, user_id, state)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "data": {"log": log.model_dump(), "result": result.model_dump()}}


@router.get("/logs/{date}")
async def get_log(date: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    log = DayLogService.find_log(state, date)
    if not log:
        raise HTTPException(status_code=404, detail=f"No check-in logged for {date}")
    habits = HabitService.get_resolved_habits(db, user_id)
    return {"log": log.model_dump(), "stats": CheckinService.day_stats(log, habits)}


@router.get("/logs")
async def list_logs(start: str, end: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    return [l.model_dump() for l in DayLogService.logs_between(state, start, end)]


@router.get("/state")
async def get_state(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    level = XPService.get_level_for_xp(state.total_xp)
    return {
        "total_xp": state.total_xp,
        "level": level,
        "streaks": state.streaks,
        "bare_minimum_streak": state.bare_minimum_streak,
        "active_sprint": state.active_sprint.model_dump() if state.active_sprint else None,
        "days_logged": len(state.logs),
    }


@router.post("/recalculate")
async def recalculate(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Rebuild every day's XP, the total, level and streaks from the stored logs."""
    try:
        state = StateStore.load(db, user_id)
        remote = StateStore.pull_mirror(user_id)
        if remote is not None:
            state = StateStore.reconcile(state, remote)
        habits = HabitService.get_resolved_habits(db, user_id)
        CheckinService.rebuild(state, habits)
        StateStore.save(db, user_id, state)
        return {
            "status": "success",
            "data": {
                "total_xp": state.total_xp,
                "level": state.current_level,
                "streaks": state.streaks,
                "bare_minimum_streak": state.bare_minimum_streak,
            },
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
