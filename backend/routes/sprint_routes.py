from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Literal

from auth import get_current_user
from database import get_db
from domain import SprintIntensity
from services.sprint_service import SprintService
from services.state_store import StateStore

router = APIRouter(prefix="/api/v1/sprints", tags=["Sprints"])

class SprintStart(BaseModel):
    name: str
    intensity: SprintIntensity = "moderate"
    deadline: str  # YYYY-MM-DD

class SprintEnd(BaseModel):
    status: Literal["completed", "cancelled"] = "completed"

@router.get("/context")
async def sprint_context(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    return {
        "context": SprintService.derive_sprint_context(state.active_sprint).model_dump(),
        "sprint": state.active_sprint.model_dump() if state.active_sprint else None,
    }

@router.get("/history")
async def sprint_history(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    return [s.model_dump() for s in reversed(state.sprint_history)]

@router.post("/start")
async def start_sprint(body: SprintStart, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Sprint name is required")
    state = StateStore.load(db, user_id)
    try:
        sprint = SprintService.start_sprint(state, body.name, body.intensity, body.deadline)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        StateStore.save(db, user_id, state)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "data": sprint.model_dump()}

@router.post("/end")
async def end_sprint(body: SprintEnd | None = None, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    state = StateStore.load(db, user_id)
    sprint = SprintService.end_sprint(state, body.status if body else "completed")
    if not sprint:
        raise HTTPException(status_code=404, detail="No active sprint")
    try:
        StateStore.save(db, user_id, state)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "data": sprint.model_dump()}
