from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user
from database import get_db
from domain import STACKS, ChainItem, HabitCategory, HabitOverride, HabitStack
from services.day_log_service import today_str
from services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])

class HabitCreate(BaseModel):
    name: str
    slug: str
    category: HabitCategory = "binary"
    stack: HabitStack = "morning"
    unit: Optional[str] = None
    icon: Optional[str] = "✅"
    sort_order: Optional[int] = None
    is_bare_minimum: bool = False
    is_active: bool = True

class ChainUpdate(BaseModel):
    items: list[ChainItem]

@router.get("")
async def list_habits(stack: Optional[str] = None, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if stack is not None and stack not in STACKS:
        raise HTTPException(status_code=400, detail=f"Unknown stack '{stack}'")
    try:
        habits = HabitService.get_resolved_habits(db, user_id, stack)
        return [h.model_dump() for h in habits]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.post("")
async def create_habit(habit_data: HabitCreate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        habit = HabitService.create(db, user_id, habit_data.model_dump())
        return {"status": "success", "data": habit.model_dump()}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.patch("/{habit_id}")
async def update_habit(habit_id: str, override: HabitOverride, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    habit = HabitService.update_override(db, user_id, habit_id, override)
    if not habit:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "data": habit.model_dump()}

@router.put("/{habit_id}")
async def update_habit_put(habit_id: str, override: HabitOverride, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return await update_habit(habit_id, override, user_id, db)

@router.get("/chains/{stack}")
async def get_chain(stack: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if stack not in STACKS:
        raise HTTPException(status_code=400, detail=f"Unknown stack '{stack}'")
    settings = HabitService.get_settings(db, user_id)
    return [item.model_dump() for item in settings.routine_chains.get(stack, [])]

@router.put("/chains/{stack}")
async def set_chain(stack: str, body: ChainUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if stack not in STACKS:
        raise HTTPException(status_code=400, detail=f"Unknown stack '{stack}'")
    if not HabitService.set_routine_chain(db, user_id, stack, body.items):
        raise HTTPException(status_code=404, detail="User not found")
    return {"status": "success"}

class DeferBody(BaseModel):
    to_stack: HabitStack

@router.get("/deferred")
async def list_deferred(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    settings = HabitService.get_settings(db, user_id)
    return [d.model_dump() for d in HabitService.active_deferrals(settings, today_str())]

@router.post("/{habit_id}/defer")
async def defer_habit(habit_id: str, body: DeferBody, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deferral = HabitService.defer(db, user_id, habit_id, body.to_stack)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deferral:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "data": deferral.model_dump()}

@router.delete("/{habit_id}/defer")
async def undefer_habit(habit_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if not HabitService.undefer(db, user_id, habit_id):
        raise HTTPException(status_code=404, detail="No deferral for this habit today")
    return {"status": "success"}
