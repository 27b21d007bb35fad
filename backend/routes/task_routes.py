from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Literal, Optional

from auth import get_current_user
from database import get_db
from services.admin_task_service import AdminTaskService
from services.day_log_service import today_str

router = APIRouter(prefix="/api/v1/tasks", tags=["Admin Tasks"])

class TaskCreate(BaseModel):
    title: str
    date: Optional[str] = None  # defaults to today
    source: Literal["adhoc", "planned"] = "adhoc"

def _to_dict(t) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "date": t.date,
        "source": t.source,
        "completed": bool(t.completed),
        "completed_at": str(t.completed_at) if t.completed_at else None,
    }

@router.get("")
async def list_tasks(date: Optional[str] = None, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    tasks = AdminTaskService.for_date(db, user_id, date or today_str())
    return [_to_dict(t) for t in tasks]

@router.post("")
async def create_task(task_data: TaskCreate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if not task_data.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")
    task = AdminTaskService.add(db, user_id, task_data.title, task_data.date or today_str(), task_data.source)
    if not task:
        raise HTTPException(status_code=500, detail="Failed to create task")
    return {"status": "success", "data": _to_dict(task)}

@router.post("/{task_id}/toggle")
async def toggle_task(task_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    task = AdminTaskService.toggle(db, user_id, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "success", "data": _to_dict(task)}

@router.delete("/{task_id}")
async def delete_task(task_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if not AdminTaskService.remove(db, user_id, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "success"}
