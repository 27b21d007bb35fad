"""
admin_task_service.py — Daily admin to-dos
Small per-day task list (planned the night before or added ad hoc). The day's
summary is snapshotted into the DayLog at check-in and earns XP there.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from config import ADMIN_TASK_RETENTION_DAYS
from domain import AdminSummary, AdminTaskSnapshot
from models.admin_task import AdminTask

logger = logging.getLogger(__name__)


class AdminTaskService:
    @staticmethod
    def _cutoff() -> str:
        return (datetime.now(timezone.utc).date() - timedelta(days=ADMIN_TASK_RETENTION_DAYS)).isoformat()

    @staticmethod
    def _purge_old(db: Session, user_id: int):
        cutoff = AdminTaskService._cutoff()
        db.query(AdminTask).filter(AdminTask.user_id == user_id, AdminTask.date < cutoff).delete()

    @staticmethod
    def add(db: Session, user_id: int, title: str, date: str, source: str = "adhoc") -> AdminTask | None:
        try:
            task = AdminTask(user_id=user_id, title=title.strip(), date=date, source=source)
            db.add(task)
            AdminTaskService._purge_old(db, user_id)
            db.commit()
            db.refresh(task)
            return task
        except Exception as e:
            logger.error(f"Failed to add admin task for user {user_id}: {e}")
            db.rollback()
            return None

    @staticmethod
    def toggle(db: Session, user_id: int, task_id: int) -> AdminTask | None:
        try:
            task = db.query(AdminTask).filter_by(id=task_id, user_id=user_id).first()
            if not task:
                return None
            task.completed = not task.completed
            task.completed_at = datetime.now(timezone.utc) if task.completed else None
            db.commit()
            db.refresh(task)
            return task
        except Exception as e:
            logger.error(f"Failed to toggle admin task {task_id}: {e}")
            db.rollback()
            return None

    @staticmethod
    def remove(db: Session, user_id: int, task_id: int) -> bool:
        try:
            task = db.query(AdminTask).filter_by(id=task_id, user_id=user_id).first()
            if not task:
                return False
            db.delete(task)
            db.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to remove admin task {task_id}: {e}")
            db.rollback()
            return False

    @staticmethod
    def for_date(db: Session, user_id: int, date: str) -> list[AdminTask]:
        return db.query(AdminTask).filter_by(user_id=user_id, date=date)\
                 .order_by(AdminTask.created_at.asc()).all()

    @staticmethod
    def summary(db: Session, user_id: int, date: str) -> AdminSummary | None:
        """
        Snapshot for the day log. Inside the retention window an empty list is
        a zero snapshot. Dates past the purge cutoff return None, leaving the
        stored snapshot in place.
        """
        if date < AdminTaskService._cutoff():
            return None
        tasks = AdminTaskService.for_date(db, user_id, date)
        return AdminSummary(
            total=len(tasks),
            completed=sum(1 for t in tasks if t.completed),
            tasks=[AdminTaskSnapshot(title=t.title, completed=bool(t.completed)) for t in tasks],
        )
