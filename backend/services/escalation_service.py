"""
escalation_service.py — "Later" reminders
When a habit is answered "later" the check-in notifies an escalation listener
instead of scheduling anything itself. This listener persists a reminder
notification and resolves it once the habit is answered done or missed.
Delivery (push/SMS) is handled elsewhere.
"""

import logging

from sqlalchemy.orm import Session

from domain import ResolvedHabit
from models.notification import Notification

logger = logging.getLogger(__name__)


class EscalationListener:
    """No-op listener; subclasses receive habit status transitions from a check-in."""

    def later(self, habit: ResolvedHabit, date: str) -> None:
        pass

    def resolved(self, habit: ResolvedHabit, date: str) -> None:
        pass


class NotificationEscalation(EscalationListener):
    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _open(self, habit_id: str, date: str):
        return self.db.query(Notification).filter_by(
            user_id=self.user_id, type="later", reference_type="habit",
            reference_id=habit_id, reference_date=date, is_resolved=False,
        ).first()

    def later(self, habit: ResolvedHabit, date: str) -> None:
        # one open reminder per habit per day
        if self._open(habit.id, date):
            return
        self.db.add(Notification(
            user_id=self.user_id, type="later",
            title=f"{habit.icon or ''} {habit.name} is still pending".strip(),
            message="You said later. Log it before the day ends to keep the streak.",
            reference_type="habit", reference_id=habit.id, reference_date=date,
        ))
        self.db.flush()

    def resolved(self, habit: ResolvedHabit, date: str) -> None:
        n = self._open(habit.id, date)
        if n:
            n.is_resolved = True
            self.db.flush()


class EscalationService:
    @staticmethod
    def get_all(db: Session, user_id: int, unread_only: bool = False) -> list:
        try:
            query = db.query(Notification).filter_by(user_id=user_id)
            if unread_only:
                query = query.filter_by(is_read=False)
            return query.order_by(Notification.created_at.desc()).all()
        except Exception as e:
            logger.error(f"Failed to list notifications for user {user_id}: {e}")
            return []

    @staticmethod
    def mark_read(db: Session, user_id: int, notification_id: int) -> bool:
        try:
            n = db.query(Notification).filter_by(id=notification_id, user_id=user_id).first()
            if not n:
                return False
            n.is_read = True
            db.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to mark notification {notification_id} read: {e}")
            db.rollback()
            return False
