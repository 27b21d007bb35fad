from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from services.escalation_service import EscalationService


router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


def _to_dict(n) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "reference_type": n.reference_type,
        "reference_id": n.reference_id,
        "reference_date": n.reference_date,
        "is_read": bool(n.is_read),
        "is_resolved": bool(n.is_resolved),
        "created_at": str(n.created_at or ""),
    }


@router.get("")
async def list_notifications(unread_only: bool = False, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Fetch notifications for the user, newest first."""
    return [_to_dict(n) for n in EscalationService.get_all(db, user_id, unread_only)]


@router.put("/{notification_id}/read")
async def mark_as_read(notification_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Mark a notification as read."""
    if not EscalationService.mark_read(db, user_id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "success"}
