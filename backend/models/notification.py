from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey
from database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(50), nullable=False)  # later/reminder/streak
    title = Column(String(300), nullable=False)
    message = Column(Text, nullable=False)
    reference_type = Column(String(50), nullable=True)  # habit
    reference_id = Column(String(36), nullable=True)
    reference_date = Column(String(10), nullable=True)  # YYYY-MM-DD
    is_read = Column(Boolean, default=False)
    is_resolved = Column(Boolean, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
