from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from database import Base


class AdminTask(Base):
    __tablename__ = "admin_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(300), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD — the day this task is for
    source = Column(String(20), default="adhoc")  # adhoc/planned
    completed = Column(Boolean, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
