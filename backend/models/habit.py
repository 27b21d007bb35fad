from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(36), primary_key=True)  # uuid4 string, stable for the habit's lifetime
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False)  # streak key — never changes once in use
    category = Column(String(20), nullable=False, default="binary")  # binary/measured/bad
    stack = Column(String(20), nullable=False, default="morning")  # morning/midday/evening
    unit = Column(String(20), nullable=True)  # e.g. "minutes", "count", "1-5", "1-10"
    icon = Column(String(10), nullable=True)  # emoji
    sort_order = Column(Integer, default=0)
    is_bare_minimum = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    current_level = Column(Integer, default=1)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_habit_user_slug"),
    )
