from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from database import Base


class UserState(Base):
    __tablename__ = "user_states"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    state_json = Column(Text, nullable=False)  # JSON — whole LocalState blob, replaced atomically
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
