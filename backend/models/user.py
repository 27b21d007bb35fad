from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    settings = Column(Text, nullable=True)  # JSON string — UserSettings (overrides, routine chains, quotes)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
