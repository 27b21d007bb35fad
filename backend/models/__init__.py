# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.habit import Habit
from models.user_state import UserState
from models.admin_task import AdminTask
from models.notification import Notification

__all__ = [
    "User",
    "Habit",
    "UserState",
    "AdminTask",
    "Notification",
]
