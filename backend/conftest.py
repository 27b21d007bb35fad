import os
import tempfile

# Point the app at a throwaway SQLite file before config/database are imported
_tmp_dir = tempfile.mkdtemp(prefix="tracker-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["STATE_MIRROR_ENABLED"] = "false"

import pytest

from database import Base, SessionLocal, init_db
from domain import ResolvedHabit

init_db()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture
def user(db):
    from models.user import User
    u = User(username="tester", hashed_password="x")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def make_habit():
    def _make(slug, category="binary", stack="morning", is_bare_minimum=False, is_active=True, sort_order=0, id=None):
        return ResolvedHabit(
            id=id or f"id-{slug}",
            slug=slug,
            name=slug.replace("-", " ").title(),
            category=category,
            stack=stack,
            sort_order=sort_order,
            is_bare_minimum=is_bare_minimum,
            is_active=is_active,
        )
    return _make


@pytest.fixture
def catalog(make_habit):
    """One bare-minimum binary habit and one bad habit."""
    return [
        make_habit("prayer", is_bare_minimum=True),
        make_habit("league", category="bad", stack="evening"),
    ]


@pytest.fixture
def small_xp():
    return {
        "BARE_MINIMUM_HABIT": 10,
        "STRETCH_HABIT": 15,
        "LOG_BAD_HABIT_HONESTLY": 1,
        "ZERO_BAD_HABIT_DAY": 5,
        "ALL_BARE_MINIMUM": 20,
        "PERFECT_DAY": 0,
        "STREAK_MILESTONE": 200,
        "ADMIN_TASK_CLEARED": 5,
        "ADMIN_ALL_CLEARED": 25,
    }


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from main import app
    with TestClient(app) as c:
        yield c
