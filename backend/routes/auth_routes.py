# ---------- routes/auth_routes.py ----------
"""
Auth routes: register (seeds the default habit catalog), login, me.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, create_token, get_current_user
from database import get_db
from models.user import User
from services.habit_service import HabitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class AuthRequest(BaseModel):
    username: str
    password: str


# ── Routes ────────────────────────────────────────────────────────
@router.post("/register")
async def register(body: AuthRequest, db: Session = Depends(get_db)):
    """Create an account and seed its habit catalog."""
    try:
        if db.query(User).filter_by(username=body.username).first():
            raise HTTPException(status_code=400, detail="Username already taken")

        user = User(username=body.username, hashed_password=hash_password(body.password))
        db.add(user)
        db.commit()
        db.refresh(user)

        HabitService.seed_defaults(db, user.id)
        token = create_token(user.id, user.username)
        logger.info(f"Registered user {user.username}")

        return {"status": "success", "data": {"token": token, "username": user.username}}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/login")
async def login(body: AuthRequest, db: Session = Depends(get_db)):
    """Authenticate with username + password."""
    user = db.query(User).filter_by(username=body.username).first()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_token(user.id, user.username)
    return {"status": "success", "data": {"token": token, "username": user.username}}


@router.get("/me")
async def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the current user's profile from the token."""
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {
        "status": "success",
        "data": {
            "id": user.id,
            "username": user.username,
            "created_at": str(user.created_at or ""),
        },
    }
