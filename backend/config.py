import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Database ---
# Default to local SQLite, but prefer environment variable (for Supabase Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/tracker.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Supabase mirror (optional remote copy of the state blob) ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
STATE_MIRROR_ENABLED = os.getenv("STATE_MIRROR_ENABLED", "false").lower() in ("1", "true", "yes")
STATE_MIRROR_TABLE = os.getenv("STATE_MIRROR_TABLE", "user_states")

# --- XP economy ---
# Each amount can be overridden with XP_<NAME>, e.g. XP_PERFECT_DAY=150
_XP_DEFAULTS = {
    "BARE_MINIMUM_HABIT": 10,
    "STRETCH_HABIT": 15,
    "LOG_BAD_HABIT_HONESTLY": 5,
    "ZERO_BAD_HABIT_DAY": 15,
    "ALL_BARE_MINIMUM": 50,
    "PERFECT_DAY": 100,
    "STREAK_MILESTONE": 200,
    "ADMIN_TASK_CLEARED": 5,
    "ADMIN_ALL_CLEARED": 25,
}
XP_VALUES = {k: int(os.getenv(f"XP_{k}", str(v))) for k, v in _XP_DEFAULTS.items()}

STREAK_MILESTONES = [int(x) for x in os.getenv("STREAK_MILESTONES", "7,14,30,60,90").split(",") if x.strip()]

# --- Admin tasks ---
ADMIN_TASK_RETENTION_DAYS = int(os.getenv("ADMIN_TASK_RETENTION_DAYS", "7"))
