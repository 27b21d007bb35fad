"""
domain.py — Check-in state types
Pydantic models for the per-user state blob (day logs, streaks, XP, sprints),
the resolved habit catalog, user settings and the check-in result.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

HabitCategory = Literal["binary", "measured", "bad"]
HabitStack = Literal["morning", "midday", "evening"]
LogStatus = Literal["done", "missed", "later"]  # None means unset
SprintIntensity = Literal["moderate", "intense", "critical"]
SprintStatus = Literal["active", "completed", "cancelled"]

STACKS: tuple[str, ...] = ("morning", "midday", "evening")


# ── Habit catalog ─────────────────────────────────────────────────
class ResolvedHabit(BaseModel):
    id: str
    slug: str
    name: str = ""
    category: HabitCategory = "binary"
    stack: HabitStack = "morning"
    unit: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    is_bare_minimum: bool = False
    is_active: bool = True
    current_level: int = 1


class HabitOverride(BaseModel):
    stack: Optional[HabitStack] = None
    is_bare_minimum: Optional[bool] = None
    is_active: Optional[bool] = None
    current_level: Optional[int] = None
    sort_order: Optional[int] = None


class ChainItem(BaseModel):
    id: str
    type: Literal["habit", "anchor"] = "habit"
    habit_id: Optional[str] = None  # only for type=habit
    label: Optional[str] = None     # only for type=anchor (e.g. "Wake", "Phone down")
    icon: Optional[str] = None


class DeferredHabit(BaseModel):
    habit_id: str
    from_stack: HabitStack
    to_stack: HabitStack
    date: str  # YYYY-MM-DD, ignored on any other day


class Quote(BaseModel):
    id: str
    text: str
    category: Literal["prompt", "rule", "liner", "strong_thought"] = "liner"
    is_default: bool = False


class UserSettings(BaseModel):
    habit_overrides: dict[str, HabitOverride] = Field(default_factory=dict)
    routine_chains: dict[str, list[ChainItem]] = Field(
        default_factory=lambda: {s: [] for s in STACKS}
    )
    checkin_times: dict[str, str] = Field(
        default_factory=lambda: {"morning": "07:00", "midday": "13:00", "evening": "21:00"}
    )
    custom_quotes: list[Quote] = Field(default_factory=list)
    hidden_quote_ids: list[str] = Field(default_factory=list)
    deferred: list[DeferredHabit] = Field(default_factory=list)


# ── Day logs ──────────────────────────────────────────────────────
class HabitEntry(BaseModel):
    status: Optional[LogStatus] = None
    value: Optional[float] = None


class BadHabitEntry(BaseModel):
    occurred: Optional[bool] = None
    duration_minutes: Optional[int] = None


class AdminTaskSnapshot(BaseModel):
    title: str
    completed: bool = False


class AdminSummary(BaseModel):
    total: int = 0
    completed: int = 0
    tasks: list[AdminTaskSnapshot] = Field(default_factory=list)


class DayLog(BaseModel):
    date: str  # YYYY-MM-DD, treated as an opaque key
    entries: dict[str, HabitEntry] = Field(default_factory=dict)
    bad_entries: dict[str, BadHabitEntry] = Field(default_factory=dict)
    admin_summary: Optional[AdminSummary] = None
    xp_earned: int = 0
    bare_minimum_met: bool = False
    submitted_at: str = ""


# ── Sprints ───────────────────────────────────────────────────────
class SprintData(BaseModel):
    id: str
    name: str
    intensity: SprintIntensity = "moderate"
    start_date: str
    deadline: str
    status: SprintStatus = "active"
    bare_minimum_days_met: int = 0
    completed_at: Optional[str] = None


class SprintContext(BaseModel):
    active: bool = False
    intensity: Optional[SprintIntensity] = None
    name: Optional[str] = None
    bare_minimum_only: bool = False  # intense + critical: only prompt bare minimum habits
    single_checkin: bool = False     # critical: collapse all stacks into one check-in
    protect_streaks: bool = False    # critical: misses don't break streaks
    target_multiplier: float = 1.0


# ── Aggregate root ────────────────────────────────────────────────
class LocalState(BaseModel):
    total_xp: int = 0
    current_level: int = 1
    streaks: dict[str, int] = Field(default_factory=dict)  # habit slug -> current streak days
    bare_minimum_streak: int = 0
    logs: list[DayLog] = Field(default_factory=list)
    active_sprint: Optional[SprintData] = None
    sprint_history: list[SprintData] = Field(default_factory=list)


# ── Check-in result ───────────────────────────────────────────────
class StreakUpdate(BaseModel):
    slug: str
    name: str
    icon: str = ""
    days: int


class SubmissionResult(BaseModel):
    date: str
    xp_delta: int
    day_xp: int
    total_xp: int
    level: int
    level_title: str
    streak_updates: list[StreakUpdate] = Field(default_factory=list)
    bare_minimum_met: bool = False
    bare_minimum_streak: int = 0
    day_complete: bool = False
    is_perfect: bool = False
    quote: Optional[str] = None
