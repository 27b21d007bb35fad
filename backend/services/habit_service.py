"""
habit_service.py — Habit catalog
Seeds the default catalog, stores custom habits, and resolves base definitions
plus per-user overrides into the ordered, active list each check-in stack uses.
"""

import json
import logging
import uuid

from sqlalchemy.orm import Session

from domain import STACKS, ChainItem, DeferredHabit, HabitOverride, ResolvedHabit, UserSettings
from models.habit import Habit
from models.user import User
from services.day_log_service import today_str

logger = logging.getLogger(__name__)


# (name, slug, category, stack, is_bare_minimum, unit, icon, is_active)
DEFAULT_HABITS = [
    # Binary habits
    ("Prayer",            "prayer",            "binary",   "morning", True,  None,      "🙏", True),
    ("Bible Reading",     "bible-reading",     "binary",   "morning", True,  None,      "📖", True),
    ("Journal",           "journal",           "binary",   "morning", True,  None,      "📓", True),
    ("NSDR / Yoga Nidra", "meditation",        "binary",   "midday",  True,  None,      "🧘", True),
    ("Cold Exposure",     "cold-exposure",     "binary",   "morning", True,  None,      "🧊", True),
    ("Keystone Task",     "keystone-task",     "binary",   "morning", True,  None,      "🔑", True),
    ("Tidy Up Space",     "tidy",              "binary",   "midday",  True,  None,      "🏠", True),
    ("Chore",             "chore",             "binary",   "midday",  False, None,      "🧹", True),
    ("Training",          "training",          "binary",   "evening", True,  None,      "💪", True),
    ("Reading",           "reading",           "binary",   "evening", True,  None,      "📚", True),
    ("Meaningful Action", "meaningful-action", "binary",   "evening", False, None,      "🎯", True),
    # Measured habits
    ("Bible Chapters",    "bible-chapters",    "measured", "morning", False, "count",   "📖", True),
    ("Training Minutes",  "training-minutes",  "measured", "evening", False, "minutes", "⏱️", True),
    ("RPE",               "rpe",               "measured", "evening", False, "1-10",    "📊", False),
    ("Deep Work Blocks",  "deep-work",         "measured", "midday",  False, "count",   "🧠", True),
    ("Pages Read",        "pages-read",        "measured", "evening", False, "count",   "📄", True),
    ("Environment Score", "environment-score", "measured", "midday",  False, "1-5",     "🏡", True),
    ("Energy Level",      "energy-level",      "measured", "evening", False, "1-5",     "⚡", True),
    # Bad habits
    ("League of Legends", "league",            "bad",      "evening", False, "minutes", "🎮", True),
    ("Plates Not Washed", "plates",            "bad",      "evening", False, None,      "🍽️", True),
    ("Hygiene Delayed",   "hygiene",           "bad",      "evening", False, None,      "🚿", True),
]


class HabitService:
    # ------------------------------------------------------------------
    # Pure resolution
    # ------------------------------------------------------------------
    @staticmethod
    def resolve(base_habits: list[ResolvedHabit], settings: UserSettings | None) -> list[ResolvedHabit]:
        """Apply user overrides on top of base definitions. id and slug always come from the base."""
        overrides = settings.habit_overrides if settings else {}
        resolved = []
        for position, habit in enumerate(base_habits):
            override = overrides.get(habit.id)
            if override is not None:
                changes = override.model_dump(exclude_none=True)
                habit = habit.model_copy(update=changes)
            resolved.append((habit.sort_order, position, habit))
        resolved.sort(key=lambda t: (t[0], t[1]))
        return [h for _, _, h in resolved]

    @staticmethod
    def by_stack(resolved: list[ResolvedHabit], stack: str) -> list[ResolvedHabit]:
        return [h for h in resolved if h.stack == stack and h.is_active]

    @staticmethod
    def by_chain_order(resolved: list[ResolvedHabit], settings: UserSettings | None, stack: str) -> list[ResolvedHabit]:
        """Habits in routine chain order (if set), then the rest of the stack in sort order."""
        stack_habits = HabitService.by_stack(resolved, stack)
        chain = settings.routine_chains.get(stack, []) if settings else []
        if not chain:
            return stack_habits

        by_id = {h.id: h for h in stack_habits}
        ordered, seen = [], set()
        for item in chain:
            if item.type != "habit" or not item.habit_id:
                continue
            habit = by_id.get(item.habit_id)
            if habit and habit.id not in seen:
                ordered.append(habit)
                seen.add(habit.id)

        ordered.extend(h for h in stack_habits if h.id not in seen)
        return ordered

    @staticmethod
    def checkin_habits(
        resolved: list[ResolvedHabit],
        settings: UserSettings | None,
        stack: str | None,
        today: str | None = None,
    ) -> list[ResolvedHabit]:
        """
        Habits to prompt for one stack, or every stack in order when stack is None (single check-in).
        Today's deferrals move a habit out of its own stack and append it to the target stack.
        """
        day = today or today_str()
        if stack is not None:
            return HabitService._stack_with_deferrals(resolved, settings, stack, day)
        out = []
        for s in STACKS:
            out.extend(HabitService._stack_with_deferrals(resolved, settings, s, day))
        return out

    @staticmethod
    def _stack_with_deferrals(resolved, settings, stack, day):
        deferred = HabitService.active_deferrals(settings, day)
        away = {d.habit_id for d in deferred}
        habits = [h for h in HabitService.by_chain_order(resolved, settings, stack) if h.id not in away]
        by_id = {h.id: h for h in resolved if h.is_active}
        for d in deferred:
            habit = by_id.get(d.habit_id)
            if d.to_stack == stack and habit is not None:
                habits.append(habit)
        return habits

    # ------------------------------------------------------------------
    # Deferrals (today only)
    # ------------------------------------------------------------------
    @staticmethod
    def active_deferrals(settings: UserSettings | None, today: str) -> list[DeferredHabit]:
        if settings is None:
            return []
        return [d for d in settings.deferred if d.date == today]

    @staticmethod
    def deferred_for_stack(settings: UserSettings | None, stack: str, today: str) -> list[DeferredHabit]:
        return [d for d in HabitService.active_deferrals(settings, today) if d.to_stack == stack]

    @staticmethod
    def is_deferred_away(settings: UserSettings | None, habit_id: str, today: str) -> bool:
        return any(d.habit_id == habit_id for d in HabitService.active_deferrals(settings, today))

    @staticmethod
    def add_deferral(settings: UserSettings, habit: ResolvedHabit, to_stack: str, today: str) -> DeferredHabit:
        """Replace any deferral of this habit; stale entries from earlier days are dropped."""
        deferral = DeferredHabit(habit_id=habit.id, from_stack=habit.stack, to_stack=to_stack, date=today)
        kept = [d for d in HabitService.active_deferrals(settings, today) if d.habit_id != habit.id]
        settings.deferred = kept + [deferral]
        return deferral

    @staticmethod
    def remove_deferral(settings: UserSettings, habit_id: str, today: str) -> bool:
        active = HabitService.active_deferrals(settings, today)
        kept = [d for d in active if d.habit_id != habit_id]
        settings.deferred = kept
        return len(kept) != len(active)

    @staticmethod
    def slugs_by_id(habits: list[ResolvedHabit]) -> dict[str, str]:
        return {h.id: h.slug for h in habits if h.is_active}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @staticmethod
    def to_resolved(h: Habit) -> ResolvedHabit:
        return ResolvedHabit(
            id=h.id,
            slug=h.slug,
            name=h.name,
            category=h.category,
            stack=h.stack,
            unit=h.unit,
            icon=h.icon,
            sort_order=h.sort_order or 0,
            is_bare_minimum=bool(h.is_bare_minimum),
            is_active=h.is_active is not False,
            current_level=h.current_level or 1,
        )

    @staticmethod
    def seed_defaults(db: Session, user_id: int) -> int:
        """Insert the default catalog for a new user. Returns the number of habits created."""
        if db.query(Habit).filter_by(user_id=user_id).count() > 0:
            return 0
        for order, (name, slug, category, stack, bare_min, unit, icon, active) in enumerate(DEFAULT_HABITS, start=1):
            db.add(Habit(
                id=str(uuid.uuid4()),
                user_id=user_id,
                name=name,
                slug=slug,
                category=category,
                stack=stack,
                unit=unit,
                icon=icon,
                sort_order=order,
                is_bare_minimum=bare_min,
                is_active=active,
            ))
        db.commit()
        logger.info(f"Seeded {len(DEFAULT_HABITS)} default habits for user {user_id}")
        return len(DEFAULT_HABITS)

    @staticmethod
    def get_base_habits(db: Session, user_id: int) -> list[ResolvedHabit]:
        rows = db.query(Habit).filter_by(user_id=user_id).order_by(Habit.sort_order.asc()).all()
        return [HabitService.to_resolved(h) for h in rows]

    @staticmethod
    def get_settings(db: Session, user_id: int) -> UserSettings:
        user = db.query(User).filter_by(id=user_id).first()
        if not user or not user.settings:
            return UserSettings()
        try:
            return UserSettings.model_validate(json.loads(user.settings))
        except Exception as e:
            logger.warning(f"Unreadable settings for user {user_id}, using defaults: {e}")
            return UserSettings()

    @staticmethod
    def save_settings(db: Session, user_id: int, settings: UserSettings) -> bool:
        try:
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                return False
            user.settings = settings.model_dump_json()
            db.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to save settings for user {user_id}: {e}")
            db.rollback()
            return False

    @staticmethod
    def get_resolved_habits(db: Session, user_id: int, stack: str | None = None) -> list[ResolvedHabit]:
        """All resolved habits, or the active habits of one stack in chain order."""
        settings = HabitService.get_settings(db, user_id)
        resolved = HabitService.resolve(HabitService.get_base_habits(db, user_id), settings)
        if stack is None:
            return resolved
        return HabitService.by_chain_order(resolved, settings, stack)

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> ResolvedHabit:
        """Add a custom habit. Raises ValueError when the slug is already taken."""
        slug = data["slug"]
        if db.query(Habit).filter_by(user_id=user_id, slug=slug).first():
            raise ValueError(f"Habit slug '{slug}' already exists")
        last = db.query(Habit).filter_by(user_id=user_id).order_by(Habit.sort_order.desc()).first()
        h = Habit(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=data["name"],
            slug=slug,
            category=data.get("category", "binary"),
            stack=data.get("stack", "morning"),
            unit=data.get("unit"),
            icon=data.get("icon"),
            sort_order=data.get("sort_order") or ((last.sort_order or 0) + 1 if last else 1),
            is_bare_minimum=data.get("is_bare_minimum", False),
            is_active=data.get("is_active", True),
        )
        try:
            db.add(h)
            db.commit()
            db.refresh(h)
        except Exception:
            db.rollback()
            raise
        return HabitService.to_resolved(h)

    @staticmethod
    def update_override(db: Session, user_id: int, habit_id: str, override: HabitOverride) -> ResolvedHabit | None:
        """Merge an override into the user's settings. Returns the re-resolved habit, or None if unknown."""
        base = db.query(Habit).filter_by(id=habit_id, user_id=user_id).first()
        if not base:
            return None
        settings = HabitService.get_settings(db, user_id)
        current = settings.habit_overrides.get(habit_id, HabitOverride())
        merged = current.model_copy(update=override.model_dump(exclude_none=True))
        settings.habit_overrides[habit_id] = merged
        if not HabitService.save_settings(db, user_id, settings):
            return None
        resolved = HabitService.resolve([HabitService.to_resolved(base)], settings)
        return resolved[0]

    @staticmethod
    def set_routine_chain(db: Session, user_id: int, stack: str, chain: list[ChainItem]) -> bool:
        settings = HabitService.get_settings(db, user_id)
        settings.routine_chains[stack] = chain
        return HabitService.save_settings(db, user_id, settings)

    @staticmethod
    def defer(db: Session, user_id: int, habit_id: str, to_stack: str, today: str | None = None) -> DeferredHabit | None:
        """Move an active habit into another stack for today. None if unknown; ValueError if it already lives there."""
        settings = HabitService.get_settings(db, user_id)
        resolved = HabitService.resolve(HabitService.get_base_habits(db, user_id), settings)
        habit = next((h for h in resolved if h.id == habit_id and h.is_active), None)
        if habit is None:
            return None
        if habit.stack == to_stack:
            raise ValueError(f"Habit is already in the {to_stack} stack")
        deferral = HabitService.add_deferral(settings, habit, to_stack, today or today_str())
        if not HabitService.save_settings(db, user_id, settings):
            return None
        logger.info(f"Deferred {habit.slug} from {habit.stack} to {to_stack} for user {user_id}")
        return deferral

    @staticmethod
    def undefer(db: Session, user_id: int, habit_id: str, today: str | None = None) -> bool:
        settings = HabitService.get_settings(db, user_id)
        if not HabitService.remove_deferral(settings, habit_id, today or today_str()):
            return False
        return HabitService.save_settings(db, user_id, settings)
