"""
xp_service.py — XP recalculation
A day's XP is always recomputed from the full day log, never incremented, so
re-submitting or editing a day can't double-count. The lifetime total moves
by the difference between the fresh and the previous day value.
"""

from config import XP_VALUES, STREAK_MILESTONES
from domain import DayLog, LocalState, ResolvedHabit
from services.streak_service import StreakService

LEVELS = [
    (1,  "Beginner",          0),
    (2,  "Showing Up",        500),
    (3,  "Building Momentum", 1200),
    (4,  "Forming Habits",    2500),
    (5,  "Consistent",        4500),
    (6,  "Dedicated",         7500),
    (7,  "Disciplined",       11500),
    (8,  "Relentless",        17000),
    (9,  "Atomic",            24000),
    (10, "Unshakeable",       33000),
    (11, "Identity Shift",    45000),
    (12, "The Standard",      60000),
    (13, "Elite",             80000),
    (14, "Legendary",         105000),
    (15, "Transcendent",      140000),
]


class XPService:
    @staticmethod
    def is_bare_minimum_met(log: DayLog | None, habits: list[ResolvedHabit]) -> bool:
        """Every active bare-minimum habit (binary or measured) is marked done. False when there are none."""
        if log is None:
            return False
        bare_min = [h for h in habits if h.is_active and h.is_bare_minimum and h.category != "bad"]
        if not bare_min:
            return False
        return all(
            (entry := log.entries.get(h.id)) is not None and entry.status == "done"
            for h in bare_min
        )

    @staticmethod
    def is_perfect(log: DayLog | None, habits: list[ResolvedHabit]) -> bool:
        """All binary habits done, every bad habit logged clean, and bare minimum met."""
        if log is None or not XPService.is_bare_minimum_met(log, habits):
            return False
        active = [h for h in habits if h.is_active]
        for h in active:
            if h.category == "binary":
                entry = log.entries.get(h.id)
                if entry is None or entry.status != "done":
                    return False
            elif h.category == "bad":
                bad = log.bad_entries.get(h.id)
                if bad is None or bad.occurred is not False:
                    return False
        return True

    @staticmethod
    def recalculate_day_xp(log: DayLog | None, active_habits: list[ResolvedHabit], xp_values: dict | None = None) -> int:
        """Total XP for one day, computed from scratch. Entries for unknown habits are ignored."""
        if log is None:
            return 0
        xp = xp_values or XP_VALUES
        total = 0

        for h in active_habits:
            if not h.is_active:
                continue
            if h.category == "binary":
                entry = log.entries.get(h.id)
                if entry is not None and entry.status == "done":
                    total += xp["BARE_MINIMUM_HABIT"] if h.is_bare_minimum else xp["STRETCH_HABIT"]
            elif h.category == "measured":
                entry = log.entries.get(h.id)
                if entry is not None and entry.value is not None:
                    total += xp["BARE_MINIMUM_HABIT"] if h.is_bare_minimum else xp["STRETCH_HABIT"]
            elif h.category == "bad":
                bad = log.bad_entries.get(h.id)
                if bad is None or bad.occurred is None:
                    continue
                total += xp["LOG_BAD_HABIT_HONESTLY"] if bad.occurred else xp["ZERO_BAD_HABIT_DAY"]

        if XPService.is_bare_minimum_met(log, active_habits):
            total += xp["ALL_BARE_MINIMUM"]
            if XPService.is_perfect(log, active_habits):
                total += xp["PERFECT_DAY"]

        summary = log.admin_summary
        if summary is not None and summary.total > 0:
            total += summary.completed * xp["ADMIN_TASK_CLEARED"]
            if summary.completed >= summary.total:
                total += xp["ADMIN_ALL_CLEARED"]

        return total

    @staticmethod
    def milestone_xp(state: LocalState, date: str, habits: list[ResolvedHabit], xp_values: dict | None = None) -> int:
        """Bonus for every binary habit whose streak ending on `date` lands on a milestone."""
        xp = xp_values or XP_VALUES
        log = next((l for l in state.logs if l.date == date), None)
        if log is None:
            return 0
        bonus = 0
        for h in habits:
            if not h.is_active or h.category != "binary":
                continue
            entry = log.entries.get(h.id)
            if entry is None or entry.status != "done":
                continue
            if StreakService.streak_as_of(state, h.id, date) in STREAK_MILESTONES:
                bonus += xp["STREAK_MILESTONE"]
        return bonus

    @staticmethod
    def get_level_for_xp(xp: int) -> dict:
        current, nxt = LEVELS[0], LEVELS[1]
        for i in range(len(LEVELS) - 1, -1, -1):
            if xp >= LEVELS[i][2]:
                current = LEVELS[i]
                nxt = LEVELS[i + 1] if i + 1 < len(LEVELS) else LEVELS[i]
                break
        return {"level": current[0], "title": current[1], "xp_required": current[2], "next_xp": nxt[2]}

    @staticmethod
    def apply_delta(state: LocalState, old_day_xp: int, new_day_xp: int) -> int:
        """Move the lifetime total by new - old. Returns the delta applied."""
        delta = new_day_xp - old_day_xp
        state.total_xp = max(0, state.total_xp + delta)
        state.current_level = XPService.get_level_for_xp(state.total_xp)["level"]
        return delta
