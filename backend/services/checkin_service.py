"""
checkin_service.py — Check-in submission
Runs one submission against the user's state, in a fixed order:
merge entries -> recompute day XP -> apply XP delta -> recompute streaks.
The caller loads the state before and saves it after.
"""

import logging
import random

from domain import (
    AdminSummary, BadHabitEntry, DayLog, HabitEntry, LocalState, ResolvedHabit,
    StreakUpdate, SubmissionResult, UserSettings,
)
from config import STREAK_MILESTONES
from services.day_log_service import DayLogService
from services.escalation_service import EscalationListener
from services.habit_service import HabitService
from services.quote_service import QuoteService
from services.sprint_service import SprintService
from services.streak_service import StreakService
from services.xp_service import XPService

logger = logging.getLogger(__name__)


class CheckinService:
    @staticmethod
    def submit_checkin(
        state: LocalState,
        date: str,
        entries: dict[str, HabitEntry],
        bad_entries: dict[str, BadHabitEntry],
        habits: list[ResolvedHabit],
        admin_summary: AdminSummary | None = None,
        escalation: EscalationListener | None = None,
        settings: UserSettings | None = None,
        now: str | None = None,
        today=None,
        rng: random.Random | None = None,
    ) -> tuple[DayLog, SubmissionResult]:
        """Merge a (possibly partial) submission into the day and recalculate. Mutates `state`."""
        existing = DayLogService.find_log(state, date)
        old_day_xp = existing.xp_earned if existing else 0

        merged = DayLogService.merge_entries(existing, entries, bad_entries, date, now=now, admin_summary=admin_summary)
        return CheckinService._recalculate(
            state, merged, old_day_xp, entries, habits, escalation, settings, today, rng,
        )

    @staticmethod
    def edit_day_log(
        state: LocalState,
        date: str,
        entries: dict[str, HabitEntry],
        bad_entries: dict[str, BadHabitEntry],
        habits: list[ResolvedHabit],
        settings: UserSettings | None = None,
        now: str | None = None,
        today=None,
    ) -> tuple[DayLog, SubmissionResult] | None:
        """Overwrite entries of an existing day. None when nothing was logged on that date."""
        existing = DayLogService.find_log(state, date)
        if existing is None:
            return None
        merged = DayLogService.merge_entries(existing, entries, bad_entries, date, now=now)
        return CheckinService._recalculate(
            state, merged, existing.xp_earned, entries, habits, None, settings, today, None,
        )

    @staticmethod
    def _recalculate(state, merged, old_day_xp, submitted, habits, escalation, settings, today, rng):
        active = [h for h in habits if h.is_active]
        date = merged.date

        merged.bare_minimum_met = XPService.is_bare_minimum_met(merged, active)
        DayLogService.upsert_log(state, merged)

        day_xp = XPService.recalculate_day_xp(merged, active) + XPService.milestone_xp(state, date, active)
        merged.xp_earned = day_xp
        delta = XPService.apply_delta(state, old_day_xp, day_xp)
        delta += CheckinService._refresh_later_days(state, date, active)

        state.streaks.update(StreakService.recalculate_streaks(state, HabitService.slugs_by_id(active), today))
        state.bare_minimum_streak = StreakService.recalculate_bare_minimum_streak(state, today)
        if state.active_sprint is not None:
            state.active_sprint.bare_minimum_days_met = SprintService.count_bare_minimum_days(state, state.active_sprint)

        by_id = {h.id: h for h in active}
        if escalation is not None:
            for habit_id, entry in submitted.items():
                habit = by_id.get(habit_id)
                if habit is None:
                    continue
                if entry.status == "later":
                    escalation.later(habit, date)
                elif entry.status in ("done", "missed"):
                    escalation.resolved(habit, date)

        streak_updates = []
        any_miss = False
        for habit_id, entry in submitted.items():
            habit = by_id.get(habit_id)
            if habit is None or habit.category == "bad":
                continue
            if entry.status == "missed":
                any_miss = True
            elif entry.status == "done":
                streak_updates.append(StreakUpdate(
                    slug=habit.slug, name=habit.name, icon=habit.icon or "",
                    days=state.streaks.get(habit.slug, 0),
                ))

        if any_miss:
            context = "after_miss"
        elif any(s.days in STREAK_MILESTONES for s in streak_updates):
            context = "streak_milestone"
        else:
            context = "default"

        level = XPService.get_level_for_xp(state.total_xp)
        result = SubmissionResult(
            date=date,
            xp_delta=delta,
            day_xp=day_xp,
            total_xp=state.total_xp,
            level=level["level"],
            level_title=level["title"],
            streak_updates=streak_updates,
            bare_minimum_met=merged.bare_minimum_met,
            bare_minimum_streak=state.bare_minimum_streak,
            day_complete=CheckinService.is_day_fully_complete(merged, active),
            is_perfect=CheckinService.is_day_perfect(merged, active),
            quote=QuoteService.contextual(context, settings, rng).text,
        )
        logger.info(f"Check-in {date}: day XP {old_day_xp} -> {day_xp} (total {state.total_xp})")
        return merged, result

    @staticmethod
    def _refresh_later_days(state: LocalState, date: str, active: list[ResolvedHabit]) -> int:
        """Milestone XP of later days depends on the chain through `date`; recompute them. Returns the total delta."""
        delta = 0
        for log in state.logs:
            if log.date <= date:
                continue
            new_xp = XPService.recalculate_day_xp(log, active) + XPService.milestone_xp(state, log.date, active)
            if new_xp != log.xp_earned:
                delta += XPService.apply_delta(state, log.xp_earned, new_xp)
                log.xp_earned = new_xp
        return delta

    @staticmethod
    def rebuild(state: LocalState, habits: list[ResolvedHabit], today=None) -> LocalState:
        """Recompute every day's XP, the lifetime total, level and streaks from the logs alone."""
        active = [h for h in habits if h.is_active]
        for log in state.logs:
            log.bare_minimum_met = XPService.is_bare_minimum_met(log, active)
        total = 0
        for log in state.logs:
            log.xp_earned = XPService.recalculate_day_xp(log, active) + XPService.milestone_xp(state, log.date, active)
            total += log.xp_earned
        state.total_xp = total
        state.current_level = XPService.get_level_for_xp(total)["level"]
        state.streaks.update(StreakService.recalculate_streaks(state, HabitService.slugs_by_id(active), today))
        state.bare_minimum_streak = StreakService.recalculate_bare_minimum_streak(state, today)
        if state.active_sprint is not None:
            state.active_sprint.bare_minimum_days_met = SprintService.count_bare_minimum_days(state, state.active_sprint)
        return state

    # ------------------------------------------------------------------
    # Day completion
    # ------------------------------------------------------------------
    @staticmethod
    def is_day_fully_complete(log: DayLog | None, habits: list[ResolvedHabit]) -> bool:
        """Every active habit answered: binary done/missed, measured has a value, bad logged."""
        if log is None:
            return False
        for h in habits:
            if not h.is_active:
                continue
            if h.category == "binary":
                entry = log.entries.get(h.id)
                if entry is None or entry.status not in ("done", "missed"):
                    return False
            elif h.category == "measured":
                entry = log.entries.get(h.id)
                if entry is None or entry.value is None:
                    return False
            else:
                bad = log.bad_entries.get(h.id)
                if bad is None or bad.occurred is None:
                    return False
        return True

    @staticmethod
    def is_day_perfect(log: DayLog | None, habits: list[ResolvedHabit]) -> bool:
        return XPService.is_perfect(log, [h for h in habits if h.is_active])

    @staticmethod
    def day_stats(log: DayLog | None, habits: list[ResolvedHabit]) -> dict:
        active = [h for h in habits if h.is_active]
        binary = [h for h in active if h.category == "binary"]
        completed = 0
        if log is not None:
            completed = sum(1 for h in binary if (e := log.entries.get(h.id)) is not None and e.status == "done")
        return {
            "habits_completed": completed,
            "habits_total": len(binary),
            "xp_earned": log.xp_earned if log else 0,
            "bare_minimum_met": log.bare_minimum_met if log else False,
            "is_perfect": CheckinService.is_day_perfect(log, active),
            "day_complete": CheckinService.is_day_fully_complete(log, active),
        }
