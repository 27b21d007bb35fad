"""
streak_service.py — Streak recalculation
Streaks are re-derived from the full log history on every save by scanning
backward day by day, instead of being incremented and reset per submission.
"""

from datetime import date as date_cls, datetime, timedelta, timezone
from typing import Callable

from domain import DayLog, LocalState
from services.sprint_service import SprintService

DONE, OPEN, MISS = "done", "open", "miss"


def _as_date(value) -> date_cls | None:
    if value is None:
        return datetime.now(timezone.utc).date()
    if isinstance(value, date_cls):
        return value
    try:
        return date_cls.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _index_logs(state: LocalState) -> dict[str, DayLog]:
    """Logs keyed by date. Keys that aren't real calendar dates can never be reached by the scan."""
    out = {}
    for log in state.logs:
        if _as_date(log.date) is not None:
            out[log.date] = log
    return out


class StreakService:
    @staticmethod
    def _count_back(
        logs_by_date: dict[str, DayLog],
        end: date_cls,
        check: Callable[[DayLog], str],
        protected: set[str],
        open_end: bool,
    ) -> int:
        """
        Consecutive DONE days walking back from `end`.
        - open_end: `end` itself may still be unanswered (no log / OPEN) without breaking.
        - protected dates turn a non-done day into a skip, but a day with no log still breaks.
        """
        if not logs_by_date:
            return 0
        earliest = min(logs_by_date)
        streak = 0
        d = end
        first = True
        while d.isoformat() >= earliest:
            key = d.isoformat()
            log = logs_by_date.get(key)
            if log is None:
                if not (first and open_end):
                    break
            else:
                result = check(log)
                if result == DONE:
                    streak += 1
                elif first and open_end and result == OPEN:
                    pass
                elif key in protected:
                    pass
                else:
                    break
            first = False
            d -= timedelta(days=1)
        return streak

    @staticmethod
    def _habit_check(habit_id: str) -> Callable[[DayLog], str]:
        def check(log: DayLog) -> str:
            entry = log.entries.get(habit_id)
            # unanswered today may still be done; an explicit "later" is not
            if entry is None or entry.status is None:
                return OPEN
            return DONE if entry.status == "done" else MISS
        return check

    @staticmethod
    def recalculate_streaks(state: LocalState, habit_slugs_by_id: dict[str, str], today=None) -> dict[str, int]:
        """Current streak per slug for every habit in the map; a habit never done gets 0."""
        end = _as_date(today)
        streaks = {slug: 0 for slug in habit_slugs_by_id.values()}
        if end is None:
            return streaks

        logs_by_date = _index_logs(state)
        protected = SprintService.protected_dates(state, end)
        for habit_id, slug in habit_slugs_by_id.items():
            count = StreakService._count_back(
                logs_by_date, end, StreakService._habit_check(habit_id), protected, open_end=True
            )
            # slug collisions merge: keep the longer chain
            streaks[slug] = max(streaks[slug], count)
        return streaks

    @staticmethod
    def streak_as_of(state: LocalState, habit_id: str, date) -> int:
        """Streak of one habit ending exactly on `date`."""
        end = _as_date(date)
        if end is None:
            return 0
        return StreakService._count_back(
            _index_logs(state), end, StreakService._habit_check(habit_id),
            SprintService.protected_dates(state, end), open_end=False,
        )

    @staticmethod
    def recalculate_bare_minimum_streak(state: LocalState, today=None) -> int:
        end = _as_date(today)
        if end is None:
            return 0
        return StreakService._count_back(
            _index_logs(state), end,
            lambda log: DONE if log.bare_minimum_met else OPEN,
            SprintService.protected_dates(state, end), open_end=True,
        )
