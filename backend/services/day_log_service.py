"""
day_log_service.py — Day log store
One DayLog per calendar date. Partial submissions (one stack at a time) merge
into the same record key-by-key; last write wins per habit.
"""

from datetime import date as date_cls, datetime, timedelta, timezone

from domain import AdminSummary, BadHabitEntry, DayLog, HabitEntry, LocalState


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def today_str() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class DayLogService:
    @staticmethod
    def merge_entries(
        existing: DayLog | None,
        new_entries: dict[str, HabitEntry],
        new_bad_entries: dict[str, BadHabitEntry],
        date: str,
        now: str | None = None,
        admin_summary: AdminSummary | None = None,
    ) -> DayLog:
        """Overlay a submission onto the day's log. The existing log is not mutated."""
        stamp = now or now_iso()
        if existing is None:
            return DayLog(
                date=date,
                entries={k: v.model_copy() for k, v in new_entries.items()},
                bad_entries={k: v.model_copy() for k, v in new_bad_entries.items()},
                admin_summary=admin_summary,
                xp_earned=0,
                bare_minimum_met=False,
                submitted_at=stamp,
            )

        entries = {k: v.model_copy() for k, v in existing.entries.items()}
        entries.update({k: v.model_copy() for k, v in new_entries.items()})
        bad_entries = {k: v.model_copy() for k, v in existing.bad_entries.items()}
        bad_entries.update({k: v.model_copy() for k, v in new_bad_entries.items()})

        return existing.model_copy(update={
            "entries": entries,
            "bad_entries": bad_entries,
            "admin_summary": admin_summary if admin_summary is not None else existing.admin_summary,
            "submitted_at": stamp,
        })

    @staticmethod
    def find_log(state: LocalState, date: str) -> DayLog | None:
        for log in state.logs:
            if log.date == date:
                return log
        return None

    @staticmethod
    def upsert_log(state: LocalState, log: DayLog) -> None:
        """Replace the log for log.date in place, or append it. Logs stay sorted by date."""
        for i, existing in enumerate(state.logs):
            if existing.date == log.date:
                state.logs[i] = log
                return
        state.logs.append(log)
        state.logs.sort(key=lambda l: l.date)

    @staticmethod
    def merge_day_logs(a: DayLog, b: DayLog) -> DayLog:
        """Reconcile two copies of the same day (e.g. local vs mirrored)."""
        entries = {k: v.model_copy() for k, v in a.entries.items()}
        for habit_id, entry in b.entries.items():
            current = entries.get(habit_id)
            if current is None or (current.status is None and entry.status is not None):
                entries[habit_id] = entry.model_copy()

        bad_entries = {k: v.model_copy() for k, v in a.bad_entries.items()}
        for habit_id, entry in b.bad_entries.items():
            current = bad_entries.get(habit_id)
            if current is None or (current.occurred is None and entry.occurred is not None):
                bad_entries[habit_id] = entry.model_copy()

        summary = a.admin_summary
        if b.admin_summary is not None and (summary is None or b.admin_summary.total > summary.total):
            summary = b.admin_summary

        return DayLog(
            date=a.date,
            entries=entries,
            bad_entries=bad_entries,
            admin_summary=summary,
            xp_earned=max(a.xp_earned, b.xp_earned),
            bare_minimum_met=a.bare_minimum_met or b.bare_minimum_met,
            submitted_at=max(a.submitted_at, b.submitted_at),
        )

    # ------------------------------------------------------------------
    # Windows
    # ------------------------------------------------------------------
    @staticmethod
    def logs_between(state: LocalState, start: str, end: str) -> list[DayLog]:
        """Logs with start <= date <= end (ISO strings compare chronologically)."""
        return [l for l in state.logs if start <= l.date <= end]

    @staticmethod
    def week_logs(state: LocalState, today: date_cls | None = None) -> list[DayLog]:
        """Logs of the current Sunday-based week."""
        d = today or datetime.now(timezone.utc).date()
        week_start = d - timedelta(days=(d.weekday() + 1) % 7)
        return DayLogService.logs_between(state, week_start.isoformat(), d.isoformat())

    @staticmethod
    def month_logs(state: LocalState, today: date_cls | None = None) -> list[DayLog]:
        d = today or datetime.now(timezone.utc).date()
        return DayLogService.logs_between(state, d.replace(day=1).isoformat(), d.isoformat())
