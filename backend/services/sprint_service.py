"""
sprint_service.py — Sprint mode
A sprint is a time-boxed push (name + deadline) during which check-ins are
scaled back by intensity. The context is a read-only projection of the active
sprint; lifecycle helpers start and archive sprints inside the state blob.
"""

import logging
import math
import uuid
from datetime import date as date_cls, datetime, timedelta, timezone

from domain import LocalState, ResolvedHabit, SprintContext, SprintData

logger = logging.getLogger(__name__)

# Base daily targets for count/minute habits, shrunk by target_multiplier during a sprint
TARGET_HINTS = {
    "training-minutes": 45,
    "bible-chapters": 2,
    "deep-work": 3,
    "pages-read": 20,
}

MULTIPLIERS = {"moderate": 0.75, "intense": 0.5, "critical": 0.5}


def _parse(value: str | None) -> date_cls | None:
    if not value:
        return None
    try:
        return date_cls.fromisoformat(value[:10])
    except ValueError:
        return None


class SprintService:
    @staticmethod
    def derive_sprint_context(active_sprint: SprintData | None) -> SprintContext:
        if active_sprint is None or active_sprint.status != "active":
            return SprintContext()
        i = active_sprint.intensity
        return SprintContext(
            active=True,
            intensity=i,
            name=active_sprint.name,
            bare_minimum_only=i in ("intense", "critical"),
            single_checkin=i == "critical",
            protect_streaks=i == "critical",
            target_multiplier=MULTIPLIERS[i],
        )

    @staticmethod
    def prompted_habits(habits: list[ResolvedHabit], ctx: SprintContext) -> tuple[list[ResolvedHabit], list[ResolvedHabit]]:
        """(prompted, optional extras). Bad habits stay prompted — they tend to spike under stress."""
        if not ctx.bare_minimum_only:
            return list(habits), []
        prompted, extras = [], []
        for h in habits:
            if h.category == "bad" or h.is_bare_minimum:
                prompted.append(h)
            else:
                extras.append(h)
        return prompted, extras

    @staticmethod
    def scaled_target(slug: str, ctx: SprintContext) -> int | None:
        base = TARGET_HINTS.get(slug)
        if base is None:
            return None
        return int(math.floor(base * ctx.target_multiplier + 0.5))

    @staticmethod
    def protected_dates(state: LocalState, until: date_cls) -> set[str]:
        """Dates (ISO) up to `until` covered by a critical sprint, active or archived."""
        out = set()
        sprints = list(state.sprint_history)
        if state.active_sprint is not None:
            sprints.append(state.active_sprint)
        for s in sprints:
            if s.intensity != "critical":
                continue
            start = _parse(s.start_date)
            if start is None:
                continue
            if s.status == "active":
                end = until
            else:
                end = _parse(s.completed_at) or _parse(s.deadline) or start
            end = min(end, until)
            d = start
            while d <= end:
                out.add(d.isoformat())
                d += timedelta(days=1)
        return out

    @staticmethod
    def is_protected(state: LocalState, date: str) -> bool:
        d = _parse(date)
        if d is None:
            return False
        return date[:10] in SprintService.protected_dates(state, d)

    @staticmethod
    def count_bare_minimum_days(state: LocalState, sprint: SprintData) -> int:
        start = sprint.start_date
        end = sprint.completed_at[:10] if sprint.completed_at else sprint.deadline
        return sum(1 for l in state.logs if start <= l.date <= end and l.bare_minimum_met)

    @staticmethod
    def start_sprint(state: LocalState, name: str, intensity: str, deadline: str, today: str | None = None) -> SprintData:
        """Activate a sprint. Raises ValueError if one is already running or the deadline is unusable."""
        if state.active_sprint is not None and state.active_sprint.status == "active":
            raise ValueError("A sprint is already active")
        start = today or datetime.now(timezone.utc).date().isoformat()
        if _parse(deadline) is None:
            raise ValueError(f"Invalid deadline '{deadline}'")
        if deadline < start:
            raise ValueError("Deadline is before the start date")
        sprint = SprintData(
            id=str(uuid.uuid4()),
            name=name.strip(),
            intensity=intensity,
            start_date=start,
            deadline=deadline,
        )
        state.active_sprint = sprint
        logger.info(f"Sprint '{sprint.name}' started ({intensity}, until {deadline})")
        return sprint

    @staticmethod
    def end_sprint(state: LocalState, status: str = "completed", now: str | None = None) -> SprintData | None:
        """Archive the active sprint into history. Returns the archived sprint, or None if none was active."""
        sprint = state.active_sprint
        if sprint is None:
            return None
        stamp = now or datetime.now(timezone.utc).isoformat()
        archived = sprint.model_copy(update={"status": status, "completed_at": stamp})
        archived.bare_minimum_days_met = SprintService.count_bare_minimum_days(state, archived)
        state.sprint_history.append(archived)
        state.active_sprint = None
        logger.info(f"Sprint '{archived.name}' {status} with {archived.bare_minimum_days_met} bare-minimum days")
        return archived
