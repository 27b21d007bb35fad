"""
state_store.py — Persistence for the per-user state blob
The whole LocalState is loaded before a recalculation pass and written back
as one replace afterwards. Optionally mirrored to Supabase.
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

import config
import supabase_rest
from domain import LocalState
from models.user_state import UserState
from services.day_log_service import DayLogService

logger = logging.getLogger(__name__)


class StateStore:
    @staticmethod
    def load(db: Session, user_id: int) -> LocalState:
        """Stored state, or a fresh default when none exists or the blob is unreadable."""
        row = db.query(UserState).filter_by(user_id=user_id).first()
        if not row:
            return LocalState()
        try:
            return LocalState.model_validate(json.loads(row.state_json))
        except Exception as e:
            logger.error(f"Corrupt state blob for user {user_id}, starting from defaults: {e}")
            return LocalState()

    @staticmethod
    def save(db: Session, user_id: int, state: LocalState) -> None:
        """Replace the stored blob. Commits the session (and anything flushed into it)."""
        blob = state.model_dump_json()
        try:
            row = db.query(UserState).filter_by(user_id=user_id).first()
            if row:
                row.state_json = blob
                row.updated_at = datetime.now(timezone.utc)
            else:
                db.add(UserState(user_id=user_id, state_json=blob))
            db.commit()
        except Exception as e:
            logger.error(f"Failed to save state for user {user_id}: {e}")
            db.rollback()
            raise
        StateStore.mirror(user_id, blob)

    @staticmethod
    def mirror(user_id: int, blob: str) -> bool:
        """Push the blob to the remote mirror. Failures are logged, never raised."""
        if not (config.STATE_MIRROR_ENABLED and supabase_rest.is_configured()):
            return False
        try:
            supabase_rest.sb_upsert(config.STATE_MIRROR_TABLE, {
                "user_id": user_id,
                "state": json.loads(blob),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }, on_conflict="user_id")
            return True
        except Exception as e:
            logger.warning(f"State mirror failed for user {user_id}: {e}")
            return False

    @staticmethod
    def reconcile(local: LocalState, remote: LocalState) -> LocalState:
        """Merge a mirrored copy into the local state, day by day. Totals are left to a recalculation."""
        merged = local.model_copy(deep=True)
        for remote_log in remote.logs:
            mine = DayLogService.find_log(merged, remote_log.date)
            if mine is None:
                DayLogService.upsert_log(merged, remote_log.model_copy(deep=True))
            else:
                DayLogService.upsert_log(merged, DayLogService.merge_day_logs(mine, remote_log))
        known = {s.id for s in merged.sprint_history}
        merged.sprint_history.extend(s for s in remote.sprint_history if s.id not in known)
        if merged.active_sprint is None and remote.active_sprint is not None:
            merged.active_sprint = remote.active_sprint
        return merged

    @staticmethod
    def pull_mirror(user_id: int) -> LocalState | None:
        if not supabase_rest.is_configured():
            return None
        try:
            rows = supabase_rest.sb_select(config.STATE_MIRROR_TABLE, filters={"user_id": user_id})
        except Exception as e:
            logger.warning(f"Could not read state mirror for user {user_id}: {e}")
            return None
        if not rows:
            return None
        try:
            return LocalState.model_validate(rows[0].get("state") or {})
        except Exception as e:
            logger.error(f"Mirrored state for user {user_id} is unreadable: {e}")
            return None
