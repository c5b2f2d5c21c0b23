"""Session lifecycle: every write that can move a session is conflict-checked first."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from agenda.domain.models import (
    ConflictReport,
    Session,
    SessionCandidate,
    SessionCreate,
    SessionUpdate,
)
from agenda.errors import InvalidSessionError, SessionConflictError, SessionNotFoundError
from agenda.repos.base import SessionStore
from agenda.services.conflicts import ConflictDetector

logger = logging.getLogger(__name__)


def _build_session(data: dict[str, Any]) -> Session:
    try:
        return Session.model_validate(data)
    except ValidationError as exc:
        raise InvalidSessionError(
            "Invalid session", context={"errors": exc.errors(include_url=False)}
        ) from exc


class SessionService:
    """Creates, edits, soft-deletes and restores sessions."""

    def __init__(self, store: SessionStore, detector: ConflictDetector | None = None) -> None:
        self.store = store
        self.detector = detector or ConflictDetector(store)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, session_id: str, include_deleted: bool = False) -> Session:
        session = self.store.get(session_id)
        if session is None or (session.is_deleted and not include_deleted):
            raise SessionNotFoundError(session_id)
        return session

    def list_sessions(
        self,
        stage: str | None = None,
        speaker_id: str | None = None,
        include_deleted: bool = False,
    ) -> list[Session]:
        """Return sessions sorted by start time, narrowed by the given filters."""
        sessions = [
            s
            for s in self.store.list_all()
            if (include_deleted or not s.is_deleted)
            and (stage is None or s.stage == stage)
            and (speaker_id is None or speaker_id in s.speaker_ids)
        ]
        return sorted(sessions, key=lambda s: (s.start_time, s.stage))

    def check(self, candidate: SessionCandidate) -> ConflictReport:
        return self.detector.detect(candidate)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: SessionCreate) -> Session:
        session = _build_session(payload.model_dump())
        self._ensure_no_conflicts(session)
        self.store.add(session)
        logger.info("Created session %s on %s", session.id, session.stage)
        return session

    def update(self, session_id: str, payload: SessionUpdate) -> Session:
        current = self.get(session_id)
        changes = payload.model_dump(exclude_unset=True)
        updated = _build_session(
            {
                **current.model_dump(),
                **changes,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._ensure_no_conflicts(updated)
        self.store.update(updated)
        logger.info("Updated session %s (%s)", session_id, ", ".join(sorted(changes)))
        return updated

    def soft_delete(
        self,
        session_id: str,
        deleted_by: str | None = None,
        reason: str | None = None,
    ) -> Session:
        session = self.get(session_id)
        deleted = session.model_copy(
            update={
                "deleted_at": datetime.now(timezone.utc),
                "deleted_by": deleted_by,
                "delete_reason": reason,
            }
        )
        self.store.update(deleted)
        logger.info("Soft-deleted session %s", session_id)
        return deleted

    def restore(self, session_id: str) -> Session:
        session = self.get(session_id, include_deleted=True)
        if not session.is_deleted:
            return session

        # The slot may have been taken while the session was deleted
        self._ensure_no_conflicts(session)
        restored = session.model_copy(
            update={
                "deleted_at": None,
                "deleted_by": None,
                "delete_reason": None,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self.store.update(restored)
        logger.info("Restored session %s", session_id)
        return restored

    def _ensure_no_conflicts(self, session: Session) -> None:
        report = self.detector.detect(SessionCandidate.from_session(session))
        if report.has_conflicts:
            logger.info(
                "Refused write for session %s: conflicts with %s",
                session.id,
                [s.id for s in report.conflicts],
            )
            raise SessionConflictError(report)
