"""Service for detecting scheduling conflicts between sessions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from agenda.domain.models import ConflictReport, Session, SessionCandidate
from agenda.errors import InvalidSessionError
from agenda.repos.base import SessionStore

logger = logging.getLogger(__name__)


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval intersection: touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def find_conflicts(
    new_start: datetime,
    new_end: datetime,
    existing_sessions: list[Session],
) -> list[Session]:
    """Return existing sessions that overlap with the given time range.

    Overlap rule: conflict if new_start < existing.end_time AND existing.start_time < new_end.
    Exact boundary touches (end == start) are NOT considered conflicts.
    """
    return [
        session
        for session in existing_sessions
        if overlaps(new_start, new_end, session.start_time, session.end_time)
    ]


def shares_resource(candidate: SessionCandidate, session: Session) -> bool:
    """True if the session uses the candidate's stage or any of its speakers."""
    return session.stage == candidate.stage or not candidate.speaker_ids.isdisjoint(
        session.speaker_ids
    )


def _coerce_candidate(candidate: SessionCandidate | Mapping[str, Any]) -> SessionCandidate:
    if isinstance(candidate, SessionCandidate):
        return candidate
    try:
        return SessionCandidate.model_validate(candidate)
    except ValidationError as exc:
        raise InvalidSessionError(
            "Invalid session candidate", context={"errors": exc.errors(include_url=False)}
        ) from exc


class ConflictDetector:
    """Finds active sessions that collide with a candidate session.

    A collision is an overlapping time window on the same stage, or an
    overlapping time window sharing at least one speaker.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def detect(self, candidate: SessionCandidate | Mapping[str, Any]) -> ConflictReport:
        candidate = _coerce_candidate(candidate)

        # 1. Superset retrieval: same stage OR shared speaker, never the excluded id
        retrieved = self.store.find_active(
            stage_equals=candidate.stage,
            speaker_ids_intersects=candidate.speaker_ids,
            exclude_id=candidate.exclude_id,
        )

        # 2. Temporal filter
        overlapping = find_conflicts(candidate.start_time, candidate.end_time, retrieved)

        # 3. Re-verify the resource match; drop the excluded id again in case the
        #    store ignored it
        conflicts = [
            s
            for s in overlapping
            if shares_resource(candidate, s)
            and (candidate.exclude_id is None or s.id != candidate.exclude_id)
        ]
        conflicts.sort(key=lambda s: (s.start_time, s.stage))

        logger.debug(
            "Conflict check stage=%s window=%s..%s speakers=%d retrieved=%d conflicts=%d",
            candidate.stage,
            candidate.start_time.isoformat(),
            candidate.end_time.isoformat(),
            len(candidate.speaker_ids),
            len(retrieved),
            len(conflicts),
        )
        return ConflictReport.from_conflicts(conflicts)


def detect_conflicts(
    candidate: SessionCandidate | Mapping[str, Any], store: SessionStore
) -> ConflictReport:
    """Shortcut for ``ConflictDetector(store).detect(candidate)``."""
    return ConflictDetector(store).detect(candidate)
