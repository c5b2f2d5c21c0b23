"""FastAPI application: entry point for the agenda scheduling service."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, HTTPException

from agenda.config import config
from agenda.domain.models import (
    ConflictReport,
    ReorderTiersRequest,
    Session,
    SessionCandidate,
    SessionCreate,
    SessionUpdate,
    SponsorTier,
    SponsorTierCreate,
)
from agenda.errors import (
    DuplicateOrderError,
    DuplicateTierError,
    InvalidReorderError,
    InvalidSessionError,
    NotFoundError,
    SessionConflictError,
)
from agenda.logging_config import configure_logging
from agenda.repos.memory import create_session_repository, create_tier_repository
from agenda.services.sessions import SessionService
from agenda.services.tiers import TierService

logger = logging.getLogger(__name__)

app = FastAPI(title="Agenda Scheduling Service")

# ── Singletons (created at import time for simplicity) ────────────────
session_repo = create_session_repository(seed=config.seed_data)
tier_repo = create_tier_repository(seed=config.seed_data)

session_service = SessionService(session_repo)
tier_service = TierService(tier_repo)


def _conflict_response(exc: SessionConflictError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": exc.message,
            **exc.report.model_dump(mode="json"),
        },
    )


# ── Sessions ──────────────────────────────────────────────────────────


@app.post("/sessions/check-conflicts", response_model=ConflictReport)
def check_conflicts(candidate: SessionCandidate) -> ConflictReport:
    """Report the active sessions a proposed time/stage/speaker set collides with."""
    return session_service.check(candidate)


@app.post("/sessions", response_model=Session, status_code=201)
def create_session(payload: SessionCreate) -> Session:
    """Create a session unless it collides with an existing one."""
    try:
        return session_service.create(payload)
    except InvalidSessionError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
    except SessionConflictError as exc:
        raise _conflict_response(exc)


@app.get("/sessions", response_model=list[Session])
def list_sessions(
    stage: str | None = None,
    speaker_id: str | None = None,
    include_deleted: bool = False,
) -> list[Session]:
    return session_service.list_sessions(
        stage=stage, speaker_id=speaker_id, include_deleted=include_deleted
    )


@app.get("/sessions/{session_id}", response_model=Session)
def get_session(session_id: str) -> Session:
    try:
        return session_service.get(session_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


@app.patch("/sessions/{session_id}", response_model=Session)
def update_session(session_id: str, payload: SessionUpdate) -> Session:
    """Apply a partial update; the edited session never conflicts with itself."""
    try:
        return session_service.update(session_id, payload)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except InvalidSessionError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
    except SessionConflictError as exc:
        raise _conflict_response(exc)


@app.delete("/sessions/{session_id}")
def delete_session(
    session_id: str, reason: str | None = None, deleted_by: str | None = None
) -> dict:
    """Soft-delete a session; it stops taking part in conflict checks."""
    try:
        session_service.soft_delete(session_id, deleted_by=deleted_by, reason=reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted", "id": session_id}


@app.post("/sessions/{session_id}/restore", response_model=Session)
def restore_session(session_id: str) -> Session:
    try:
        return session_service.restore(session_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except SessionConflictError as exc:
        raise _conflict_response(exc)


# ── Sponsor tiers ─────────────────────────────────────────────────────


@app.get("/sponsors/tiers", response_model=list[SponsorTier])
def list_tiers() -> list[SponsorTier]:
    """Return all sponsor tiers by ascending order."""
    return tier_service.list_tiers()


@app.post("/sponsors/tiers", response_model=SponsorTier, status_code=201)
def create_tier(payload: SponsorTierCreate) -> SponsorTier:
    try:
        return tier_service.create_tier(payload)
    except (DuplicateOrderError, DuplicateTierError) as exc:
        raise HTTPException(status_code=409, detail=exc.message)


@app.patch("/sponsors/tiers/reorder", response_model=list[SponsorTier])
def reorder_tiers(body: ReorderTiersRequest) -> list[SponsorTier]:
    """Give ``tier_ids[i]`` the order ``i + 1``."""
    try:
        return tier_service.reorder_tiers(body.tier_ids)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail={"message": "Sponsor tier not found", **exc.context},
        )
    except InvalidReorderError as exc:
        raise HTTPException(status_code=400, detail=exc.message)


@app.get("/sponsors/tiers/{tier_id}", response_model=SponsorTier)
def get_tier(tier_id: str) -> SponsorTier:
    try:
        return tier_service.get_tier(tier_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Sponsor tier not found")


@app.delete("/sponsors/tiers/{tier_id}", status_code=204)
def delete_tier(tier_id: str) -> None:
    """Remove a tier; the remaining orders are left as they are."""
    try:
        tier_service.delete_tier(tier_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Sponsor tier not found")


def main() -> None:
    """Run the service with uvicorn."""
    configure_logging(config.log_level)
    logger.info("Starting agenda service on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
