"""In-memory repositories for sessions and sponsor tiers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from agenda.domain.models import LocalizedName, Session, SessionType, SponsorTier
from agenda.errors import DuplicateOrderError, DuplicateTierError, TierNotFoundError
from agenda.repos.base import SessionStore, TierStore


class SessionRepository(SessionStore):
    """Dict-backed store for Session instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._store[session.id] = session

    def get(self, session_id: str) -> Session | None:
        return self._store.get(session_id)

    def update(self, session: Session) -> None:
        self._store[session.id] = session

    def list_all(self) -> list[Session]:
        return list(self._store.values())

    def find_active(
        self,
        *,
        stage_equals: str | None = None,
        speaker_ids_intersects: Iterable[str] = (),
        exclude_id: str | None = None,
    ) -> list[Session]:
        speakers = set(speaker_ids_intersects)
        return [
            s
            for s in self._store.values()
            if not s.is_deleted
            and s.id != exclude_id
            and (
                (stage_equals is not None and s.stage == stage_equals)
                or not speakers.isdisjoint(s.speaker_ids)
            )
        ]


class SponsorTierRepository(TierStore):
    """Dict-backed store for SponsorTier instances with unique order and name."""

    def __init__(self) -> None:
        self._store: dict[str, SponsorTier] = {}

    def add(self, tier: SponsorTier) -> None:
        holder = self._holder_of(tier.order, exclude_id=tier.id)
        if holder is not None:
            raise DuplicateOrderError(tier.order, holder.id)
        if any(
            t.name.lower() == tier.name.lower() and t.id != tier.id
            for t in self._store.values()
        ):
            raise DuplicateTierError(
                "Sponsor tier with this name already exists",
                context={"name": tier.name},
            )
        self._store[tier.id] = tier

    def get(self, tier_id: str) -> SponsorTier | None:
        return self._store.get(tier_id)

    def find_by_ids(self, ids: Iterable[str]) -> list[SponsorTier]:
        return [self._store[i] for i in dict.fromkeys(ids) if i in self._store]

    def set_order(self, entity_id: str, order: int) -> None:
        tier = self._store.get(entity_id)
        if tier is None:
            raise TierNotFoundError([entity_id])
        holder = self._holder_of(order, exclude_id=entity_id)
        if holder is not None:
            raise DuplicateOrderError(order, holder.id)
        tier.order = order

    def list_all(self) -> list[SponsorTier]:
        return sorted(self._store.values(), key=lambda t: t.order)

    def next_order(self) -> int:
        """Return the first positive order after the highest one in use."""
        return max((t.order for t in self._store.values()), default=0) + 1

    def delete(self, tier_id: str) -> bool:
        return self._store.pop(tier_id, None) is not None

    def _holder_of(self, order: int, exclude_id: str) -> SponsorTier | None:
        for tier in self._store.values():
            if tier.order == order and tier.id != exclude_id:
                return tier
        return None


# ---------------------------------------------------------------------------
# Seed data – a small conference day and the classic tier ladder
# ---------------------------------------------------------------------------


def _seed_sessions(repo: SessionRepository) -> None:
    day = datetime.now(timezone.utc).replace(
        hour=9, minute=0, second=0, microsecond=0
    ) + timedelta(days=1)

    repo.add(
        Session(
            title="Opening Keynote - The Future of Digital Commerce",
            type=SessionType.KEYNOTE,
            start_time=day,
            end_time=day + timedelta(hours=1),
            stage="principal",
            speaker_ids=["speaker-ana"],
            is_highlight=True,
        )
    )
    repo.add(
        Session(
            title="Payments at Scale",
            start_time=day + timedelta(hours=1),
            end_time=day + timedelta(hours=2),
            stage="principal",
            speaker_ids=["speaker-bruno"],
        )
    )
    repo.add(
        Session(
            title="Retail Media Panel",
            type=SessionType.PANEL,
            start_time=day + timedelta(hours=1, minutes=30),
            end_time=day + timedelta(hours=2, minutes=30),
            stage="inovacao",
            speaker_ids=["speaker-carla", "speaker-diego"],
        )
    )
    repo.add(
        Session(
            title="Hands-on: Checkout Optimisation",
            type=SessionType.WORKSHOP,
            start_time=day + timedelta(hours=3),
            end_time=day + timedelta(hours=5),
            stage="workshop_a",
            speaker_ids=["speaker-ana"],
            capacity=40,
        )
    )


def _seed_tiers(repo: SponsorTierRepository) -> None:
    ladder = [
        ("diamond", "Diamante", "Diamond", 10),
        ("platinum", "Platina", "Platinum", 8),
        ("gold", "Ouro", "Gold", 6),
        ("silver", "Prata", "Silver", 4),
        ("bronze", "Bronze", "Bronze", 2),
    ]
    for position, (name, pt_br, en, max_posts) in enumerate(ladder, start=1):
        repo.add(
            SponsorTier(
                name=name,
                display_name=LocalizedName(pt_br=pt_br, en=en),
                order=position,
                max_posts=max_posts,
            )
        )


def create_session_repository(seed: bool = True) -> SessionRepository:
    """Return a SessionRepository, pre-loaded with sample data when ``seed``."""
    repo = SessionRepository()
    if seed:
        _seed_sessions(repo)
    return repo


def create_tier_repository(seed: bool = True) -> SponsorTierRepository:
    """Return a SponsorTierRepository, pre-loaded with the tier ladder when ``seed``."""
    repo = SponsorTierRepository()
    if seed:
        _seed_tiers(repo)
    return repo
