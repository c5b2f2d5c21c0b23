"""
base.py - Abstract stores the scheduling core reads from and writes to.

Any backing store (document database, SQL, in-memory) plugs in by
implementing these classes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from agenda.domain.models import Session, SponsorTier


class SessionStore(ABC):
    """Storage for sessions, with soft delete."""

    @abstractmethod
    def add(self, session: Session) -> None:
        pass

    @abstractmethod
    def get(self, session_id: str) -> Session | None:
        pass

    @abstractmethod
    def update(self, session: Session) -> None:
        """Replace a stored session by id."""
        pass

    @abstractmethod
    def list_all(self) -> list[Session]:
        """Return every session, soft-deleted ones included."""
        pass

    @abstractmethod
    def find_active(
        self,
        *,
        stage_equals: str | None = None,
        speaker_ids_intersects: Iterable[str] = (),
        exclude_id: str | None = None,
    ) -> list[Session]:
        """
        Return non-deleted sessions matching
        ``stage == stage_equals OR speaker_ids ∩ speaker_ids_intersects ≠ ∅``,
        never including ``exclude_id``.

        An omitted stage or an empty speaker set contributes no matches.
        """
        pass


class OrderedStore(ABC):
    """Storage for entities whose ``order`` value is unique."""

    @abstractmethod
    def find_by_ids(self, ids: Iterable[str]) -> list[SponsorTier]:
        """Return the entities that exist among ``ids``; unknown ids are skipped."""
        pass

    @abstractmethod
    def set_order(self, entity_id: str, order: int) -> None:
        """
        Set one entity's order.

        Must only check uniqueness against committed values, never against
        other writes still to come in the same batch.
        """
        pass

    @abstractmethod
    def list_all(self) -> list[SponsorTier]:
        pass


class TierStore(OrderedStore):
    """Ordered store for sponsor tiers, with the writes tier administration needs."""

    @abstractmethod
    def add(self, tier: SponsorTier) -> None:
        """Insert a tier; raises if its order or name is already taken."""
        pass

    @abstractmethod
    def get(self, tier_id: str) -> SponsorTier | None:
        pass

    @abstractmethod
    def next_order(self) -> int:
        pass

    @abstractmethod
    def delete(self, tier_id: str) -> bool:
        """Remove a tier; returns False when it was not stored."""
        pass
