"""Service for administering sponsor tiers."""

from __future__ import annotations

import logging

from agenda.domain.models import SponsorTier, SponsorTierCreate
from agenda.errors import TierNotFoundError
from agenda.repos.base import TierStore
from agenda.services.reorder import SequentialReorderEngine

logger = logging.getLogger(__name__)


class TierService:
    def __init__(self, store: TierStore) -> None:
        self.store = store
        self.engine = SequentialReorderEngine(store)

    def create_tier(self, payload: SponsorTierCreate) -> SponsorTier:
        """Create a tier; without an explicit order it goes to the end of the ladder."""
        tier = SponsorTier(
            name=payload.name,
            display_name=payload.display_name,
            order=payload.order if payload.order is not None else self.store.next_order(),
            max_posts=payload.max_posts,
        )
        self.store.add(tier)
        logger.info("Created sponsor tier %s at order %d", tier.name, tier.order)
        return tier

    def list_tiers(self) -> list[SponsorTier]:
        return self.store.list_all()

    def get_tier(self, tier_id: str) -> SponsorTier:
        tier = self.store.get(tier_id)
        if tier is None:
            raise TierNotFoundError([tier_id])
        return tier

    def delete_tier(self, tier_id: str) -> None:
        if not self.store.delete(tier_id):
            raise TierNotFoundError([tier_id])
        logger.info("Deleted sponsor tier %s", tier_id)

    def reorder_tiers(self, tier_ids: list[str]) -> list[SponsorTier]:
        """Apply ``tier_ids`` as the new order and return the full ladder."""
        self.engine.reorder(tier_ids)
        return self.store.list_all()
