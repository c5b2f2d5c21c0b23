"""Service for rewriting a dense 1..N ordering under a unique-order constraint.

Writing the final orders in a single pass can momentarily give a tier an order
still held by another tier that has not been updated yet. Every tier is
therefore first moved into the negative range (phase 1, quarantine), and only
then given its final positive order (phase 2, commit). Negative values never
collide with live orders, and each position maps to its own negative value, so
the writes within a phase can run in any order.

A run that fails part-way leaves its ``ReorderPlan`` at the last completed
phase; pass it to ``SequentialReorderEngine.resume`` (or call ``reorder`` again
with the same ids) once the store is healthy.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import StrEnum

from pydantic import BaseModel

from agenda.errors import InvalidReorderError, TierNotFoundError
from agenda.repos.base import OrderedStore

logger = logging.getLogger(__name__)


class ReorderPhase(StrEnum):
    PENDING = "pending"
    QUARANTINED = "quarantined"
    COMMITTED = "committed"


class ReorderPlan(BaseModel):
    """Target ordering for a set of ids and how far it has been applied."""

    entity_ids: list[str]
    phase: ReorderPhase = ReorderPhase.PENDING

    def quarantine_orders(self) -> list[tuple[str, int]]:
        return [(eid, -(pos + 1)) for pos, eid in enumerate(self.entity_ids)]

    def final_orders(self) -> list[tuple[str, int]]:
        return [(eid, pos + 1) for pos, eid in enumerate(self.entity_ids)]


class SequentialReorderEngine:
    def __init__(self, store: OrderedStore) -> None:
        self.store = store

    def plan(self, entity_ids: Sequence[str]) -> ReorderPlan:
        """Validate ``entity_ids`` against the store and build a pending plan.

        Nothing is written here, so every rejection leaves all orders untouched.
        """
        ids = list(entity_ids)
        if not ids:
            raise InvalidReorderError("At least one id is required")
        if len(set(ids)) != len(ids):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            raise InvalidReorderError(
                "Duplicate ids in reorder request", context={"duplicates": duplicates}
            )

        found = self.store.find_by_ids(ids)
        if len(found) != len(ids):
            found_ids = {entity.id for entity in found}
            raise TierNotFoundError([i for i in ids if i not in found_ids])

        # Tiers outside the request must not hold a value this run will write
        requested = set(ids)
        reserved = set(range(1, len(ids) + 1)) | set(range(-len(ids), 0))
        blockers = [
            entity
            for entity in self.store.list_all()
            if entity.id not in requested and entity.order in reserved
        ]
        if blockers:
            raise InvalidReorderError(
                "Target orders are held by tiers outside the request",
                context={"blocking_ids": [b.id for b in blockers]},
            )

        return ReorderPlan(entity_ids=ids)

    def reorder(self, entity_ids: Sequence[str]) -> ReorderPlan:
        """Give ``entity_ids[i]`` the order ``i + 1``."""
        return self.resume(self.plan(entity_ids))

    def resume(self, plan: ReorderPlan) -> ReorderPlan:
        """Run the plan from the phase it last completed."""
        if plan.phase == ReorderPhase.PENDING:
            self._apply(plan, plan.quarantine_orders(), ReorderPhase.QUARANTINED)
        # Phase 2 starts only after every quarantine write has returned
        if plan.phase == ReorderPhase.QUARANTINED:
            self._apply(plan, plan.final_orders(), ReorderPhase.COMMITTED)
        return plan

    def _apply(
        self,
        plan: ReorderPlan,
        assignments: list[tuple[str, int]],
        reached: ReorderPhase,
    ) -> None:
        try:
            for entity_id, order in assignments:
                self.store.set_order(entity_id, order)
        except Exception:
            logger.exception(
                "Reorder of %d ids failed before reaching %s; plan left at %s",
                len(plan.entity_ids),
                reached,
                plan.phase,
            )
            raise
        plan.phase = reached
        logger.info("Reorder of %d ids %s", len(plan.entity_ids), reached)


def reorder(entity_ids: Sequence[str], store: OrderedStore) -> ReorderPlan:
    """Shortcut for ``SequentialReorderEngine(store).reorder(entity_ids)``."""
    return SequentialReorderEngine(store).reorder(entity_ids)
