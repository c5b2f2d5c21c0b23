"""Tests for the two-phase sponsor tier reorder engine."""

from __future__ import annotations

import pytest

from agenda.domain.models import LocalizedName, SponsorTier
from agenda.errors import (
    DuplicateOrderError,
    InvalidReorderError,
    StoreError,
    TierNotFoundError,
)
from agenda.repos.memory import SponsorTierRepository
from agenda.services.reorder import (
    ReorderPhase,
    SequentialReorderEngine,
    reorder,
)

_LADDER = ["diamond", "platinum", "gold", "silver", "bronze"]


class RecordingTierRepository(SponsorTierRepository):
    """Records every order write and can fail on the n-th one (1-based)."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[str, int]] = []
        self.fail_on_write: int | None = None

    def set_order(self, entity_id: str, order: int) -> None:
        if self.fail_on_write is not None and len(self.writes) + 1 == self.fail_on_write:
            self.fail_on_write = None
            raise StoreError("tier store unavailable")
        super().set_order(entity_id, order)
        self.writes.append((entity_id, order))


@pytest.fixture()
def store() -> RecordingTierRepository:
    repo = RecordingTierRepository()
    for position, name in enumerate(_LADDER, start=1):
        repo.add(
            SponsorTier(
                name=name,
                display_name=LocalizedName(pt_br=name.title(), en=name.title()),
                order=position,
            )
        )
    return repo


@pytest.fixture()
def engine(store) -> SequentialReorderEngine:
    return SequentialReorderEngine(store)


def _ids(store: SponsorTierRepository, *names: str) -> list[str]:
    by_name = {t.name: t.id for t in store.list_all()}
    return [by_name[n] for n in names]


def _orders(store: SponsorTierRepository) -> dict[str, int]:
    return {t.name: t.order for t in store.list_all()}


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


def test_reverse_ladder(store, engine):
    ids = _ids(store, *reversed(_LADDER))

    plan = engine.reorder(ids)

    assert plan.phase == ReorderPhase.COMMITTED
    assert _orders(store) == {
        "bronze": 1,
        "silver": 2,
        "gold": 3,
        "platinum": 4,
        "diamond": 5,
    }


def test_final_orders_are_dense_and_match_input_positions(store, engine):
    ids = _ids(store, "gold", "diamond", "bronze", "platinum", "silver")

    engine.reorder(ids)

    tiers = {t.id: t.order for t in store.list_all()}
    assert [tiers[i] for i in ids] == [1, 2, 3, 4, 5]
    assert sorted(tiers.values()) == list(range(1, len(ids) + 1))


def test_reorder_twice_is_idempotent(store, engine):
    ids = _ids(store, "silver", "gold", "bronze", "diamond", "platinum")

    engine.reorder(ids)
    first = _orders(store)
    engine.reorder(ids)

    assert _orders(store) == first


def test_single_pass_would_break_unique_order(store):
    bronze = _ids(store, "bronze")[0]

    with pytest.raises(DuplicateOrderError):
        store.set_order(bronze, 1)


def test_quarantine_completes_before_commit(store, engine):
    ids = _ids(store, *reversed(_LADDER))

    engine.reorder(ids)

    quarantine, commit = store.writes[: len(ids)], store.writes[len(ids) :]
    assert quarantine == [(eid, -(pos + 1)) for pos, eid in enumerate(ids)]
    assert commit == [(eid, pos + 1) for pos, eid in enumerate(ids)]


def test_subset_swap_leaves_other_tiers_alone(store, engine):
    engine.reorder(_ids(store, "platinum", "diamond"))

    assert _orders(store) == {
        "platinum": 1,
        "diamond": 2,
        "gold": 3,
        "silver": 4,
        "bronze": 5,
    }


def test_module_shortcut(store):
    plan = reorder(_ids(store, *reversed(_LADDER)), store)

    assert plan.phase == ReorderPhase.COMMITTED
    assert _orders(store)["bronze"] == 1


# ---------------------------------------------------------------------------
# Rejections leave every order untouched
# ---------------------------------------------------------------------------


def test_unknown_id_changes_nothing(store, engine):
    before = _orders(store)

    with pytest.raises(TierNotFoundError) as excinfo:
        engine.reorder(_ids(store, "gold", "diamond") + ["missing-tier"])

    assert excinfo.value.missing_ids == ["missing-tier"]
    assert _orders(store) == before
    assert store.writes == []


def test_duplicate_ids_rejected(store, engine):
    gold = _ids(store, "gold")[0]

    with pytest.raises(InvalidReorderError):
        engine.reorder([gold, gold])

    assert store.writes == []


def test_empty_request_rejected(engine):
    with pytest.raises(InvalidReorderError):
        engine.reorder([])


def test_target_order_held_outside_request_rejected(store, engine):
    before = _orders(store)

    # gold and diamond would take orders 1 and 2, but platinum holds 2
    with pytest.raises(InvalidReorderError) as excinfo:
        engine.reorder(_ids(store, "gold", "diamond"))

    assert _ids(store, "platinum")[0] in excinfo.value.context["blocking_ids"]
    assert _orders(store) == before


# ---------------------------------------------------------------------------
# Partial failure and recovery
# ---------------------------------------------------------------------------


def test_failure_during_quarantine_then_resume(store, engine):
    ids = _ids(store, *reversed(_LADDER))
    plan = engine.plan(ids)
    store.fail_on_write = 3

    with pytest.raises(StoreError):
        engine.resume(plan)

    assert plan.phase == ReorderPhase.PENDING
    assert sum(1 for order in _orders(store).values() if order < 0) == 2

    engine.resume(plan)

    assert plan.phase == ReorderPhase.COMMITTED
    assert _orders(store)["bronze"] == 1
    assert _orders(store)["diamond"] == 5


def test_failure_during_commit_then_resume(store, engine):
    ids = _ids(store, *reversed(_LADDER))
    plan = engine.plan(ids)
    store.fail_on_write = len(ids) + 2

    with pytest.raises(StoreError):
        engine.resume(plan)

    assert plan.phase == ReorderPhase.QUARANTINED

    engine.resume(plan)

    assert plan.phase == ReorderPhase.COMMITTED
    tiers = {t.id: t.order for t in store.list_all()}
    assert [tiers[i] for i in ids] == [1, 2, 3, 4, 5]


def test_rerunning_reorder_after_failure_recovers(store, engine):
    ids = _ids(store, "silver", "bronze", "gold", "platinum", "diamond")
    store.fail_on_write = 4

    with pytest.raises(StoreError):
        engine.reorder(ids)

    engine.reorder(ids)

    tiers = {t.id: t.order for t in store.list_all()}
    assert [tiers[i] for i in ids] == [1, 2, 3, 4, 5]


def test_resume_of_committed_plan_writes_nothing(store, engine):
    plan = engine.reorder(_ids(store, *_LADDER))
    writes = len(store.writes)

    engine.resume(plan)

    assert len(store.writes) == writes
