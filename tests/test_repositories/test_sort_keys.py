"""Tests for sort key reservation and the unit of work boundary."""

import pytest
from sqlmodel import Session

from public_steps.domain.models import PublicStepGroup, Step
from public_steps.infrastructure.database.tables import StepSortCounterDBModel, StepsElementsDBModel
from public_steps.services.exceptions import StoreFailure


def test_first_reservation_on_empty_database(uow_factory):
    with uow_factory() as uow:
        assert uow.steps.reserve_sort_keys(3) == 0
        assert uow.steps.reserve_sort_keys(2) == 3
        uow.commit()


def test_reservation_starts_after_existing_steps(uow_factory):
    with uow_factory() as uow:
        uow.steps.insert(Step(text="authored elsewhere", sort=500))
        uow.commit()

    with uow_factory() as uow:
        assert uow.steps.reserve_sort_keys(10) == 500
        uow.commit()

    with uow_factory() as uow:
        # The counter remembers keys reserved but not used yet
        assert uow.steps.reserve_sort_keys(1) == 510


def test_counter_is_persisted(uow_factory, engine):
    with uow_factory() as uow:
        uow.steps.reserve_sort_keys(4)
        uow.commit()

    with Session(engine) as session:
        assert session.get(StepSortCounterDBModel, 1).last_sort == 4


def test_reservation_rolls_back_with_transaction(uow_factory, engine):
    with pytest.raises(RuntimeError):
        with uow_factory() as uow:
            uow.steps.reserve_sort_keys(4)
            raise RuntimeError("boom")

    with Session(engine) as session:
        assert session.get(StepSortCounterDBModel, 1) is None


def test_uncommitted_work_is_discarded(uow_factory):
    with uow_factory() as uow:
        group_id = uow.groups.insert(PublicStepGroup(name="draft", project_id=1, platform=1))

    with uow_factory() as uow:
        assert uow.groups.get(group_id) is None


def test_database_errors_become_store_failures(uow_factory):
    with pytest.raises(StoreFailure):
        with uow_factory() as uow:
            # steps_id is NOT NULL
            uow.session.add(StepsElementsDBModel(steps_id=None, elements_id=1))
            uow.session.flush()
