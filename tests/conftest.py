"""Pytest fixtures and configuration."""

import os

# Settings require a database URL at import time; tests build their own engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

from functools import partial

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from public_steps.app.dependencies import get_unit_of_work_factory
from public_steps.app.main import app
from public_steps.domain.models import ROOT_PARENT_ID, PublicStepGroup, Step
from public_steps.infrastructure.database.connection import init_db
from public_steps.infrastructure.database.tables import (
    PublicStepsDBModel,
    PublicStepsStepsDBModel,
    StepDBModel,
    StepsElementsDBModel,
)
from public_steps.repositories.unit_of_work import UnitOfWork
from public_steps.services.duplication import DuplicationEngine
from public_steps.services.public_steps import PublicStepsService


class FailingUnitOfWork(UnitOfWork):
    """
    Unit of Work whose repository 'target' raises on its n-th insert.
    """

    def __init__(self, engine, target: str, fail_on_call: int = 1):
        super().__init__(engine)
        self.target = target
        self.fail_on_call = fail_on_call

    def __enter__(self):
        super().__enter__()
        repository = getattr(self, self.target)
        original_insert = repository.insert
        calls = {"count": 0}

        def insert(*args, **kwargs):
            calls["count"] += 1
            if calls["count"] == self.fail_on_call:
                raise SQLAlchemyError(f"injected failure on {self.target}.insert #{self.fail_on_call}")
            return original_insert(*args, **kwargs)

        repository.insert = insert
        return self


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def uow_factory(engine):
    return partial(UnitOfWork, engine)


@pytest.fixture
def duplication_engine(uow_factory):
    return DuplicationEngine(uow_factory=uow_factory, copy_suffix="_copy")


@pytest.fixture
def service(uow_factory, duplication_engine):
    return PublicStepsService(uow_factory=uow_factory, duplication_engine=duplication_engine)


@pytest.fixture
def failing_engine(engine):
    """Builds a DuplicationEngine whose transaction fails at a chosen insert."""
    def _build(target: str, fail_on_call: int = 1) -> DuplicationEngine:
        return DuplicationEngine(
            uow_factory=lambda: FailingUnitOfWork(engine, target, fail_on_call),
            copy_suffix="_copy",
        )
    return _build


@pytest.fixture
def client(uow_factory):
    """Test client for the FastAPI app, bound to the test database."""
    app.dependency_overrides[get_unit_of_work_factory] = lambda: uow_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def _insert_tree(uow, tree, parent_id, project_id, platform):
    text, element_ids, children = tree
    step_id = uow.steps.insert(
        Step(
            parent_id=parent_id,
            project_id=project_id,
            platform=platform,
            step_type="click",
            text=text,
            sort=uow.steps.reserve_sort_keys(1) + 1,
        )
    )
    for element_id in element_ids:
        uow.element_links.insert(step_id, element_id)
    for child in children:
        _insert_tree(uow, child, step_id, project_id, platform)
    return step_id


@pytest.fixture
def create_group(uow_factory):
    """
    Creates a group from nested (text, element_ids, children) tuples,
    one tuple per root step. Returns the group ID.
    """
    def _create(name="Smoke", trees=(), project_id=1, platform=1) -> int:
        with uow_factory() as uow:
            group_id = uow.groups.insert(
                PublicStepGroup(name=name, project_id=project_id, platform=platform)
            )
            for tree in trees:
                root_id = _insert_tree(uow, tree, ROOT_PARENT_ID, project_id, platform)
                uow.group_links.insert(group_id, root_id)
            uow.commit()
        return group_id
    return _create


@pytest.fixture
def count_rows(engine):
    """Row counts of every table touched by the services."""
    def _count() -> dict:
        with Session(engine) as session:
            return {
                model.__tablename__: len(session.exec(select(model)).all())
                for model in (
                    PublicStepsDBModel,
                    StepDBModel,
                    PublicStepsStepsDBModel,
                    StepsElementsDBModel,
                )
            }
    return _count


@pytest.fixture
def flatten():
    """Pre-order list of the StepNodes of a forest."""
    def _flatten(nodes):
        flat = []
        for node in nodes:
            flat.append(node)
            flat.extend(_flatten(node.children))
        return flat
    return _flatten


@pytest.fixture
def login_trees():
    """Root A -> B -> C plus a second root D with child E."""
    return [
        ("A", [11], [
            ("B", [12], [
                ("C", [13], []),
            ]),
        ]),
        ("D", [14, 15], [
            ("E", [], []),
        ]),
    ]
