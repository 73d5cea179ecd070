"""Tests for the demo data seeder."""

from functools import partial

from public_steps.repositories.unit_of_work import UnitOfWork
from public_steps.scripts import db_seed_public_steps as seeder
from public_steps.services.duplication import DuplicationEngine
from public_steps.services.public_steps import PublicStepsService


def test_seed_creates_demo_group_once(engine, monkeypatch, count_rows, flatten):
    monkeypatch.setattr(seeder, "engine", engine)
    monkeypatch.setattr(seeder, "init_db", lambda: None)

    seeder.seed_public_steps()
    after_first = count_rows()
    seeder.seed_public_steps()

    assert count_rows() == after_first
    assert after_first["public_steps"] == 1
    assert after_first["steps"] == 7

    uow_factory = partial(UnitOfWork, engine)
    service = PublicStepsService(uow_factory, DuplicationEngine(uow_factory))
    group = service.list_by_project(seeder.DEMO_PROJECT_ID)[0]
    assert group.name == "Login"
    assert [node.step.step_type for node in flatten(group.steps)] == [
        "openApp", "isExistEle", "click", "sendKeys", "click", "sendKeys", "click",
    ]
