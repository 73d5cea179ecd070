"""
Database Seeder.

Run this script to create the tables and populate the database with a
demo public step group (a login flow with nested steps).

Usage:
    python -m public_steps.scripts.db_seed_public_steps

The group is only created once; re-running the script leaves an existing
demo group untouched.
"""

import os
import sys

# Add the project root to the Python path for imports.
sys.path.append(os.getcwd())

from public_steps.domain.models import Step, PublicStepGroup
from public_steps.infrastructure.database.connection import engine, init_db
from public_steps.repositories.unit_of_work import UnitOfWork

DEMO_PROJECT_ID = 1
DEMO_PLATFORM = 1
DEMO_GROUP_NAME = "Login"

# (step_type, text, element ids, children)
DEMO_STEPS = [
    ("openApp", "com.example.shop", [], []),
    ("isExistEle", "login form visible", [101], [
        ("click", "username field", [102], []),
        ("sendKeys", "demo-user", [102], []),
        ("click", "password field", [103], [
            ("sendKeys", "demo-password", [103], []),
        ]),
        ("click", "submit", [104], []),
    ]),
]


def _insert_tree(uow, definition, parent_id, sort_keys):
    step_type, text, element_ids, children = definition
    step_id = uow.steps.insert(
        Step(
            parent_id=parent_id,
            project_id=DEMO_PROJECT_ID,
            platform=DEMO_PLATFORM,
            step_type=step_type,
            text=text,
            sort=next(sort_keys),
        )
    )
    for element_id in element_ids:
        uow.element_links.insert(step_id, element_id)
    for child in children:
        _insert_tree(uow, child, step_id, sort_keys)
    return step_id


def _count(definitions):
    return sum(1 + _count(children) for *_, children in definitions)


def seed_public_steps():
    print("Initializing Database Connection...")

    init_db()

    with UnitOfWork(engine) as uow:
        existing = [
            group for group in uow.groups.list_by_project(DEMO_PROJECT_ID)
            if group.name == DEMO_GROUP_NAME
        ]
        if existing:
            print(f"--> Demo group already present (id={existing[0].id}).")
            return

        print(f"Creating group '{DEMO_GROUP_NAME}' with {_count(DEMO_STEPS)} steps.")
        group_id = uow.groups.insert(
            PublicStepGroup(name=DEMO_GROUP_NAME, project_id=DEMO_PROJECT_ID, platform=DEMO_PLATFORM)
        )

        base = uow.steps.reserve_sort_keys(_count(DEMO_STEPS))
        sort_keys = iter(range(base + 1, base + 1 + _count(DEMO_STEPS)))
        for definition in DEMO_STEPS:
            root_id = _insert_tree(uow, definition, 0, sort_keys)
            uow.group_links.insert(group_id, root_id)

        uow.commit()
        print(f"Public steps seeding complete (group id={group_id}).")


if __name__ == "__main__":
    seed_public_steps()
