"""
Unit of Work.

Groups the repositories behind one SQLModel Session so a multi-step
operation (duplicating a group, deleting a group) commits or rolls back
as a whole. Nothing is persisted unless commit() is called inside the block.

Usage:
    with UnitOfWork(engine) as uow:
        group_id = uow.groups.insert(group)
        uow.group_links.insert(group_id, step_id)
        uow.commit()
"""

import logging
from typing import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..services.exceptions import StoreFailure
from .elements import SqlElementLinkRepository
from .groups import SqlGroupLinkRepository, SqlGroupRepository
from .steps import SqlStepRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, engine: Engine):
        self._engine = engine

    def __enter__(self) -> "UnitOfWork":
        self.session = Session(self._engine)
        self.groups = SqlGroupRepository(self.session)
        self.group_links = SqlGroupLinkRepository(self.session)
        self.steps = SqlStepRepository(self.session)
        self.element_links = SqlElementLinkRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is not None:
                logger.warning(f"Rolling back transaction after {exc_type.__name__}: {exc}")
                self.session.rollback()
        finally:
            self.session.close()

        # Callers only see the service error types
        if isinstance(exc, SQLAlchemyError):
            raise StoreFailure(str(exc)) from exc
        return False

    def commit(self):
        self.session.commit()


UnitOfWorkFactory = Callable[[], UnitOfWork]
