"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Building the Unit of Work factory on top of the shared engine.
2. Wiring it into the DuplicationEngine and the PublicStepsService.
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

Tests swap the database by overriding get_unit_of_work_factory.
"""


from functools import lru_cache, partial
from fastapi import Depends

from ..config import settings
from ..infrastructure.database.connection import engine
from ..repositories.unit_of_work import UnitOfWork, UnitOfWorkFactory
from ..services.duplication import DuplicationEngine
from ..services.public_steps import PublicStepsService

# Unit of Work Factory (Singleton)
# Every call opens a fresh session on the shared engine
@lru_cache()
def get_unit_of_work_factory() -> UnitOfWorkFactory:
    return partial(UnitOfWork, engine)

# The Duplication Engine (Singleton Service)
@lru_cache()
def get_duplication_engine(
    uow_factory: UnitOfWorkFactory = Depends(get_unit_of_work_factory)
) -> DuplicationEngine:
    return DuplicationEngine(uow_factory=uow_factory, copy_suffix=settings.COPY_SUFFIX)

# The Public Steps Service (Singleton Service)
@lru_cache()
def get_public_steps_service(
    uow_factory: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
    duplication_engine: DuplicationEngine = Depends(get_duplication_engine)
) -> PublicStepsService:
    """
    Injects the Unit of Work factory and the engine into the service.
    """
    return PublicStepsService(
        uow_factory=uow_factory,
        duplication_engine=duplication_engine
    )
