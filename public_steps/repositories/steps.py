from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ..domain.models import PUBLIC_STEP_TYPE, Step
from ..infrastructure.database.tables import StepDBModel, StepSortCounterDBModel

COUNTER_ROW_ID = 1


class StepRepository(ABC):
    """
    Defines how the application accesses Steps.
    Implementations never commit; the Unit of Work owns the transaction.
    """

    @abstractmethod
    def insert(self, step: Step) -> int:
        """Persists a new step and returns the identity assigned to it."""
        pass

    @abstractmethod
    def get(self, step_id: int) -> Optional[Step]:
        """Retrieves a step by ID."""
        pass

    @abstractmethod
    def list_children(self, parent_id: int) -> List[Step]:
        """Direct children of a step in sibling order (sort key, then id)."""
        pass

    @abstractmethod
    def reserve_sort_keys(self, count: int) -> int:
        """
        Reserves 'count' sort keys after every key in use.
        Returns the base; the reserved keys are base + 1 .. base + count.
        """
        pass

    @abstractmethod
    def delete(self, step_ids: Iterable[int]) -> int:
        """Deletes steps by ID. Returns the number of rows removed."""
        pass

    @abstractmethod
    def delete_public_step_calls(self, group_id: int) -> int:
        """Deletes case steps that invoke the given group."""
        pass


class SqlStepRepository(StepRepository):
    """
    SQLModel storage for steps, bound to the session of a Unit of Work.
    """

    def __init__(self, session: Session):
        self.session = session

    def insert(self, step: Step) -> int:
        row = _to_row(step)
        row.id = None
        self.session.add(row)
        # Flush so the database assigns the identity without committing
        self.session.flush()
        return row.id

    def get(self, step_id: int) -> Optional[Step]:
        row = self.session.get(StepDBModel, step_id)
        if not row:
            return None
        return _to_domain(row)

    def list_children(self, parent_id: int) -> List[Step]:
        statement = (
            select(StepDBModel)
            .where(StepDBModel.parent_id == parent_id)
            .order_by(StepDBModel.sort, StepDBModel.id)
        )
        return [_to_domain(row) for row in self.session.exec(statement)]

    def reserve_sort_keys(self, count: int) -> int:
        # The counter row is locked until the transaction ends (PostgreSQL).
        # SQLite ignores FOR UPDATE and serializes writers instead.
        counter = self.session.exec(
            select(StepSortCounterDBModel)
            .where(StepSortCounterDBModel.id == COUNTER_ROW_ID)
            .with_for_update()
        ).first()
        current_max = self.session.exec(select(func.max(StepDBModel.sort))).one()

        if counter is None:
            counter = StepSortCounterDBModel(id=COUNTER_ROW_ID, last_sort=0)

        # Steps authored outside this service may sit above the counter
        base = max(counter.last_sort, current_max or 0)
        counter.last_sort = base + count
        self.session.add(counter)
        self.session.flush()
        return base

    def delete(self, step_ids: Iterable[int]) -> int:
        ids = list(step_ids)
        if not ids:
            return 0
        rows = self.session.exec(
            select(StepDBModel).where(StepDBModel.id.in_(ids))
        ).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)

    def delete_public_step_calls(self, group_id: int) -> int:
        rows = self.session.exec(
            select(StepDBModel).where(
                StepDBModel.step_type == PUBLIC_STEP_TYPE,
                StepDBModel.text == str(group_id),
            )
        ).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)


def _to_row(step: Step) -> StepDBModel:
    return StepDBModel(**asdict(step))


def _to_domain(row: StepDBModel) -> Step:
    return Step(**row.model_dump())
