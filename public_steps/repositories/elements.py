from abc import ABC, abstractmethod
from typing import Iterable, List

from sqlmodel import Session, select

from ..infrastructure.database.tables import StepsElementsDBModel


class ElementLinkRepository(ABC):
    """
    Defines how the application accesses Step-to-Element links.
    Elements themselves live elsewhere and are referenced by ID only.
    """

    @abstractmethod
    def insert(self, step_id: int, element_id: int):
        """Links a step to an element."""
        pass

    @abstractmethod
    def list_element_ids(self, step_id: int) -> List[int]:
        """Element IDs referenced by a step, in link order."""
        pass

    @abstractmethod
    def delete_for_steps(self, step_ids: Iterable[int]) -> int:
        """Removes every link of the given steps."""
        pass


class SqlElementLinkRepository(ElementLinkRepository):

    def __init__(self, session: Session):
        self.session = session

    def insert(self, step_id: int, element_id: int):
        self.session.add(StepsElementsDBModel(steps_id=step_id, elements_id=element_id))
        self.session.flush()

    def list_element_ids(self, step_id: int) -> List[int]:
        statement = (
            select(StepsElementsDBModel.elements_id)
            .where(StepsElementsDBModel.steps_id == step_id)
            .order_by(StepsElementsDBModel.id)
        )
        return list(self.session.exec(statement))

    def delete_for_steps(self, step_ids: Iterable[int]) -> int:
        ids = list(step_ids)
        if not ids:
            return 0
        rows = self.session.exec(
            select(StepsElementsDBModel).where(StepsElementsDBModel.steps_id.in_(ids))
        ).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)
