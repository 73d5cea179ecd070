from abc import ABC, abstractmethod
from typing import List, Optional

from sqlmodel import Session, select

from ..domain.models import PublicStepGroup
from ..infrastructure.database.tables import PublicStepsDBModel, PublicStepsStepsDBModel


class GroupRepository(ABC):
    """
    Defines how the application accesses Public Step Group records.
    The steps of a group are reached through the GroupLinkRepository.
    """

    @abstractmethod
    def insert(self, group: PublicStepGroup) -> int:
        """Persists a new group and returns its identity."""
        pass

    @abstractmethod
    def get(self, group_id: int, for_update: bool = False) -> Optional[PublicStepGroup]:
        """
        Retrieves a group by ID, without its steps.
        With for_update=True the row stays locked until the transaction ends.
        """
        pass

    @abstractmethod
    def update(self, group: PublicStepGroup) -> bool:
        """Overwrites name, project and platform. Returns False if absent."""
        pass

    @abstractmethod
    def delete(self, group_id: int) -> int:
        """Deletes a group record. Returns the number of rows removed."""
        pass

    @abstractmethod
    def list_by_project(self, project_id: int) -> List[PublicStepGroup]:
        """Groups of a project, newest first."""
        pass

    @abstractmethod
    def list_by_project_and_platform(self, project_id: int, platform: int) -> List[PublicStepGroup]:
        pass


class GroupLinkRepository(ABC):
    """
    Defines how the application accesses Group-to-RootStep links.
    Only root steps are linked; descendants hang off their parents.
    """

    @abstractmethod
    def list_step_ids(self, group_id: int) -> List[int]:
        """Root step IDs of a group, in link order."""
        pass

    @abstractmethod
    def list_group_ids(self, step_id: int) -> List[int]:
        """IDs of every group linking the given step."""
        pass

    @abstractmethod
    def insert(self, group_id: int, step_id: int):
        pass

    @abstractmethod
    def delete_for_group(self, group_id: int) -> int:
        """Removes every link of a group. Returns the number removed."""
        pass


class SqlGroupRepository(GroupRepository):

    def __init__(self, session: Session):
        self.session = session

    def insert(self, group: PublicStepGroup) -> int:
        row = PublicStepsDBModel(
            name=group.name, project_id=group.project_id, platform=group.platform
        )
        self.session.add(row)
        self.session.flush()
        return row.id

    def get(self, group_id: int, for_update: bool = False) -> Optional[PublicStepGroup]:
        statement = select(PublicStepsDBModel).where(PublicStepsDBModel.id == group_id)
        if for_update:
            statement = statement.with_for_update()
        row = self.session.exec(statement).first()

        if not row:
            return None
        return _to_domain(row)

    def update(self, group: PublicStepGroup) -> bool:
        row = self.session.get(PublicStepsDBModel, group.id)
        if not row:
            return False

        row.name = group.name
        row.project_id = group.project_id
        row.platform = group.platform
        self.session.add(row)
        self.session.flush()
        return True

    def delete(self, group_id: int) -> int:
        row = self.session.get(PublicStepsDBModel, group_id)
        if not row:
            return 0
        self.session.delete(row)
        self.session.flush()
        return 1

    def list_by_project(self, project_id: int) -> List[PublicStepGroup]:
        statement = (
            select(PublicStepsDBModel)
            .where(PublicStepsDBModel.project_id == project_id)
            .order_by(PublicStepsDBModel.id.desc())
        )
        return [_to_domain(row) for row in self.session.exec(statement)]

    def list_by_project_and_platform(self, project_id: int, platform: int) -> List[PublicStepGroup]:
        statement = (
            select(PublicStepsDBModel)
            .where(
                PublicStepsDBModel.project_id == project_id,
                PublicStepsDBModel.platform == platform,
            )
            .order_by(PublicStepsDBModel.id)
        )
        return [_to_domain(row) for row in self.session.exec(statement)]


class SqlGroupLinkRepository(GroupLinkRepository):

    def __init__(self, session: Session):
        self.session = session

    def list_step_ids(self, group_id: int) -> List[int]:
        statement = (
            select(PublicStepsStepsDBModel.steps_id)
            .where(PublicStepsStepsDBModel.public_steps_id == group_id)
            .order_by(PublicStepsStepsDBModel.id)
        )
        return list(self.session.exec(statement))

    def list_group_ids(self, step_id: int) -> List[int]:
        statement = (
            select(PublicStepsStepsDBModel.public_steps_id)
            .where(PublicStepsStepsDBModel.steps_id == step_id)
            .order_by(PublicStepsStepsDBModel.public_steps_id)
        )
        return list(self.session.exec(statement))

    def insert(self, group_id: int, step_id: int):
        self.session.add(PublicStepsStepsDBModel(public_steps_id=group_id, steps_id=step_id))
        self.session.flush()

    def delete_for_group(self, group_id: int) -> int:
        rows = self.session.exec(
            select(PublicStepsStepsDBModel).where(
                PublicStepsStepsDBModel.public_steps_id == group_id
            )
        ).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)


def _to_domain(row: PublicStepsDBModel) -> PublicStepGroup:
    return PublicStepGroup(
        id=row.id, name=row.name, project_id=row.project_id, platform=row.platform
    )
