"""
Duplication Engine - Public Step Group Cloning

Copies a Public Step Group into a new, independent group: the group record,
every step tree linked to it, every parent/child edge and every
step-to-element link. All new rows get fresh identities.
-----------------------------------------------

The trees are flattened in pre-order, so a parent is always cloned before
its children. As each clone is inserted its new identity is recorded
against the identity of its source step; a child looks up its parent's new
identity in that map instead of relying on list positions.

Everything runs in one Unit of Work. Any failure (missing group, missing
step, broken tree, database error) rolls the whole copy back. Nothing is
retried: a blind retry after an unknown outcome could double-insert.
"""

import logging
from typing import Dict, List

from ..config import settings
from ..domain.models import ROOT_PARENT_ID, PublicStepGroup, StepNode
from ..repositories.unit_of_work import UnitOfWork, UnitOfWorkFactory
from .exceptions import InconsistentTree, NotFound
from .step_tree import StepTreeService

logger = logging.getLogger(__name__)


class DuplicationEngine:
    def __init__(self, uow_factory: UnitOfWorkFactory, copy_suffix: str = settings.COPY_SUFFIX):
        self.uow_factory = uow_factory
        self.copy_suffix = copy_suffix

    def duplicate_group(self, source_group_id: int) -> int:
        """
        Clones a group with all its step trees. Returns the new group ID.

        Raises:
            NotFound: the group or one of its linked steps does not exist.
            InconsistentTree: a step's parent was not cloned before it.
            StoreFailure: the database rejected an operation.
        """
        with self.uow_factory() as uow:
            # 1. Clone the group record
            # The row lock makes concurrent copies of one group run in turn
            source = uow.groups.get(source_group_id, for_update=True)
            if source is None:
                raise NotFound(f"Public step group {source_group_id} not found.")

            new_group_id = uow.groups.insert(
                PublicStepGroup(
                    name=f"{source.name}{self.copy_suffix}",
                    project_id=source.project_id,
                    platform=source.platform,
                )
            )

            # 2. Collect and expand the step forest
            tree_service = StepTreeService(uow.steps, uow.element_links)
            roots = tree_service.load_roots(uow.group_links.list_step_ids(source_group_id))
            source_list = tree_service.expand(roots)

            # 3. Clone the steps and link the new roots to the new group
            new_root_ids = self._clone_steps(uow, source_list) if source_list else []
            for step_id in new_root_ids:
                uow.group_links.insert(new_group_id, step_id)

            uow.commit()

        logger.info(
            f"Copied public step group {source_group_id} to {new_group_id} "
            f"({len(source_list)} steps, {len(new_root_ids)} roots)"
        )
        return new_group_id

    def _clone_steps(self, uow: UnitOfWork, source_list: List[StepNode]) -> List[int]:
        """
        Inserts one clone per node, in order. Returns the new IDs of the roots.
        """
        # Clones sort after every existing step, keeping their relative order
        base_sort = uow.steps.reserve_sort_keys(len(source_list))

        new_ids: Dict[int, int] = {}  # source step id -> clone id
        new_root_ids: List[int] = []

        for offset, node in enumerate(source_list, start=1):
            source = node.step

            if source.is_root:
                parent_id = ROOT_PARENT_ID
            elif source.parent_id in new_ids:
                parent_id = new_ids[source.parent_id]
            else:
                raise InconsistentTree(
                    f"Parent {source.parent_id} of step {source.id} was not copied before it."
                )

            clone_id = uow.steps.insert(source.copy_as_public(parent_id=parent_id, sort=base_sort + offset))
            new_ids[source.id] = clone_id

            for element_id in node.element_ids:
                uow.element_links.insert(clone_id, element_id)

            if source.is_root:
                new_root_ids.append(clone_id)

        logger.debug(f"Step id mapping: {new_ids}")
        return new_root_ids
