"""
Public Steps Service - Application Orchestration Layer

Entry point for every operation on Public Step Groups. Each public method
runs in its own Unit of Work, so it either fully applies or leaves the
database untouched.
"""

import logging
from typing import List

from ..domain.models import PUBLIC_CASE_ID, PublicStepGroup, Step
from ..repositories.unit_of_work import UnitOfWork, UnitOfWorkFactory
from .duplication import DuplicationEngine
from .exceptions import InconsistentTree, NotFound
from .step_tree import StepTreeService

logger = logging.getLogger(__name__)


class PublicStepsService:
    def __init__(self, uow_factory: UnitOfWorkFactory, duplication_engine: DuplicationEngine):
        self.uow_factory = uow_factory
        self.duplication_engine = duplication_engine

    def find_by_id(self, group_id: int) -> PublicStepGroup:
        """Retrieves a group together with its step trees."""
        with self.uow_factory() as uow:
            group = uow.groups.get(group_id)
            if group is None:
                raise NotFound(f"Public step group {group_id} not found.")
            return self._attach_steps(uow, group)

    def list_by_project(self, project_id: int) -> List[PublicStepGroup]:
        """All groups of a project with their step trees, newest first."""
        with self.uow_factory() as uow:
            return [
                self._attach_steps(uow, group)
                for group in uow.groups.list_by_project(project_id)
            ]

    def list_by_project_and_platform(self, project_id: int, platform: int) -> List[PublicStepGroup]:
        """Groups of a project for one platform, without steps."""
        with self.uow_factory() as uow:
            return uow.groups.list_by_project_and_platform(project_id, platform)

    def save_group(self, group: PublicStepGroup, step_ids: List[int]) -> PublicStepGroup:
        """
        Creates the group (id is None) or updates it, then replaces its
        root step links with 'step_ids' in the given order.

        Only public root steps that no other group links to can be linked;
        anything else raises InconsistentTree and nothing is saved.
        """
        with self.uow_factory() as uow:
            if group.id is None:
                group.id = uow.groups.insert(group)
            elif not uow.groups.update(group):
                raise NotFound(f"Public step group {group.id} not found.")

            tree_service = StepTreeService(uow.steps, uow.element_links)
            for step in tree_service.load_roots(step_ids):
                self._check_linkable(uow, group.id, step)
            if len(set(step_ids)) != len(step_ids):
                raise InconsistentTree("A step can only be linked once per group.")

            uow.group_links.delete_for_group(group.id)
            for step_id in step_ids:
                uow.group_links.insert(group.id, step_id)

            saved = self._attach_steps(uow, group)
            uow.commit()

        logger.info(f"Saved public step group {saved.id} with {len(step_ids)} root steps")
        return saved

    def delete_group(self, group_id: int) -> int:
        """
        Deletes a group, its root step links, the step trees under those
        roots with their element links, and the case steps that call it.
        Roots still linked to another group are kept.
        Returns the number of group rows removed (0 if already absent).
        """
        with self.uow_factory() as uow:
            affected = self._delete_group(uow, group_id)
            uow.commit()
        return affected

    def delete_by_project(self, project_id: int) -> int:
        """
        Deletes every group of a project in one transaction.
        Returns how many were removed.
        """
        with self.uow_factory() as uow:
            affected = sum(
                self._delete_group(uow, group.id)
                for group in uow.groups.list_by_project(project_id)
            )
            uow.commit()

        logger.info(f"Deleted {affected} public step groups of project {project_id}")
        return affected

    def copy_group(self, group_id: int) -> int:
        return self.duplication_engine.duplicate_group(group_id)

    def _check_linkable(self, uow: UnitOfWork, group_id: int, step: Step):
        if not step.is_root:
            raise InconsistentTree(f"Step {step.id} has parent {step.parent_id}; only root steps can be linked.")
        if step.case_id != PUBLIC_CASE_ID:
            raise InconsistentTree(f"Step {step.id} belongs to case {step.case_id}.")

        other_groups = _other_groups(uow, step.id, group_id)
        if other_groups:
            raise InconsistentTree(f"Step {step.id} is already linked to group {other_groups[0]}.")

    def _delete_group(self, uow: UnitOfWork, group_id: int) -> int:
        tree_service = StepTreeService(uow.steps, uow.element_links)
        # Dangling links are dropped along with the group
        linked = tree_service.load_roots(uow.group_links.list_step_ids(group_id), skip_missing=True)
        # Steps shared with another group or owned by a case stay
        roots = [
            step for step in linked
            if step.case_id == PUBLIC_CASE_ID and not _other_groups(uow, step.id, group_id)
        ]
        nodes = tree_service.expand(roots)
        step_ids = [node.step.id for node in nodes]

        uow.element_links.delete_for_steps(step_ids)
        uow.steps.delete(step_ids)
        uow.group_links.delete_for_group(group_id)
        calls = uow.steps.delete_public_step_calls(group_id)
        affected = uow.groups.delete(group_id)

        if affected:
            logger.info(
                f"Deleted public step group {group_id} "
                f"({len(step_ids)} steps, {calls} case references)"
            )
        return affected

    def _attach_steps(self, uow: UnitOfWork, group: PublicStepGroup) -> PublicStepGroup:
        tree_service = StepTreeService(uow.steps, uow.element_links)
        roots = tree_service.load_roots(uow.group_links.list_step_ids(group.id), skip_missing=True)
        group.steps = tree_service.build_trees(roots)
        return group


def _other_groups(uow: UnitOfWork, step_id: int, group_id: int) -> List[int]:
    return [gid for gid in uow.group_links.list_group_ids(step_id) if gid != group_id]
