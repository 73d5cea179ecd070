"""
Step Tree Service

Rebuilds step trees from their root steps and flattens them. Children are
found through their parent reference and ordered by sort key, and each node
carries the IDs of the elements its step references.
"""

import logging
from typing import Iterable, Iterator, List, Set

from ..domain.models import Step, StepNode
from ..repositories.elements import ElementLinkRepository
from ..repositories.steps import StepRepository
from .exceptions import InconsistentTree, NotFound

logger = logging.getLogger(__name__)


class StepTreeService:
    def __init__(self, steps: StepRepository, element_links: ElementLinkRepository):
        self.steps = steps
        self.element_links = element_links

    def load_roots(self, step_ids: Iterable[int], skip_missing: bool = False) -> List[Step]:
        """
        Loads linked root steps in the given order.
        Missing ones raise NotFound, or are left out with skip_missing=True.
        """
        roots = []
        for step_id in step_ids:
            step = self.steps.get(step_id)
            if step is None:
                if skip_missing:
                    logger.warning(f"Skipping dangling link to step {step_id}")
                    continue
                raise NotFound(f"Step {step_id} not found.")
            roots.append(step)
        return roots

    def build_trees(self, roots: List[Step]) -> List[StepNode]:
        """
        Builds one nested tree per root, siblings in sort order.
        Raises InconsistentTree if a step is reached twice, which means
        a cycle or a step shared between trees.
        """
        visited: Set[int] = set()
        return [self._build(root, visited) for root in roots]

    def expand(self, roots: List[Step]) -> List[StepNode]:
        """
        Flattens the trees under 'roots' in pre-order: every parent comes
        before its descendants and siblings keep their order.
        """
        flat: List[StepNode] = []
        for tree in self.build_trees(roots):
            flat.extend(_walk(tree))
        return flat

    def _build(self, step: Step, visited: Set[int]) -> StepNode:
        if step.id in visited:
            raise InconsistentTree(f"Step {step.id} is reachable more than once.")
        visited.add(step.id)

        node = StepNode(step=step, element_ids=self.element_links.list_element_ids(step.id))
        node.children = [
            self._build(child, visited) for child in self.steps.list_children(step.id)
        ]
        return node


def _walk(node: StepNode) -> Iterator[StepNode]:
    yield node
    for child in node.children:
        yield from _walk(child)
