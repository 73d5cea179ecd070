"""
Domain Layer - Step Tree Data Models

This module defines the core domain model for reusable UI-automation steps.
Steps form trees through their parent reference; the root steps of those
trees are bundled into named Public Step Groups shared within a project.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, List

# Sentinel parent reference of a root step.
ROOT_PARENT_ID = 0

# Sentinel case reference of a step that is not owned by a test case.
PUBLIC_CASE_ID = 0

# Step type of a case step that invokes a public step group.
# Its 'text' field holds the group id.
PUBLIC_STEP_TYPE = "publicStep"


@dataclass
class Step:
    """
    A single automation action node.

    Attributes:
        id: Identity assigned by the store on insert (None before insert).
        parent_id: Identity of the parent step, or ROOT_PARENT_ID.
        case_id: Owning test case, or PUBLIC_CASE_ID for reusable steps.
        project_id: Owning project.
        platform: Target platform tag (Android, iOS, Web, ...).
        step_type: Action kind (click, sendKeys, publicStep, ...).
        content: Action parameters, opaque to this service.
        text: Action text, opaque to this service.
        error: Error handling policy of the step.
        condition_type: Condition kind for condition steps (if, else, while).
        disabled: Whether the step is skipped on execution.
        sort: Ordering hint shared by all steps.
    """
    id: Optional[int] = None
    parent_id: int = ROOT_PARENT_ID
    case_id: int = PUBLIC_CASE_ID
    project_id: int = 0
    platform: int = 0
    step_type: str = ""
    content: str = ""
    text: str = ""
    error: int = 1
    condition_type: int = 0
    disabled: bool = False
    sort: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent_id == ROOT_PARENT_ID

    def copy_as_public(self, parent_id: int, sort: int) -> "Step":
        """Returns an unsaved copy detached from any case."""
        return replace(
            self, id=None, parent_id=parent_id, case_id=PUBLIC_CASE_ID, sort=sort
        )


@dataclass
class StepNode:
    """
    A step together with the elements it references and its child nodes.

    Produced by the StepTreeService. In a flattened expansion the
    children are still attached, but every node also appears on its own.
    """
    step: Step
    element_ids: List[int] = field(default_factory=list)
    children: List["StepNode"] = field(default_factory=list)


@dataclass
class PublicStepGroup:
    """
    A named, project-scoped bundle of step trees.

    Attributes:
        id: Identity (None before insert).
        name: Display name. Not unique.
        project_id: Owning project.
        platform: Target platform tag.
        steps: Root step trees, filled when the group is read with its steps.
    """
    name: str
    project_id: int
    platform: int
    id: Optional[int] = None
    steps: List[StepNode] = field(default_factory=list)
