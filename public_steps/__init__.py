"""
Public Steps Service

Stores reusable UI-automation step trees, bundles them into Public Step
Groups shared within a project, and duplicates whole groups with fresh
identities inside a single transaction.
"""

from public_steps.domain import (
    PUBLIC_CASE_ID,
    ROOT_PARENT_ID,
    PublicStepGroup,
    Step,
    StepNode,
)
from public_steps.services.exceptions import (
    InconsistentTree,
    NotFound,
    PublicStepsError,
    StoreFailure,
)

__all__ = [
    # Domain Layer
    "PUBLIC_CASE_ID",
    "ROOT_PARENT_ID",
    "PublicStepGroup",
    "Step",
    "StepNode",
    # Errors
    "InconsistentTree",
    "NotFound",
    "PublicStepsError",
    "StoreFailure",
]
