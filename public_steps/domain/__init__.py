"""
Domain Layer - Step Tree Data Models

Defines the core domain model of reusable steps: Steps, the trees they
form, and the Public Step Groups that bundle those trees.
"""

from public_steps.domain.models import (
    PUBLIC_CASE_ID,
    PUBLIC_STEP_TYPE,
    ROOT_PARENT_ID,
    PublicStepGroup,
    Step,
    StepNode,
)

__all__ = [
    "PUBLIC_CASE_ID",
    "PUBLIC_STEP_TYPE",
    "ROOT_PARENT_ID",
    "PublicStepGroup",
    "Step",
    "StepNode",
]
