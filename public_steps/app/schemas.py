"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class StepRead(BaseModel):
    id: int
    parent_id: int
    case_id: int
    project_id: int
    platform: int
    step_type: str
    content: str
    text: str
    error: int
    condition_type: int
    disabled: bool
    sort: int
    elements: List[int] = Field(default_factory=list)
    children: List["StepRead"] = Field(default_factory=list)


class PublicStepsSummary(BaseModel):
    id: int
    name: str


class PublicStepsRead(BaseModel):
    id: int
    name: str
    project_id: int
    platform: int
    steps: List[StepRead] = Field(default_factory=list)


class PublicStepsSave(BaseModel):
    """Creates a group when 'id' is omitted, otherwise updates it."""
    id: Optional[int] = None
    name: str
    project_id: int
    platform: int
    step_ids: List[int] = Field(
        default_factory=list,
        description="Root step IDs, in display order."
    )


class CopyResponse(BaseModel):
    id: int


class DeleteByProjectResponse(BaseModel):
    deleted: int
