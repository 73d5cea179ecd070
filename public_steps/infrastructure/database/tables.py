"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the domain dataclasses (Step, PublicStepGroup).
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class PublicStepsDBModel(SQLModel, table=True):
    """
    Persistence model for Public Step Groups.
    Maps 1-to-1 with the 'public_steps' table.
    """

    __tablename__ = "public_steps"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    project_id: int = Field(index=True)
    platform: int


class StepDBModel(SQLModel, table=True):
    """
    Persistence model for Steps.
    parent_id == 0 marks a root step, case_id == 0 marks a public step.
    """

    __tablename__ = "steps"

    id: Optional[int] = Field(default=None, primary_key=True)
    parent_id: int = Field(default=0, index=True)
    case_id: int = Field(default=0, index=True)
    project_id: int = Field(default=0)
    platform: int = Field(default=0)
    step_type: str = Field(default="")

    # Free-form action payload, opaque to the persistence layer
    content: str = Field(default="")
    text: str = Field(default="")

    error: int = Field(default=1)
    condition_type: int = Field(default=0)
    disabled: bool = Field(default=False)
    sort: int = Field(default=0, index=True)


class PublicStepsStepsDBModel(SQLModel, table=True):
    """
    Links a public step group to one of its root steps.
    The surrogate id preserves the order the links were written in.
    """

    __tablename__ = "public_steps_steps"

    id: Optional[int] = Field(default=None, primary_key=True)
    public_steps_id: int = Field(index=True)
    steps_id: int = Field(index=True)


class StepsElementsDBModel(SQLModel, table=True):
    """Links a step to a UI element it references."""

    __tablename__ = "steps_elements"

    id: Optional[int] = Field(default=None, primary_key=True)
    steps_id: int = Field(index=True)
    elements_id: int


class StepSortCounterDBModel(SQLModel, table=True):
    """
    Single-row table holding the highest sort key handed out so far.
    Locked for update while sort keys are reserved.
    """

    __tablename__ = "step_sort_counter"

    id: int = Field(default=1, primary_key=True)
    last_sort: int = Field(default=0)
