import logging
import sys
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import Response

from .dependencies import get_public_steps_service
from ..config import settings
from ..domain.models import PublicStepGroup, StepNode
from ..infrastructure.database.connection import init_db
from ..services.exceptions import InconsistentTree, NotFound, PublicStepsError
from ..services.public_steps import PublicStepsService
from .schemas import (
    CopyResponse,
    DeleteByProjectResponse,
    PublicStepsRead,
    PublicStepsSave,
    PublicStepsSummary,
    StepRead,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(title="Public Steps Service", lifespan=lifespan)


def _http_error(exc: PublicStepsError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InconsistentTree):
        return HTTPException(status_code=409, detail=str(exc))
    # StoreFailure: don't leak SQL to clients
    logger.error(f"Store failure: {exc}")
    return HTTPException(status_code=500, detail="Database operation failed")


# We manually transform the Domain objects into the API models.
# "dto" stands for Data Transfer Object.
def _step_dto(node: StepNode) -> StepRead:
    step = node.step
    return StepRead(
        id=step.id,
        parent_id=step.parent_id,
        case_id=step.case_id,
        project_id=step.project_id,
        platform=step.platform,
        step_type=step.step_type,
        content=step.content,
        text=step.text,
        error=step.error,
        condition_type=step.condition_type,
        disabled=step.disabled,
        sort=step.sort,
        elements=node.element_ids,
        children=[_step_dto(child) for child in node.children],
    )


def _group_dto(group: PublicStepGroup) -> PublicStepsRead:
    return PublicStepsRead(
        id=group.id,
        name=group.name,
        project_id=group.project_id,
        platform=group.platform,
        steps=[_step_dto(node) for node in group.steps],
    )


# --- Endpoints ---

@app.get("/public-steps", response_model=List[PublicStepsSummary])
def list_public_steps(
    project_id: int,
    platform: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    """ID and name of every group of a project on one platform."""
    try:
        groups = service.list_by_project_and_platform(project_id, platform)
    except PublicStepsError as e:
        raise _http_error(e)
    return [PublicStepsSummary(id=group.id, name=group.name) for group in groups]


@app.get("/projects/{project_id}/public-steps", response_model=List[PublicStepsRead])
def list_project_public_steps(
    project_id: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    try:
        return [_group_dto(group) for group in service.list_by_project(project_id)]
    except PublicStepsError as e:
        raise _http_error(e)


@app.get("/public-steps/{group_id}", response_model=PublicStepsRead)
def get_public_steps(
    group_id: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    try:
        return _group_dto(service.find_by_id(group_id))
    except PublicStepsError as e:
        raise _http_error(e)


@app.put("/public-steps", response_model=PublicStepsRead)
def save_public_steps(
    payload: PublicStepsSave,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    group = PublicStepGroup(
        id=payload.id,
        name=payload.name,
        project_id=payload.project_id,
        platform=payload.platform,
    )
    try:
        return _group_dto(service.save_group(group, payload.step_ids))
    except PublicStepsError as e:
        raise _http_error(e)


@app.post(
    "/public-steps/{group_id}/copy",
    response_model=CopyResponse,
    status_code=status.HTTP_201_CREATED
)
def copy_public_steps(
    group_id: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    """Duplicates a group with all its step trees."""
    try:
        return CopyResponse(id=service.copy_group(group_id))
    except PublicStepsError as e:
        raise _http_error(e)


@app.delete("/public-steps/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_public_steps(
    group_id: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    """
    Deletes a group and its steps. Returns 204 No Content on success.
    """
    try:
        affected = service.delete_group(group_id)
    except PublicStepsError as e:
        raise _http_error(e)

    if not affected:
        raise HTTPException(status_code=404, detail="Public step group not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/projects/{project_id}/public-steps", response_model=DeleteByProjectResponse)
def delete_project_public_steps(
    project_id: int,
    service: PublicStepsService = Depends(get_public_steps_service)
):
    try:
        return DeleteByProjectResponse(deleted=service.delete_by_project(project_id))
    except PublicStepsError as e:
        raise _http_error(e)
