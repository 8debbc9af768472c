"""
Project endpoints.

Project detail, task listing/creation and the project activity feed.
Projects are created and listed under /organizations/{org_id}/projects.
"""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.config import settings
from orgboard.core.database import get_db
from orgboard.core.dependencies import get_current_user
from orgboard.models.user import User
from orgboard.schemas.activity import ActivityListResponse
from orgboard.schemas.project import ProjectResponse
from orgboard.schemas.task import TaskCreateRequest, TaskListResponse, TaskResponse
from orgboard.services.activity_service import ActivityService
from orgboard.services.membership_service import MembershipResolver
from orgboard.services.project_service import ProjectService
from orgboard.services.task_service import TaskService

router = APIRouter()


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db=db)


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db=db)


@router.get(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    summary="Get project detail",
)
async def get_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    project, _ = await MembershipResolver(db).resolve_project(project_id, current_user.id)
    return await service.get_project(project)


@router.get(
    "/projects/{project_id}/tasks",
    response_model=TaskListResponse,
    summary="List tasks in a project",
)
async def list_tasks(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """404 if the project does not exist, 403 for non-members."""
    project, _ = await MembershipResolver(db).resolve_project(project_id, current_user.id)
    return await service.list_tasks(project)


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    project_id: UUID,
    data: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Admins only. New tasks always start as pending."""
    return await service.create_task(project_id, data, current_user)


@router.get(
    "/projects/{project_id}/activity",
    response_model=ActivityListResponse,
    summary="Recent activity of a project",
)
async def list_project_activity(
    project_id: UUID,
    limit: int = Query(default=settings.ACTIVITY_FEED_LIMIT, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    project, _ = await MembershipResolver(db).resolve_project(project_id, current_user.id)
    return await ActivityService(db).list_for_project(project.id, limit)
