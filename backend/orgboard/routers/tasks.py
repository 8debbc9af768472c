"""
Task endpoints.

Read, status update and deletion of individual tasks.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from orgboard.core.dependencies import get_current_user
from orgboard.models.user import User
from orgboard.routers.projects import get_task_service
from orgboard.schemas.task import TaskResponse, TaskStatusUpdateRequest
from orgboard.services.task_service import TaskService

router = APIRouter()


@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Get task detail",
)
async def get_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Any member of the task's organization may read it."""
    return await service.get_task(task_id, current_user)


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update a task's status",
)
async def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Admins may update any task; members only tasks assigned to them."""
    return await service.update_status(task_id, data.status, current_user)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> dict:
    """Admins or the task's assignee only."""
    await service.delete_task(task_id, current_user)
    return {}
