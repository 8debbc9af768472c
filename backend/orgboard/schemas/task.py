"""
Task schemas.

Request/response models for task endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from orgboard.models.task import TaskStatus


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class TaskCreateRequest(BaseModel):
    """Request body for POST /projects/{project_id}/tasks."""

    title: str = Field(min_length=1, max_length=500)
    assignee_id: UUID | None = None

    @field_validator("title")
    @classmethod
    def title_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Task title must not be blank")
        return v


class TaskStatusUpdateRequest(BaseModel):
    """Request body for PATCH /tasks/{task_id}."""

    status: TaskStatus


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class AssigneeSummary(BaseModel):
    """Compact user info embedded in task responses."""

    id: UUID
    email: str

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    status: TaskStatus
    assignee_id: UUID | None
    assignee: AssigneeSummary | None = None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    """Response for GET /projects/{project_id}/tasks."""

    tasks: list[TaskResponse]
    total: int
