"""
Activity feed schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ActivityCreateRequest(BaseModel):
    """Request body for POST /activity."""

    org_id: UUID
    message: str = Field(min_length=1, max_length=1000)
    project_id: UUID | None = None


class ActivityResponse(BaseModel):
    id: UUID
    org_id: UUID
    project_id: UUID | None
    actor_id: UUID | None
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]
    total: int
