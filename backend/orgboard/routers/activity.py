"""
Manual activity endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.database import get_db
from orgboard.core.dependencies import get_current_user
from orgboard.models.user import User
from orgboard.schemas.activity import ActivityCreateRequest, ActivityResponse
from orgboard.services.activity_service import ActivityService
from orgboard.services.membership_service import MembershipResolver

router = APIRouter()


@router.post(
    "",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an activity entry",
)
async def record_activity(
    data: ActivityCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    """
    Append an entry to an organization's feed. Must be a member.

    When project_id is given it must belong to the same organization,
    otherwise 400 regardless of the caller's access to the other one.
    """
    resolver = MembershipResolver(db)
    org, _ = await resolver.require_member(data.org_id, current_user.id)
    project_id = None
    if data.project_id is not None:
        project = await resolver.get_project(data.project_id)
        if project.org_id != org.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "PROJECT_NOT_IN_ORG", "message": "Project does not belong to this organization"},
            )
        project_id = project.id
    return await ActivityService(db).log_manual(org.id, current_user.id, data.message, project_id)
