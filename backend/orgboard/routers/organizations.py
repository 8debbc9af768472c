"""
Organization management endpoints.

Create, join, membership assignment, member and project listings, activity.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.config import settings
from orgboard.core.database import get_db
from orgboard.core.dependencies import get_current_user, get_org_member, require_role
from orgboard.models.member import OrgMember, OrgRole
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.routers.projects import get_project_service
from orgboard.schemas.activity import ActivityListResponse
from orgboard.schemas.organization import (
    MemberAssignRequest,
    MembersListResponse,
    MembershipResponse,
    OrganizationCreateRequest,
    OrganizationDetailResponse,
    OrganizationListResponse,
    OrganizationResponse,
)
from orgboard.schemas.project import (
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
)
from orgboard.services.activity_service import ActivityService
from orgboard.services.organization_service import OrganizationService
from orgboard.services.project_service import ProjectService

router = APIRouter()


def get_org_service(db: AsyncSession = Depends(get_db)) -> OrganizationService:
    """Dependency that constructs OrganizationService."""
    return OrganizationService(db=db)


# ---------------------------------------------------------------------------
# Create / List Organizations
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new organization",
)
async def create_organization(
    data: OrganizationCreateRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """Create a new organization. The creator becomes its admin."""
    return await service.create_organization(data, current_user)


@router.get(
    "",
    response_model=OrganizationListResponse,
    summary="List organizations of the current user",
)
async def list_my_organizations(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationListResponse:
    return await service.list_organizations_for_user(current_user.id)


# ---------------------------------------------------------------------------
# Get Organization
# ---------------------------------------------------------------------------

@router.get(
    "/{org_id}",
    response_model=OrganizationDetailResponse,
    summary="Get organization with the caller's role",
)
async def get_organization(
    org_id: UUID,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationDetailResponse:
    """Get organization details. Must be a member."""
    return await service.get_organization(org_id, current_user)


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

@router.post(
    "/{org_id}/join",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join an organization as a member",
)
async def join_organization(
    org_id: UUID,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> MembershipResponse:
    """409 if the caller already belongs to the organization."""
    return await service.join_organization(org_id, current_user)


@router.post(
    "/{org_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a user to the organization with a role",
)
async def assign_membership(
    data: MemberAssignRequest,
    org_and_member: tuple[Organization, OrgMember] = Depends(require_role(OrgRole.admin)),
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> MembershipResponse:
    """Requires admin role. Role defaults to member."""
    org, _ = org_and_member
    return await service.assign_membership(org, data.user_id, data.role, current_user)


@router.get(
    "/{org_id}/members",
    response_model=MembersListResponse,
    summary="List organization members",
)
async def list_members(
    org_and_member: tuple[Organization, OrgMember] = Depends(get_org_member),
    service: OrganizationService = Depends(get_org_service),
) -> MembersListResponse:
    org, _ = org_and_member
    return await service.list_members(org.id)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@router.get(
    "/{org_id}/projects",
    response_model=ProjectListResponse,
    summary="List projects of an organization, newest first",
)
async def list_projects(
    org_and_member: tuple[Organization, OrgMember] = Depends(get_org_member),
    service: ProjectService = Depends(get_project_service),
) -> ProjectListResponse:
    org, _ = org_and_member
    return await service.list_projects(org.id)


@router.post(
    "/{org_id}/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new project",
)
async def create_project(
    data: ProjectCreateRequest,
    org_and_member: tuple[Organization, OrgMember] = Depends(get_org_member),
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Any member of the organization may create projects."""
    org, _ = org_and_member
    return await service.create_project(org.id, data, current_user)


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

@router.get(
    "/{org_id}/activity",
    response_model=ActivityListResponse,
    summary="Recent activity of an organization",
)
async def list_activity(
    limit: int = Query(default=settings.ACTIVITY_FEED_LIMIT, ge=1),
    org_and_member: tuple[Organization, OrgMember] = Depends(get_org_member),
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    org, _ = org_and_member
    return await ActivityService(db).list_for_org(org.id, limit)
