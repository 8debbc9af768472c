"""
Organization schemas.

Request/response models for organization and membership endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from orgboard.models.member import OrgRole


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class OrganizationCreateRequest(BaseModel):
    """Request body for POST /organizations."""

    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Organization name must not be blank")
        return v


class OrganizationResponse(BaseModel):
    """Organization record."""

    id: UUID
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrganizationDetailResponse(OrganizationResponse):
    """Organization record plus the caller's role in it."""

    user_role: OrgRole


class OrganizationWithRole(BaseModel):
    """Entry of GET /organizations: an organization the caller belongs to."""

    id: UUID
    name: str
    role: OrgRole
    created_at: datetime


class OrganizationListResponse(BaseModel):
    organizations: list[OrganizationWithRole]
    total: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MembershipResponse(BaseModel):
    """A single (user, organization, role) membership row."""

    id: UUID
    org_id: UUID
    user_id: UUID
    role: OrgRole
    joined_at: datetime

    model_config = {"from_attributes": True}


class MemberAssignRequest(BaseModel):
    """Request body for POST /organizations/{org_id}/members."""

    user_id: UUID | None = None
    role: OrgRole = OrgRole.member


class MemberResponse(BaseModel):
    """Org member with user info and role."""

    user_id: UUID
    email: str
    role: OrgRole
    joined_at: datetime


class MembersListResponse(BaseModel):
    """Response for GET /organizations/{org_id}/members."""

    members: list[MemberResponse]
    total: int
