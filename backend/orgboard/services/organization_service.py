"""
Organization business logic.

Handles org creation, joining, membership assignment and member listing.
All queries scoped by org_id.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.models.member import OrgMember, OrgRole
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.schemas.organization import (
    MemberResponse,
    MembersListResponse,
    MembershipResponse,
    OrganizationCreateRequest,
    OrganizationDetailResponse,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationWithRole,
)
from orgboard.services.activity_service import ActivityService
from orgboard.services.membership_service import MembershipResolver


def _already_member(message: str = "User is already a member of this organization") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"code": "ALREADY_MEMBER", "message": message},
    )


class OrganizationService:
    """Handles all organization operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipResolver(db)
        self.activity = ActivityService(db)

    # -----------------------------------------------------------------------
    # Create Organization
    # -----------------------------------------------------------------------

    async def create_organization(
        self, data: OrganizationCreateRequest, creator: User
    ) -> OrganizationResponse:
        """
        Create a new organization.

        - Creates organization record
        - Assigns creator as admin
        - Records activity

        All three writes share the request transaction.
        """
        org = Organization(name=data.name)
        self.db.add(org)
        await self.db.flush()

        self.db.add(OrgMember(org_id=org.id, user_id=creator.id, role=OrgRole.admin))
        await self.db.flush()

        await self.activity.record(org.id, creator.id, f"created organization '{org.name}'")

        return OrganizationResponse.model_validate(org)

    # -----------------------------------------------------------------------
    # Join / Assign
    # -----------------------------------------------------------------------

    async def join_organization(self, org_id: UUID, user: User) -> MembershipResponse:
        """
        Join an organization as a member.

        The existence check is advisory; the unique (user_id, org_id)
        constraint is what guarantees one membership under concurrency.
        """
        org = await self.members.get_organization(org_id)

        if await self.members.get_membership(user.id, org.id) is not None:
            raise _already_member("You are already a member of this organization")

        member = await self._insert_member(org.id, user.id, OrgRole.member)
        await self.activity.record(org.id, user.id, "joined the organization")
        return MembershipResponse.model_validate(member)

    async def assign_membership(
        self,
        org: Organization,
        target_user_id: UUID | None,
        role: OrgRole,
        acting_user: User,
    ) -> MembershipResponse:
        """
        Add another user to the organization with an explicit role.

        The caller's admin role is enforced by the router dependency.
        Target user must exist and not already be a member.
        """
        if target_user_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "USER_ID_REQUIRED", "message": "user_id is required"},
            )

        result = await self.db.execute(select(User).where(User.id == target_user_id))
        target = result.scalar_one_or_none()
        if target is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "USER_NOT_FOUND", "message": "User not found"},
            )

        if await self.members.get_membership(target.id, org.id) is not None:
            raise _already_member()

        member = await self._insert_member(org.id, target.id, role)
        await self.activity.record(
            org.id,
            acting_user.id,
            f"added {target.email} to the organization as {role.value}",
        )
        return MembershipResponse.model_validate(member)

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    async def list_organizations_for_user(self, user_id: UUID) -> OrganizationListResponse:
        """All organizations the user belongs to, with the user's role in each."""
        result = await self.db.execute(
            select(Organization, OrgMember.role)
            .join(OrgMember, OrgMember.org_id == Organization.id)
            .where(OrgMember.user_id == user_id)
            .order_by(Organization.created_at)
        )
        organizations = [
            OrganizationWithRole(
                id=org.id,
                name=org.name,
                role=role,
                created_at=org.created_at,
            )
            for org, role in result.all()
        ]
        return OrganizationListResponse(organizations=organizations, total=len(organizations))

    async def get_organization(
        self, org_id: UUID, caller: User
    ) -> OrganizationDetailResponse:
        """Organization detail plus the caller's role. Callers must be members."""
        org, member = await self.members.require_member(org_id, caller.id)
        return OrganizationDetailResponse(
            id=org.id,
            name=org.name,
            created_at=org.created_at,
            user_role=member.role,
        )

    async def list_members(self, org_id: UUID) -> MembersListResponse:
        """List all members of an organization with user details."""
        result = await self.db.execute(
            select(OrgMember, User)
            .join(User, OrgMember.user_id == User.id)
            .where(OrgMember.org_id == org_id)
            .order_by(OrgMember.joined_at)
        )
        members = [
            MemberResponse(
                user_id=user.id,
                email=user.email,
                role=member.role,
                joined_at=member.joined_at,
            )
            for member, user in result.all()
        ]
        return MembersListResponse(members=members, total=len(members))

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _insert_member(self, org_id: UUID, user_id: UUID, role: OrgRole) -> OrgMember:
        member = OrgMember(org_id=org_id, user_id=user_id, role=role)
        self.db.add(member)
        try:
            await self.db.flush()
        except IntegrityError:
            # Concurrent insert for the same (user, org) won the race.
            await self.db.rollback()
            raise _already_member()
        return member
