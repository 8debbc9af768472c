"""
Membership resolution.

Single source of truth for "is this user a member of this organization, and
with which role". Every organization-, project- and task-scoped operation
goes through this resolver before touching domain rows.

Policy:
- referenced resource missing            -> 404
- resource exists, caller not a member   -> 403
- caller is a member but lacks the role  -> 403
"""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.models.member import OrgMember, OrgRole
from orgboard.models.organization import Organization
from orgboard.models.project import Project
from orgboard.models.task import Task


def _not_a_member() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"code": "NOT_A_MEMBER", "message": "You are not a member of this organization"},
    )


def _admin_required() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"code": "INSUFFICIENT_ROLE", "message": "Only admins can perform this action"},
    )


class MembershipResolver:
    """Resolves a caller's membership for organizations, projects and tasks."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_membership(self, user_id: UUID, org_id: UUID) -> OrgMember | None:
        result = await self.db.execute(
            select(OrgMember).where(
                OrgMember.org_id == org_id,
                OrgMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def role_of(self, user_id: UUID, org_id: UUID) -> OrgRole | None:
        """Return the user's role in the organization, or None if not a member."""
        result = await self.db.execute(
            select(OrgMember.role).where(
                OrgMember.org_id == org_id,
                OrgMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_organization(self, org_id: UUID) -> Organization:
        result = await self.db.execute(
            select(Organization).where(Organization.id == org_id)
        )
        org = result.scalar_one_or_none()
        if org is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "ORG_NOT_FOUND", "message": "Organization not found"},
            )
        return org

    async def require_member(
        self, org_id: UUID, user_id: UUID
    ) -> tuple[Organization, OrgMember]:
        """Resolve the organization and verify the user belongs to it."""
        org = await self.get_organization(org_id)
        member = await self.get_membership(user_id, org.id)
        if member is None:
            raise _not_a_member()
        return org, member

    async def require_admin(
        self, org_id: UUID, user_id: UUID
    ) -> tuple[Organization, OrgMember]:
        org, member = await self.require_member(org_id, user_id)
        self.ensure_admin(member)
        return org, member

    async def get_project(self, project_id: UUID) -> Project:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if project is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "PROJECT_NOT_FOUND", "message": "Project not found"},
            )
        return project

    async def resolve_project(
        self, project_id: UUID, user_id: UUID
    ) -> tuple[Project, OrgMember]:
        """Resolve a project and the caller's membership in its organization."""
        result = await self.db.execute(
            select(Project, OrgMember)
            .outerjoin(
                OrgMember,
                (OrgMember.org_id == Project.org_id) & (OrgMember.user_id == user_id),
            )
            .where(Project.id == project_id)
        )
        row = result.one_or_none()
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "PROJECT_NOT_FOUND", "message": "Project not found"},
            )
        project, member = row
        if member is None:
            raise _not_a_member()
        return project, member

    async def resolve_task(
        self, task_id: UUID, user_id: UUID
    ) -> tuple[Task, Project, OrgMember | None]:
        """
        Resolve task -> project -> caller membership in a single join.

        The membership is None when the caller does not belong to the owning
        organization; callers decide whether that is fatal.
        """
        result = await self.db.execute(
            select(Task, Project, OrgMember)
            .join(Project, Task.project_id == Project.id)
            .outerjoin(
                OrgMember,
                (OrgMember.org_id == Project.org_id) & (OrgMember.user_id == user_id),
            )
            .where(Task.id == task_id)
        )
        row = result.one_or_none()
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "TASK_NOT_FOUND", "message": "Task not found"},
            )
        task, project, member = row
        return task, project, member

    async def require_task_member(
        self, task_id: UUID, user_id: UUID
    ) -> tuple[Task, Project, OrgMember]:
        task, project, member = await self.resolve_task(task_id, user_id)
        if member is None:
            raise _not_a_member()
        return task, project, member

    @staticmethod
    def ensure_admin(member: OrgMember) -> None:
        if not member.is_admin:
            raise _admin_required()
