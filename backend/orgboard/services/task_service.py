"""
Task business logic.

Handles task creation, status updates, deletion and listing.
Permission rules:
- create: admins of the owning organization only
- update status / delete: admins, or the task's assignee
- read: any member of the owning organization
"""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.models.member import OrgMember
from orgboard.models.project import Project
from orgboard.models.task import Task, TaskStatus
from orgboard.models.user import User
from orgboard.schemas.task import (
    AssigneeSummary,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
)
from orgboard.services.activity_service import ActivityService
from orgboard.services.membership_service import MembershipResolver


def _to_response(task: Task, assignee: User | None = None) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        title=task.title,
        status=task.status,
        assignee_id=task.assignee_id,
        assignee=AssigneeSummary(id=assignee.id, email=assignee.email) if assignee else None,
        created_by=task.created_by,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _may_modify(task: Task, member: OrgMember, user_id: UUID) -> bool:
    return member.is_admin or task.assignee_id == user_id


class TaskService:
    """Handles all task operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipResolver(db)
        self.activity = ActivityService(db)

    # -----------------------------------------------------------------------
    # List Tasks
    # -----------------------------------------------------------------------

    async def list_tasks(self, project: Project) -> TaskListResponse:
        """Tasks of a project with assignee id/email joined, oldest first."""
        result = await self.db.execute(
            select(Task, User)
            .outerjoin(User, Task.assignee_id == User.id)
            .where(Task.project_id == project.id)
            .order_by(Task.created_at)
        )
        tasks = [_to_response(task, assignee) for task, assignee in result.all()]
        return TaskListResponse(tasks=tasks, total=len(tasks))

    # -----------------------------------------------------------------------
    # Create Task
    # -----------------------------------------------------------------------

    async def create_task(
        self, project_id: UUID, data: TaskCreateRequest, creator: User
    ) -> TaskResponse:
        """
        Create a new task in a project.

        - 404 if the project does not exist
        - 403 unless the creator is an admin of the owning organization
        - 400 if the assignee is not a member of that organization
        - status always starts as pending
        """
        project, member = await self.members.resolve_project(project_id, creator.id)
        self.members.ensure_admin(member)

        assignee = None
        if data.assignee_id is not None:
            assignee = await self._get_org_user(data.assignee_id, project.org_id)

        task = Task(
            project_id=project.id,
            title=data.title,
            assignee_id=data.assignee_id,
            status=TaskStatus.pending,
            created_by=creator.id,
        )
        self.db.add(task)
        await self.db.flush()

        await self.activity.record(
            project.org_id, creator.id, f"created task '{task.title}'", project_id=project.id
        )
        return _to_response(task, assignee)

    # -----------------------------------------------------------------------
    # Get Task
    # -----------------------------------------------------------------------

    async def get_task(self, task_id: UUID, caller: User) -> TaskResponse:
        task, _, _ = await self.members.require_task_member(task_id, caller.id)
        return _to_response(task, await self._get_user(task.assignee_id))

    # -----------------------------------------------------------------------
    # Update Status
    # -----------------------------------------------------------------------

    async def update_status(
        self, task_id: UUID, new_status: TaskStatus, actor: User
    ) -> TaskResponse:
        """
        Set a task's status.

        Admins may update any task in their organization; members only the
        tasks assigned to them.
        """
        task, project, member = await self.members.require_task_member(task_id, actor.id)

        if not _may_modify(task, member, actor.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "NOT_ASSIGNEE", "message": "Members can only update their own tasks"},
            )

        task.status = new_status
        await self.db.flush()
        await self.db.refresh(task)

        await self.activity.record(
            project.org_id,
            actor.id,
            f"updated task '{task.title}' status to '{new_status.value}'",
            project_id=project.id,
        )
        return _to_response(task, await self._get_user(task.assignee_id))

    # -----------------------------------------------------------------------
    # Delete Task
    # -----------------------------------------------------------------------

    async def delete_task(self, task_id: UUID, actor: User) -> None:
        task, project, member = await self.members.require_task_member(task_id, actor.id)

        if not _may_modify(task, member, actor.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "NOT_ASSIGNEE",
                    "message": "Only admins or the assignee can delete this task",
                },
            )

        title = task.title
        await self.db.delete(task)
        await self.db.flush()

        await self.activity.record(
            project.org_id, actor.id, f"deleted task '{title}'", project_id=project.id
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _get_user(self, user_id: UUID | None) -> User | None:
        if user_id is None:
            return None
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def _get_org_user(self, user_id: UUID, org_id: UUID) -> User:
        """Load a user and verify they are a member of the org."""
        result = await self.db.execute(
            select(User)
            .join(OrgMember, OrgMember.user_id == User.id)
            .where(User.id == user_id, OrgMember.org_id == org_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "USER_NOT_IN_ORG", "message": "Assignee is not a member of this organization"},
            )
        return user
