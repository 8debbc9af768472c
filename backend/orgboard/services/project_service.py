"""
Project business logic.

Handles project creation and listing.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.models.project import Project
from orgboard.models.user import User
from orgboard.schemas.project import (
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
)
from orgboard.services.activity_service import ActivityService


class ProjectService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.activity = ActivityService(db)

    async def list_projects(self, org_id: UUID) -> ProjectListResponse:
        result = await self.db.execute(
            select(Project)
            .where(Project.org_id == org_id)
            .order_by(Project.created_at.desc())
        )
        projects = list(result.scalars().all())
        return ProjectListResponse(
            projects=[ProjectResponse.model_validate(p) for p in projects],
            total=len(projects),
        )

    async def create_project(
        self, org_id: UUID, data: ProjectCreateRequest, creator: User
    ) -> ProjectResponse:
        project = Project(org_id=org_id, name=data.name, created_by=creator.id)
        self.db.add(project)
        await self.db.flush()

        await self.activity.record(
            org_id, creator.id, f"created project '{project.name}'", project_id=project.id
        )
        return ProjectResponse.model_validate(project)

    async def get_project(self, project: Project) -> ProjectResponse:
        return ProjectResponse.model_validate(project)
