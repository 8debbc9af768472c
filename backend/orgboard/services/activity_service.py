"""
Activity feed.

Append-only, human-readable audit lines written as a side effect of every
mutation. Recording is best-effort: a failure to write an entry is logged
and never surfaces to the caller of the mutation that triggered it.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.config import settings
from orgboard.models.activity_log import ActivityLog
from orgboard.models.user import User
from orgboard.schemas.activity import ActivityListResponse, ActivityResponse

logger = logging.getLogger(__name__)


class ActivityService:
    """Writes and reads organization activity entries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Record
    # -----------------------------------------------------------------------

    async def record(
        self,
        org_id: UUID,
        actor_id: UUID,
        fragment: str,
        project_id: UUID | None = None,
    ) -> ActivityLog | None:
        """
        Append "{actor label} {fragment}" to the organization's feed.

        The actor lookup and the insert run in a SAVEPOINT so a failed
        statement rolls back only the activity row, leaving the enclosing
        mutation intact. Unknown actors are stored with a NULL actor_id.
        """
        try:
            async with self.db.begin_nested():
                label, known_actor_id = await self.resolve_actor(actor_id)
                entry = ActivityLog(
                    org_id=org_id,
                    project_id=project_id,
                    actor_id=known_actor_id,
                    message=f"{label} {fragment}",
                )
                self.db.add(entry)
            return entry
        except SQLAlchemyError:
            logger.exception(
                "Failed to record activity org_id=%s actor_id=%s: %s",
                org_id, actor_id, fragment,
            )
            return None

    async def log_manual(
        self,
        org_id: UUID,
        actor_id: UUID,
        message: str,
        project_id: UUID | None = None,
    ) -> ActivityResponse:
        """Record an entry on explicit request; errors propagate."""
        label, known_actor_id = await self.resolve_actor(actor_id)
        entry = ActivityLog(
            org_id=org_id,
            project_id=project_id,
            actor_id=known_actor_id,
            message=f"{label} {message}",
        )
        self.db.add(entry)
        await self.db.flush()
        return ActivityResponse.model_validate(entry)

    async def resolve_actor(self, actor_id: UUID) -> tuple[str, UUID | None]:
        """
        Return (label, actor_id to store).

        The label is the actor's email. For an unknown or deleted user it is
        "User {id}" and the stored id is None.
        """
        result = await self.db.execute(select(User.email).where(User.id == actor_id))
        email = result.scalar_one_or_none()
        if email is None:
            return f"User {actor_id}", None
        return email, actor_id

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    async def list_for_org(
        self, org_id: UUID, limit: int | None = None
    ) -> ActivityListResponse:
        """Newest-first entries of an organization."""
        stmt = select(ActivityLog).where(ActivityLog.org_id == org_id)
        return await self._list(stmt, limit)

    async def list_for_project(
        self, project_id: UUID, limit: int | None = None
    ) -> ActivityListResponse:
        """Newest-first entries tagged with the given project."""
        stmt = select(ActivityLog).where(ActivityLog.project_id == project_id)
        return await self._list(stmt, limit)

    async def _list(self, stmt, limit: int | None) -> ActivityListResponse:
        cap = settings.ACTIVITY_FEED_LIMIT
        limit = cap if limit is None else min(limit, cap)
        result = await self.db.execute(
            stmt.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit)
        )
        entries = [ActivityResponse.model_validate(e) for e in result.scalars().all()]
        return ActivityListResponse(activities=entries, total=len(entries))
