"""
ActivityLog ORM model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orgboard.models.base import Base, UUIDMixin, utcnow

if TYPE_CHECKING:
    from orgboard.models.organization import Organization


class ActivityLog(Base, UUIDMixin):
    """Append-only, human-readable audit line scoped to an organization."""

    __tablename__ = "activity_log"

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    actor_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="activity_logs"
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} org_id={self.org_id} message={self.message!r}>"
