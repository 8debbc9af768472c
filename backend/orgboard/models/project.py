"""
Project ORM model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orgboard.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from orgboard.models.organization import Organization
    from orgboard.models.task import Task


class Project(Base, UUIDMixin, TimestampMixin):
    """A project owned by exactly one organization."""

    __tablename__ = "projects"

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="projects"
    )
    tasks: Mapped[list[Task]] = relationship("Task", back_populates="project")

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} org_id={self.org_id}>"
