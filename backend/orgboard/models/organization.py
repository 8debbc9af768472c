"""
Organization ORM model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orgboard.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from orgboard.models.activity_log import ActivityLog
    from orgboard.models.member import OrgMember
    from orgboard.models.project import Project


class Organization(Base, UUIDMixin, TimestampMixin):
    """Represents a tenant organization."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Relationships
    members: Mapped[list[OrgMember]] = relationship(
        "OrgMember", back_populates="organization", cascade="all, delete-orphan"
    )
    projects: Mapped[list[Project]] = relationship(
        "Project", back_populates="organization"
    )
    activity_logs: Mapped[list[ActivityLog]] = relationship(
        "ActivityLog", back_populates="organization"
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"
