"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from orgboard.models.base import Base, TimestampMixin, UUIDMixin
from orgboard.models.member import OrgMember, OrgRole
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.models.project import Project
from orgboard.models.task import Task, TaskStatus
from orgboard.models.activity_log import ActivityLog

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Organization",
    "User",
    "OrgMember",
    "OrgRole",
    "Project",
    "Task",
    "TaskStatus",
    "ActivityLog",
]
