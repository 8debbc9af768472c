"""create_projects_table

Revision ID: 1b7f4a90d6e3
Revises: c59e07d4a812
Create Date: 2026-10-19 09:15:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = '1b7f4a90d6e3'
down_revision: Union[str, None] = 'c59e07d4a812'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE projects (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE RESTRICT,
            name VARCHAR(100) NOT NULL,
            created_by UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX idx_projects_org_id ON projects(org_id)")
    op.execute("CREATE INDEX idx_projects_org_created_at ON projects(org_id, created_at DESC)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS projects")
