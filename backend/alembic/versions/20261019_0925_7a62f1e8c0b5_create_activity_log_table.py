"""create_activity_log_table

Revision ID: 7a62f1e8c0b5
Revises: e0c3d58b2f49
Create Date: 2026-10-19 09:25:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = '7a62f1e8c0b5'
down_revision: Union[str, None] = 'e0c3d58b2f49'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE activity_log (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            project_id UUID REFERENCES projects(id) ON DELETE SET NULL,
            actor_id UUID REFERENCES users(id) ON DELETE SET NULL,
            message TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX idx_activity_log_org_created ON activity_log(org_id, created_at DESC)")
    op.execute("CREATE INDEX idx_activity_log_project_created ON activity_log(project_id, created_at DESC) WHERE project_id IS NOT NULL")
    op.execute("CREATE INDEX idx_activity_log_actor_id ON activity_log(actor_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS activity_log")
