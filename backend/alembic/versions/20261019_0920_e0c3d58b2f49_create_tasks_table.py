"""create_tasks_table

Revision ID: e0c3d58b2f49
Revises: 1b7f4a90d6e3
Create Date: 2026-10-19 09:20:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = 'e0c3d58b2f49'
down_revision: Union[str, None] = '1b7f4a90d6e3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE TYPE task_status AS ENUM ('pending', 'in-progress', 'completed')")
    op.execute("""
        CREATE TABLE tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            project_id UUID NOT NULL REFERENCES projects(id) ON DELETE RESTRICT,
            title VARCHAR(500) NOT NULL,
            assignee_id UUID REFERENCES users(id) ON DELETE SET NULL,
            status task_status NOT NULL DEFAULT 'pending',
            created_by UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX idx_tasks_project_id ON tasks(project_id)")
    op.execute("CREATE INDEX idx_tasks_assignee ON tasks(assignee_id) WHERE assignee_id IS NOT NULL")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tasks")
    op.execute("DROP TYPE IF EXISTS task_status")
