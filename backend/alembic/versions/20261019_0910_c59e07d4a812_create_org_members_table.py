"""create_org_members_table

Revision ID: c59e07d4a812
Revises: 8d24be61c3a7
Create Date: 2026-10-19 09:10:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = 'c59e07d4a812'
down_revision: Union[str, None] = '8d24be61c3a7'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create org_members table with role enum and one-row-per-(user, org) constraint."""
    op.create_table(
        'org_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.Enum('admin', 'member', name='org_role'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'org_id', name='uq_org_members_user_org'),
    )
    op.create_index('idx_org_members_org_id', 'org_members', ['org_id'])
    op.create_index('idx_org_members_user_id', 'org_members', ['user_id'])


def downgrade() -> None:
    """Drop org_members table and role enum."""
    op.drop_index('idx_org_members_user_id', table_name='org_members')
    op.drop_index('idx_org_members_org_id', table_name='org_members')
    op.drop_table('org_members')
    sa.Enum(name='org_role').drop(op.get_bind(), checkfirst=True)
