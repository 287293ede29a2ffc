"""profile edit requests

Revision ID: 7a4e2c91d5f3
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-18 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7a4e2c91d5f3'
down_revision: Union[str, None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

editrequeststatus = sa.Enum('pending', 'approved', 'rejected', name='editrequeststatus')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profile_edit_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('changes', sa.JSON(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', editrequeststatus, nullable=False),
        sa.Column('reviewed_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_profile_edit_requests_member_id', 'profile_edit_requests', ['member_id'])
    op.create_index('ix_profile_edit_requests_status', 'profile_edit_requests', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('profile_edit_requests')
    editrequeststatus.drop(op.get_bind(), checkfirst=True)
