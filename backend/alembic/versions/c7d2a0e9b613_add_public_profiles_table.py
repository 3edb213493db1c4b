"""add public_profiles table for view-only share links

Revision ID: c7d2a0e9b613
Revises: 8b4e6d1f2a55
Create Date: 2026-01-04 11:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c7d2a0e9b613'
down_revision: Union[str, Sequence[str], None] = '8b4e6d1f2a55'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()
    if 'public_profiles' not in tables:
        op.create_table(
            'public_profiles',
            sa.Column('user_id', sa.String(length=64), primary_key=True, nullable=False),
            sa.Column('share_token', sa.String(length=64), nullable=False),
            sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        )
        op.create_index('ix_public_profiles_share_token', 'public_profiles', ['share_token'], unique=True)


def downgrade() -> None:
    # Safe drop if exists
    op.execute('DROP TABLE IF EXISTS public_profiles')
