"""create habits and entries tables

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2025-12-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()
    if 'habits' not in tables:
        op.create_table(
            'habits',
            sa.Column('id', sa.String(length=64), primary_key=True, nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('type', sa.String(length=20), nullable=False, server_default='number'),
            sa.Column('unit', sa.String(), nullable=True),
            # first goal shape: one magnitude + one period
            sa.Column('goal_daily', sa.Numeric(12, 4), nullable=False, server_default='0'),
            sa.Column('goal_period', sa.String(length=10), nullable=False, server_default='daily'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        )
        op.create_index('ix_habits_user_id', 'habits', ['user_id'])
    if 'entries' not in tables:
        op.create_table(
            'entries',
            sa.Column('user_id', sa.String(length=64), primary_key=True, nullable=False),
            sa.Column('date_iso', sa.String(length=10), primary_key=True, nullable=False),
            sa.Column('habit_id', sa.String(length=64), primary_key=True, nullable=False),
            sa.Column('value', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        )
        op.create_index('ix_entries_date_iso', 'entries', ['date_iso'])
        op.create_index('ix_entries_habit_id', 'entries', ['habit_id'])


def downgrade() -> None:
    op.execute('DROP TABLE IF EXISTS entries')
    op.execute('DROP TABLE IF EXISTS habits')
