"""add goals document, decimals and sort_index to habits

Goals move from the single goal_daily/goal_period pair to a per-period
document. The old columns stay; readers fall back to them when `goals`
has nothing set.

Revision ID: 8b4e6d1f2a55
Revises: 3f1a9c2d7e10
Create Date: 2025-12-20 18:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '8b4e6d1f2a55'
down_revision: Union[str, Sequence[str], None] = '3f1a9c2d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    cols = {c['name'] for c in inspector.get_columns('habits')}

    with op.batch_alter_table('habits') as batch_op:
        if 'goals' not in cols:
            batch_op.add_column(sa.Column('goals', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True))
        if 'decimals' not in cols:
            batch_op.add_column(sa.Column('decimals', sa.Integer(), nullable=False, server_default='0'))
        if 'sort_index' not in cols:
            batch_op.add_column(sa.Column('sort_index', sa.Integer(), nullable=False, server_default='0'))


def downgrade() -> None:
    with op.batch_alter_table('habits') as batch_op:
        batch_op.drop_column('sort_index')
        batch_op.drop_column('decimals')
        batch_op.drop_column('goals')
