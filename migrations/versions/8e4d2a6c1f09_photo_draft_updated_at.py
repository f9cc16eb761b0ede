"""Photo draft last state change

Revision ID: 8e4d2a6c1f09
Revises: 3b1f9c2d7a41
Create Date: 2026-10-19 15:40:27.114309

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8e4d2a6c1f09'
down_revision = '3b1f9c2d7a41'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('photo_draft', schema=None) as batch_op:
        batch_op.add_column(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))


def downgrade():
    with op.batch_alter_table('photo_draft', schema=None) as batch_op:
        batch_op.drop_column('updated_at')
