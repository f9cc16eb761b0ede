"""Users, recipes and photo drafts

Revision ID: 3b1f9c2d7a41
Revises:
Create Date: 2026-10-19 10:12:03.518204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f9c2d7a41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user')),
    )
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=True)
        batch_op.create_index(batch_op.f('ix_user_username'), ['username'], unique=True)

    op.create_table(
        'recipe',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], name=op.f('fk_recipe_created_by_id_user'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_recipe')),
    )
    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_name'), ['name'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_is_public'), ['is_public'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_created_by_id'), ['created_by_id'], unique=False)

    op.create_table(
        'photo_draft',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=True),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('crop_x', sa.Float(), nullable=True),
        sa.Column('crop_y', sa.Float(), nullable=True),
        sa.Column('crop_width', sa.Float(), nullable=True),
        sa.Column('crop_height', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id'], name=op.f('fk_photo_draft_owner_id_user'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], name=op.f('fk_photo_draft_recipe_id_recipe'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_photo_draft')),
    )
    with op.batch_alter_table('photo_draft', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_photo_draft_owner_id'), ['owner_id'], unique=False)


def downgrade():
    with op.batch_alter_table('photo_draft', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_photo_draft_owner_id'))
    op.drop_table('photo_draft')

    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_recipe_created_by_id'))
        batch_op.drop_index(batch_op.f('ix_recipe_is_public'))
        batch_op.drop_index(batch_op.f('ix_recipe_name'))
    op.drop_table('recipe')

    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_username'))
        batch_op.drop_index(batch_op.f('ix_user_email'))
    op.drop_table('user')
