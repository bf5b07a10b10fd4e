"""create users and games tables

Revision ID: 3c9d0e7a51f2
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c9d0e7a51f2'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_users_username', 'users', ['username'], unique=True)

    if 'games' not in existing_tables:
        op.create_table(
            'games',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('player_x_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('player_o_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='waiting'),
            sa.Column('board', sa.Text(), nullable=True),
            sa.Column('current_player', sa.String(length=1), nullable=True),
            sa.Column('winner', sa.String(length=1), nullable=True),
            sa.Column('bet_amount', sa.Float(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_games_status', 'games', ['status'])
        op.create_index('ix_games_created_at', 'games', ['created_at'])


def downgrade():
    op.drop_index('ix_games_created_at', table_name='games')
    op.drop_index('ix_games_status', table_name='games')
    op.drop_table('games')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
