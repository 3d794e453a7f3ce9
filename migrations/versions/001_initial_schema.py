"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('user_call_link', sa.String(length=1020), nullable=True),
        sa.Column('profile_url', sa.String(length=765), server_default='', nullable=False),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    # --- teams ---
    op.create_table(
        'teams',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('uid', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('team_call_link', sa.String(length=1020), nullable=True),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name='fk_teams_owner'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_teams_uid_name', 'teams', ['uid', 'name'], unique=False)
    op.create_index('idx_teams_owner', 'teams', ['owner_id', 'deleted'], unique=False)

    # --- teams_links ---
    op.create_table(
        'teams_links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('team_id', sa.String(length=64), nullable=False),
        sa.Column('add_user', sa.String(length=64), nullable=False),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name='fk_teams_links_team'),
        sa.ForeignKeyConstraint(['add_user'], ['users.id'], name='fk_teams_links_user'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_teams_links_team_user', 'teams_links', ['team_id', 'add_user', 'deleted'], unique=False)

    # --- users_links ---
    op.create_table(
        'users_links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id1', sa.String(length=64), nullable=False),
        sa.Column('user_id2', sa.String(length=64), nullable=False),
        sa.Column('blocked', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.CheckConstraint('user_id1 <> user_id2', name='chk_users_links_not_self'),
        sa.ForeignKeyConstraint(['user_id1'], ['users.id'], name='fk_users_links_user1'),
        sa.ForeignKeyConstraint(['user_id2'], ['users.id'], name='fk_users_links_user2'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_users_links_user1', 'users_links', ['user_id1', 'deleted'], unique=False)
    op.create_index('idx_users_links_user2', 'users_links', ['user_id2', 'deleted'], unique=False)

    # --- requests ---
    op.create_table(
        'requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('uid', sa.String(length=255), nullable=False),
        sa.Column('sender_id', sa.String(length=64), nullable=False),
        sa.Column('receiver_id', sa.String(length=64), nullable=False),
        sa.Column('operation', sa.String(length=32), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=16), server_default='pending', nullable=False),
        sa.Column('time_created', sa.DateTime(), nullable=False),
        sa.Column('time_resolved', sa.DateTime(), nullable=True),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], name='fk_requests_sender'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], name='fk_requests_receiver'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_requests_uid_deleted', 'requests', ['uid', 'deleted'], unique=False)
    op.create_index('idx_requests_receiver', 'requests', ['receiver_id', 'operation', 'deleted'], unique=False)


def downgrade() -> None:
    op.drop_table('requests')
    op.drop_table('users_links')
    op.drop_table('teams_links')
    op.drop_table('teams')
    op.drop_table('users')
