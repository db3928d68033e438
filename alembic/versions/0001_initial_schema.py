"""initial schema: auth tables and restaurant tracking tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:12:44.102311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM('admin', 'user', name='user_role', create_type=False)
todo_status = postgresql.ENUM('todo', 'eaten', name='todo_status', create_type=False)
price_band = postgresql.ENUM('$', '$$', '$$$', '$$$$', name='price_band', create_type=False)


def upgrade() -> None:
    """Upgrade schema: create every table."""
    bind = op.get_bind()
    user_role.create(bind, checkfirst=True)
    todo_status.create(bind, checkfirst=True)
    price_band.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'verification_tokens',
        sa.Column('identifier', sa.String(), nullable=False),
        sa.Column('token', sa.String(), nullable=False, unique=True),
        sa.Column('expires', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('identifier', 'token'),
    )

    op.create_table(
        'sessions',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('session_token', sa.String(), nullable=False),
        sa.Column('user_id', postgresql.UUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_sessions_session_token', 'sessions', ['session_token'], unique=True)
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    op.create_table(
        'accounts',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('provider', sa.String(), nullable=False),
        sa.Column('provider_account_id', sa.String(), nullable=False),
        sa.Column('refresh_token', sa.String(), nullable=True),
        sa.Column('access_token', sa.String(), nullable=True),
        sa.Column('expires_at', sa.Integer(), nullable=True),
        sa.Column('token_type', sa.String(), nullable=True),
        sa.Column('scope', sa.String(), nullable=True),
        sa.Column('id_token', sa.String(), nullable=True),
        sa.Column('session_state', sa.String(), nullable=True),
    )
    op.create_index('ix_accounts_user_id', 'accounts', ['user_id'])

    op.create_table(
        'restaurants',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('cuisine_tags', postgresql.ARRAY(sa.String()), server_default='{}', nullable=False),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', postgresql.UUID(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_restaurants_created_by', 'restaurants', ['created_by'])

    op.create_table(
        'friends',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True, unique=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('user_id', postgresql.UUID(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_by', postgresql.UUID(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_friends_user_id', 'friends', ['user_id'], unique=True)
    op.create_index('ix_friends_created_by', 'friends', ['created_by'])

    op.create_table(
        'visits',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('restaurant_id', postgresql.UUID(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('visited_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('price_band', price_band, nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('visits_user_id_visited_at_idx', 'visits', ['user_id', 'visited_at'])
    op.create_index('ix_visits_restaurant_id', 'visits', ['restaurant_id'])

    op.create_table(
        'visit_companions',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('visit_id', postgresql.UUID(), sa.ForeignKey('visits.id', ondelete='CASCADE'), nullable=False),
        sa.Column('friend_id', postgresql.UUID(), sa.ForeignKey('friends.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('visit_id', 'friend_id', name='visit_companions_visit_friend_idx'),
    )
    op.create_index('ix_visit_companions_visit_id', 'visit_companions', ['visit_id'])
    op.create_index('ix_visit_companions_friend_id', 'visit_companions', ['friend_id'])

    op.create_table(
        'todo_eat_list',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('restaurant_id', postgresql.UUID(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', todo_status, server_default='todo', nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'restaurant_id', name='todo_eat_list_user_restaurant_idx'),
    )
    op.create_index('todo_eat_list_user_status_idx', 'todo_eat_list', ['user_id', 'status'])
    op.create_index('ix_todo_eat_list_restaurant_id', 'todo_eat_list', ['restaurant_id'])

    op.create_table(
        'invites',
        sa.Column('id', postgresql.UUID(), primary_key=True, nullable=False),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_by', postgresql.UUID(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('claimed_by', postgresql.UUID(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_invites_code', 'invites', ['code'], unique=True)
    op.create_index('ix_invites_expires_at', 'invites', ['expires_at'])


def downgrade() -> None:
    """Downgrade schema: drop every table."""
    for table in (
        'invites',
        'todo_eat_list',
        'visit_companions',
        'visits',
        'friends',
        'restaurants',
        'accounts',
        'sessions',
        'verification_tokens',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    price_band.drop(bind, checkfirst=True)
    todo_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
