"""create_users_and_sleep_sessions

Revision ID: 5f3c2a1d9b47
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f3c2a1d9b47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'sleep_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('quality', sa.SmallInteger(), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('local_timezone', sa.String(length=64), nullable=False),
        sa.Column('client_request_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('end_at > start_at', name='ck_sleep_sessions_end_after_start'),
        sa.CheckConstraint('quality BETWEEN 1 AND 10', name='ck_sleep_sessions_quality_range'),
        sa.CheckConstraint("type IN ('CORE', 'NAP')", name='ck_sleep_sessions_type'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'uq_sleep_sessions_user_client_request_id',
        'sleep_sessions',
        ['user_id', 'client_request_id'],
        unique=True,
    )
    op.create_index(
        'idx_sleep_sessions_user_start',
        'sleep_sessions',
        ['user_id', sa.text('start_at DESC')],
        unique=False,
    )

    dialect = op.get_bind().dialect.name
    if dialect == 'postgresql':
        op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
        op.execute(
            "ALTER TABLE sleep_sessions ADD CONSTRAINT ex_sleep_sessions_no_overlap "
            "EXCLUDE USING gist (user_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&)"
        )
    elif dialect == 'sqlite':
        op.execute(
            "CREATE TRIGGER trg_sleep_sessions_no_overlap_insert "
            "BEFORE INSERT ON sleep_sessions FOR EACH ROW "
            "WHEN EXISTS (SELECT 1 FROM sleep_sessions s WHERE s.user_id = NEW.user_id "
            "AND s.start_at < NEW.end_at AND s.end_at > NEW.start_at) "
            "BEGIN SELECT RAISE(ABORT, 'ex_sleep_sessions_no_overlap'); END"
        )
        op.execute(
            "CREATE TRIGGER trg_sleep_sessions_no_overlap_update "
            "BEFORE UPDATE OF start_at, end_at, user_id ON sleep_sessions FOR EACH ROW "
            "WHEN EXISTS (SELECT 1 FROM sleep_sessions s WHERE s.user_id = NEW.user_id "
            "AND s.id != NEW.id AND s.start_at < NEW.end_at AND s.end_at > NEW.start_at) "
            "BEGIN SELECT RAISE(ABORT, 'ex_sleep_sessions_no_overlap'); END"
        )


def downgrade() -> None:
    """Downgrade schema."""
    dialect = op.get_bind().dialect.name
    if dialect == 'postgresql':
        op.execute('ALTER TABLE sleep_sessions DROP CONSTRAINT IF EXISTS ex_sleep_sessions_no_overlap')
    elif dialect == 'sqlite':
        op.execute('DROP TRIGGER IF EXISTS trg_sleep_sessions_no_overlap_update')
        op.execute('DROP TRIGGER IF EXISTS trg_sleep_sessions_no_overlap_insert')
    op.drop_index('idx_sleep_sessions_user_start', table_name='sleep_sessions')
    op.drop_index('uq_sleep_sessions_user_client_request_id', table_name='sleep_sessions')
    op.drop_table('sleep_sessions')
    op.drop_table('users')
