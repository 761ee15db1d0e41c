"""Initial schema: identities, submissions, audit log

Creates one table per role partition (admins, supervisors, students),
each with its own unique email and a nullable refresh_token column,
plus proposals, projects and the append-only events table.

Revision ID: 3f1c2a9d7e10
Revises:
Create Date: 2026-10-19 09:12:44.120381
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _identity_columns() -> list:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'admins',
        *_identity_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'supervisors',
        *_identity_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'students',
        *_identity_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('roll_number', sa.String(length=50), nullable=False),
        sa.Column('added_by', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['added_by'], ['supervisors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('roll_number'),
    )
    op.create_table(
        'proposals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('submitted_by', sa.Uuid(), nullable=False),
        sa.Column('supervisor_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['submitted_by'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['supervisor_id'], ['supervisors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_proposals_supervisor_status', 'proposals', ['supervisor_id', 'status']
    )
    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('submitted_by', sa.Uuid(), nullable=False),
        sa.Column('supervisor_id', sa.Uuid(), nullable=False),
        sa.Column('proposal_id', sa.Uuid(), nullable=True),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('file_public_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['submitted_by'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['supervisor_id'], ['supervisors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['proposal_id'], ['proposals.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_projects_supervisor_status', 'projects', ['supervisor_id', 'status']
    )
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('stream_id', sa.String(length=200), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_events_stream', 'events', ['stream_id', 'id'])
    op.create_index('idx_events_type', 'events', ['type'])


def downgrade() -> None:
    op.drop_index('idx_events_type', table_name='events')
    op.drop_index('idx_events_stream', table_name='events')
    op.drop_table('events')
    op.drop_index('idx_projects_supervisor_status', table_name='projects')
    op.drop_table('projects')
    op.drop_index('idx_proposals_supervisor_status', table_name='proposals')
    op.drop_table('proposals')
    op.drop_table('students')
    op.drop_table('supervisors')
    op.drop_table('admins')
