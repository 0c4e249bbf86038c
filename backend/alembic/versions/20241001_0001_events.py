"""events table

Revision ID: 20241001_0001
Revises:
Create Date: 2024-10-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20241001_0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('start_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('end_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('start_time', sa.String(), nullable=True),
        sa.Column('end_time', sa.String(), nullable=True),
        sa.Column('all_day', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('type', sa.String(), nullable=False, server_default='meeting', index=True),
        sa.Column('priority', sa.String(), nullable=False, server_default='Medium'),
        sa.Column('status', sa.String(), nullable=False, server_default='confirmed', index=True),
        sa.Column('location', sa.String(), nullable=False, server_default=''),
        sa.Column('attendees', sa.JSON(), nullable=True),
        sa.Column('color', sa.String(), nullable=False, server_default='#1976D2'),
        sa.Column('recurring', sa.JSON(), nullable=True),
        sa.Column('reminders', sa.JSON(), nullable=True),
        sa.Column('project_id', sa.String(), nullable=True, index=True),
        sa.Column('task_id', sa.String(), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False)
    )


def downgrade():
    op.drop_table('events')
