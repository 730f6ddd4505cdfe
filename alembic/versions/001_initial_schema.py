"""Initial schema with projects, members, tasks and comments.

Revision ID: 001
Revises:
Create Date: 2026-10-16

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
    # Create projects table
    op.create_table(
        'projects',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('owner_id', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_projects_owner_id', 'projects', ['owner_id'])
    op.create_index('ix_projects_created_at', 'projects', ['created_at'])

    # Create project_members junction table
    op.create_table(
        'project_members',
        sa.Column('project_id', sa.String(36), sa.ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(255), primary_key=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='member'),
        sa.CheckConstraint("role IN ('owner', 'member', 'viewer')", name='valid_member_role'),
    )
    op.create_index('ix_project_members_user_id', 'project_members', ['user_id'])

    # Create tasks table
    op.create_table(
        'tasks',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('status', sa.String(20), nullable=False, server_default='todo'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('assignee_id', sa.String(255)),
        sa.Column('created_by', sa.String(255), nullable=False),
        sa.Column('due_date', sa.DateTime),
        sa.Column('tags', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint(
            "status IN ('todo', 'in_progress', 'review', 'done')",
            name='valid_task_status'
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'critical')",
            name='valid_task_priority'
        ),
    )
    op.create_index('idx_tasks_project', 'tasks', ['project_id'])
    op.create_index('idx_tasks_assignee', 'tasks', ['assignee_id'])
    op.create_index('idx_tasks_status', 'tasks', ['status'])

    # Create comments table
    op.create_table(
        'comments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('task_id', sa.String(36), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.String(255), nullable=False),
        sa.Column('body', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('idx_comments_task', 'comments', ['task_id'])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_index('idx_comments_task', table_name='comments')
    op.drop_table('comments')

    op.drop_index('idx_tasks_status', table_name='tasks')
    op.drop_index('idx_tasks_assignee', table_name='tasks')
    op.drop_index('idx_tasks_project', table_name='tasks')
    op.drop_table('tasks')

    op.drop_index('ix_project_members_user_id', table_name='project_members')
    op.drop_table('project_members')

    op.drop_index('ix_projects_created_at', table_name='projects')
    op.drop_index('ix_projects_owner_id', table_name='projects')
    op.drop_table('projects')
