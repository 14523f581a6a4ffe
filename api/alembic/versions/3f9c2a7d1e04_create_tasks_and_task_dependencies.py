"""create tasks and task_dependencies tables

Revision ID: 3f9c2a7d1e04
Revises:
Create Date: 2026-10-17 10:12:44.381920

"""
from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision = '3f9c2a7d1e04'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=True),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=300), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('status', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False, server_default='pending'),
        sa.Column('priority', sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False, server_default='medium'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tasks_team_id', 'tasks', ['team_id'])

    op.create_table(
        'task_dependencies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('successor_id', sa.Integer(), nullable=False),
        sa.Column('predecessor_id', sa.Integer(), nullable=False),
        sa.Column('kind', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False, server_default='finish_to_start'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['successor_id'], ['tasks.id']),
        sa.ForeignKeyConstraint(['predecessor_id'], ['tasks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('successor_id != predecessor_id', name='no_self_dependency'),
        sa.CheckConstraint(
            "kind IN ('finish_to_start', 'start_to_start')", name='valid_dependency_kind'
        ),
    )

    op.create_index(
        'ix_task_dependencies_successor_id', 'task_dependencies', ['successor_id']
    )
    op.create_index(
        'ix_task_dependencies_predecessor_id', 'task_dependencies', ['predecessor_id']
    )


def downgrade() -> None:
    op.drop_index('ix_task_dependencies_predecessor_id', table_name='task_dependencies')
    op.drop_index('ix_task_dependencies_successor_id', table_name='task_dependencies')
    op.drop_table('task_dependencies')
    op.drop_index('ix_tasks_team_id', table_name='tasks')
    op.drop_table('tasks')
