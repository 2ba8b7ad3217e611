"""create workflow engine tables

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-18 09:30:12.481205

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "workflows",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="inactive"),
        sa.Column("nodes", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_run_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_workflows_user_id", "workflows", ["user_id"])
    op.create_index("idx_workflows_status", "workflows", ["status"])
    op.create_index("idx_workflows_created_at", "workflows", ["created_at"])

    op.create_table(
        "workflow_runs",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("workflow_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="running"),
        sa.Column("input", sa.JSON(), nullable=False),
        sa.Column("nodes_snapshot", sa.JSON(), nullable=False),
        sa.Column("results", sa.JSON(), nullable=False),
        sa.Column("summary", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("execution_time", sa.Integer(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
    )
    op.create_index("idx_workflow_runs_workflow_id", "workflow_runs", ["workflow_id"])
    op.create_index("idx_workflow_runs_user_id", "workflow_runs", ["user_id"])
    op.create_index("idx_workflow_runs_started_at", "workflow_runs", ["started_at"])

    op.create_table(
        "workflow_events",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("workflow_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("event_data", sa.JSON(), nullable=False),
        sa.Column("received_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("processed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("run_id", sa.String(length=64), nullable=True),
    )
    op.create_index(
        "idx_workflow_events_workflow_user",
        "workflow_events",
        ["workflow_id", "user_id"],
    )
    op.create_index("idx_workflow_events_received_at", "workflow_events", ["received_at"])

    op.create_table(
        "workflow_sessions",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("session_id", sa.String(length=255), nullable=False),
        sa.Column("workflow_id", sa.String(length=64), nullable=False),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "idx_workflow_sessions_workflow_customer",
        "workflow_sessions",
        ["workflow_id", "customer_id"],
    )

    op.create_table(
        "workflow_step_results",
        sa.Column("step_key", sa.String(length=512), primary_key=True, nullable=False),
        sa.Column("result", sa.JSON(), nullable=True),
        sa.Column("recorded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("workflow_step_results")
    op.drop_index("idx_workflow_sessions_workflow_customer", table_name="workflow_sessions")
    op.drop_table("workflow_sessions")
    op.drop_index("idx_workflow_events_received_at", table_name="workflow_events")
    op.drop_index("idx_workflow_events_workflow_user", table_name="workflow_events")
    op.drop_table("workflow_events")
    op.drop_index("idx_workflow_runs_started_at", table_name="workflow_runs")
    op.drop_index("idx_workflow_runs_user_id", table_name="workflow_runs")
    op.drop_index("idx_workflow_runs_workflow_id", table_name="workflow_runs")
    op.drop_table("workflow_runs")
    op.drop_index("idx_workflows_created_at", table_name="workflows")
    op.drop_index("idx_workflows_status", table_name="workflows")
    op.drop_index("idx_workflows_user_id", table_name="workflows")
    op.drop_table("workflows")
