"""tracking schema: experiments, runs, metrics, hyperparameters, confusion matrices, data schemas

Revision ID: 0001_tracking_schema
Revises:
Create Date: 2026-10-19 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_tracking_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "experiments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.UniqueConstraint("name", name="uq_experiment_name"),
    )

    op.create_table(
        "runs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("experiment_id", sa.Uuid(), sa.ForeignKey("experiments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("training_time", sa.Interval(), nullable=True),
    )
    op.create_index("ix_runs_experiment_created", "runs", ["experiment_id", "created_at"])

    op.create_table(
        "metrics",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("run_id", sa.Uuid(), sa.ForeignKey("runs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_metrics_run_id", "metrics", ["run_id"])

    op.create_table(
        "hyper_parameters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("run_id", sa.Uuid(), sa.ForeignKey("runs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
    )
    op.create_index("ix_hyper_parameters_run_id", "hyper_parameters", ["run_id"])

    op.create_table(
        "confusion_matrices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("run_id", sa.Uuid(), sa.ForeignKey("runs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("per_class_precision", sa.JSON(), nullable=False),
        sa.Column("per_class_recall", sa.JSON(), nullable=False),
        sa.Column("counts", sa.JSON(), nullable=False),
        sa.Column("number_of_classes", sa.Integer(), nullable=False),
        sa.UniqueConstraint("run_id", name="uq_confusion_matrix_run"),
    )

    op.create_table(
        "data_schemas",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("run_id", sa.Uuid(), sa.ForeignKey("runs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("column_count", sa.Integer(), nullable=False),
        sa.UniqueConstraint("run_id", name="uq_data_schema_run"),
    )

    op.create_table(
        "data_columns",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("schema_id", sa.Integer(), sa.ForeignKey("data_schemas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
    )
    op.create_index("ix_data_columns_schema_pos", "data_columns", ["schema_id", "position"])


def downgrade() -> None:
    op.drop_index("ix_data_columns_schema_pos", table_name="data_columns")
    op.drop_table("data_columns")
    op.drop_table("data_schemas")
    op.drop_table("confusion_matrices")
    op.drop_index("ix_hyper_parameters_run_id", table_name="hyper_parameters")
    op.drop_table("hyper_parameters")
    op.drop_index("ix_metrics_run_id", table_name="metrics")
    op.drop_table("metrics")
    op.drop_index("ix_runs_experiment_created", table_name="runs")
    op.drop_table("runs")
    op.drop_table("experiments")
