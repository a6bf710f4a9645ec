"""Workflow generation history

Revision ID: 0002_workflow_history
Revises: 0001_initial_schema
Create Date: 2026-10-18

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_workflow_history"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

HISTORY_TABLES = ("workflow_resume_generations", "workflow_cover_letter_generations")


def _has_table(insp: sa.Inspector, table: str) -> bool:
    return table in insp.get_table_names()


def _common_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("request_id", sa.String(length=120), nullable=False),
        sa.Column("job_id", sa.String(length=64), nullable=True),
        sa.Column("job_type", sa.String(length=40), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("job_title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _create_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_user_id", table, ["user_id"])
    op.create_index(f"ix_{table}_request_id", table, ["request_id"], unique=True)
    op.create_index(f"ix_{table}_job_id", table, ["job_id"])


def upgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)

    if not _has_table(insp, "workflow_resume_generations"):
        op.create_table(
            "workflow_resume_generations",
            *_common_columns(),
            sa.Column("ats_score", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("keywords_json", sa.JSON(), nullable=False),
            sa.Column("suggestions_count", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
        )
        _create_indexes("workflow_resume_generations")

    if not _has_table(insp, "workflow_cover_letter_generations"):
        op.create_table(
            "workflow_cover_letter_generations",
            *_common_columns(),
            sa.Column("tone", sa.String(length=40), nullable=False, server_default="professional"),
            sa.Column("personalization_score", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
        )
        _create_indexes("workflow_cover_letter_generations")


def downgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    for table in HISTORY_TABLES:
        if _has_table(insp, table):
            op.drop_table(table)
