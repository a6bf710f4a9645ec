"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "user_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), unique=True),
        sa.Column("ai_provider", sa.String(length=40), nullable=False),
        sa.Column("api_key", sa.String(length=255), nullable=False),
        sa.Column("model_id", sa.String(length=120), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "job_applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("job_title", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=40), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("job_url", sa.String(length=800), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("applied_on", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_job_applications_user_id", "job_applications", ["user_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_type", sa.String(length=40), nullable=False),
        sa.Column("file_url", sa.String(length=800), nullable=False),
        sa.Column("storage_path", sa.String(length=800), nullable=False),
        sa.Column("mime_type", sa.String(length=120), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column(
            "linked_job_id",
            sa.Integer(),
            sa.ForeignKey("job_applications.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("resume_content", sa.Text(), nullable=True),
        sa.Column("uploaded_on", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "ai_generations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.String(length=120), nullable=False),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("job_application_id", sa.String(length=160), nullable=True),
        sa.Column("metadata_json", sa.JSON(), nullable=False),
        sa.Column("generated_on", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_ai_generations_request_id", "ai_generations", ["request_id"], unique=True)
    op.create_index("ix_ai_generations_user_id", "ai_generations", ["user_id"])

    op.create_table(
        "linkedin_jobs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("seniority", sa.String(length=120), nullable=False),
        sa.Column("employment_type", sa.String(length=120), nullable=False),
        sa.Column("apply_url", sa.String(length=800), nullable=False),
        sa.Column("source", sa.String(length=120), nullable=False),
        sa.Column("recruiter_name", sa.String(length=255), nullable=False),
        sa.Column("recruiter_profile", sa.String(length=255), nullable=False),
        sa.Column("recruiter_profile_url", sa.String(length=800), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("linkedin_jobs")
    op.drop_index("ix_ai_generations_user_id", table_name="ai_generations")
    op.drop_index("ix_ai_generations_request_id", table_name="ai_generations")
    op.drop_table("ai_generations")
    op.drop_index("ix_documents_user_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_job_applications_user_id", table_name="job_applications")
    op.drop_table("job_applications")
    op.drop_table("user_settings")
    op.drop_table("users")
