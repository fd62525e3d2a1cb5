"""create_photo_ingest_tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2e7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    # Timestamps (from TimestampMixin)
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Apply migration - create mrss_photo, feed_source and job tables."""
    # Create mrss_photo table
    op.create_table(
        "mrss_photo",
        sa.Column("id", sa.String(length=512), nullable=False),
        sa.Column("source_url", sa.String(length=2048), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("taken_at", sa.Date(), nullable=False),
        sa.Column("popularity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("photo_url", sa.String(length=2048), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=2048), nullable=True),
        # Curated fields, never written by import
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.String(length=100)),
            server_default="{}",
            nullable=False,
        ),
        sa.Column("album", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("popularity >= 0", name="ck_mrss_photo_popularity_non_negative"),
    )
    op.create_index(op.f("ix_mrss_photo_source_url"), "mrss_photo", ["source_url"], unique=False)
    op.create_index(op.f("ix_mrss_photo_taken_at"), "mrss_photo", ["taken_at"], unique=False)
    op.create_index(
        "ix_mrss_photo_source_taken", "mrss_photo", ["source_url", "taken_at"], unique=False
    )

    # Create feed_source table
    op.create_table(
        "feed_source",
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("enabled", sa.Boolean(), server_default="true", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("url"),
    )
    op.create_index(op.f("ix_feed_source_enabled"), "feed_source", ["enabled"], unique=False)

    # Create job table
    op.create_table(
        "job",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.String(length=32), nullable=False),
        sa.Column("job_type", sa.String(length=50), nullable=False),
        sa.Column("unique_key", sa.String(length=2048), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("params", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("result", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.String(length=2000), nullable=True),
        sa.Column("error_type", sa.String(length=100), nullable=True),
        # Retry bookkeeping
        sa.Column("attempts", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_attempts", sa.Integer(), server_default="5", nullable=False),
        sa.Column(
            "run_after",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed', 'cancelled')",
            name="ck_job_valid_status",
        ),
        sa.CheckConstraint("attempts >= 0", name="ck_job_attempts_non_negative"),
        sa.CheckConstraint("max_attempts >= 1", name="ck_job_max_attempts_positive"),
    )
    op.create_index(op.f("ix_job_job_id"), "job", ["job_id"], unique=True)
    op.create_index(op.f("ix_job_job_type"), "job", ["job_type"], unique=False)
    op.create_index(op.f("ix_job_status"), "job", ["status"], unique=False)
    op.create_index("ix_job_status_run_after", "job", ["status", "run_after"], unique=False)

    # At most one pending/running job per (job_type, unique_key)
    op.create_index(
        "uq_job_active_unique_key",
        "job",
        ["job_type", "unique_key"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'running')"),
    )


def downgrade() -> None:
    """Revert migration - drop job, feed_source and mrss_photo tables."""
    op.drop_index("uq_job_active_unique_key", table_name="job")
    op.drop_index("ix_job_status_run_after", table_name="job")
    op.drop_index(op.f("ix_job_status"), table_name="job")
    op.drop_index(op.f("ix_job_job_type"), table_name="job")
    op.drop_index(op.f("ix_job_job_id"), table_name="job")
    op.drop_table("job")

    op.drop_index(op.f("ix_feed_source_enabled"), table_name="feed_source")
    op.drop_table("feed_source")

    op.drop_index("ix_mrss_photo_source_taken", table_name="mrss_photo")
    op.drop_index(op.f("ix_mrss_photo_taken_at"), table_name="mrss_photo")
    op.drop_index(op.f("ix_mrss_photo_source_url"), table_name="mrss_photo")
    op.drop_table("mrss_photo")
