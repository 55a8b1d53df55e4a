"""Create the matching tables.

Revision ID: 001_matching_tables
Revises:
Create Date: 2026-10-18

Owned tables: driver_job_match_scores, company_driver_match_scores,
matching_text_embeddings, matching_recompute_queue. The marketplace records
they refer to are created by the marketplace application, so there are no
foreign keys to them.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001_matching_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _score_columns() -> list[sa.Column]:
    return [
        sa.Column("overall_score", sa.Integer(), nullable=False),
        sa.Column("rules_score", sa.Integer(), nullable=False),
        sa.Column("semantic_score", sa.Integer(), nullable=True),
        sa.Column(
            "score_breakdown",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "top_reasons", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")
        ),
        sa.Column(
            "cautions", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")
        ),
        sa.Column(
            "degraded_mode", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("provider", sa.String(50), nullable=True),
        sa.Column("model", sa.String(200), nullable=True),
        sa.Column(
            "computed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
    ]


def upgrade() -> None:
    # pgcrypto provides gen_random_uuid(); pgvector provides the VECTOR type
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "driver_job_match_scores",
        _id_column(),
        sa.Column("driver_id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column(
            "missing_fields",
            JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        *_score_columns(),
        sa.UniqueConstraint(
            "driver_id", "job_id", name="uq_driver_job_match_scores_pair"
        ),
        sa.CheckConstraint(
            "overall_score >= 0 AND overall_score <= 100",
            name="ck_driver_job_match_scores_overall",
        ),
        sa.CheckConstraint(
            "rules_score >= 0 AND rules_score <= 90",
            name="ck_driver_job_match_scores_rules",
        ),
    )
    # Driver-facing lists: "best jobs for me"
    op.create_index(
        "ix_driver_job_match_scores_driver_overall",
        "driver_job_match_scores",
        ["driver_id", sa.text("overall_score DESC")],
    )

    op.create_table(
        "company_driver_match_scores",
        _id_column(),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column("candidate_source", sa.String(20), nullable=False),
        sa.Column("candidate_id", sa.UUID(), nullable=False),
        sa.Column("candidate_driver_id", sa.UUID(), nullable=True),
        *_score_columns(),
        sa.UniqueConstraint(
            "company_id",
            "job_id",
            "candidate_source",
            "candidate_id",
            name="uq_company_driver_match_scores_pair",
        ),
        sa.CheckConstraint(
            "candidate_source IN ('application', 'lead')",
            name="ck_company_driver_match_scores_source",
        ),
        sa.CheckConstraint(
            "overall_score >= 0 AND overall_score <= 100",
            name="ck_company_driver_match_scores_overall",
        ),
    )
    # Company-facing lists: "best candidates for this job"
    op.create_index(
        "ix_company_driver_match_scores_job_overall",
        "company_driver_match_scores",
        ["company_id", "job_id", sa.text("overall_score DESC")],
    )

    op.create_table(
        "matching_text_embeddings",
        _id_column(),
        sa.Column("entity_type", sa.String(20), nullable=False),
        sa.Column("entity_id", sa.UUID(), nullable=False),
        sa.Column("content_hash", sa.String(64), nullable=False),
        sa.Column("embedding", Vector(), nullable=False),
        sa.Column("dimensions", sa.Integer(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("model", sa.String(200), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "entity_type", "entity_id", name="uq_matching_text_embeddings_entity"
        ),
        sa.CheckConstraint(
            "entity_type IN ('driver', 'job', 'application', 'lead')",
            name="ck_matching_text_embeddings_entity_type",
        ),
    )

    op.create_table(
        "matching_recompute_queue",
        _id_column(),
        sa.Column("entity_type", sa.String(20), nullable=False),
        sa.Column("entity_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=True),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "max_attempts", sa.Integer(), nullable=False, server_default=sa.text("3")
        ),
        sa.Column(
            "scheduled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "entity_type IN ('driver_profile', 'job', 'application', 'lead')",
            name="ck_matching_recompute_queue_entity_type",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'processing', 'done', 'error')",
            name="ck_matching_recompute_queue_status",
        ),
    )
    op.create_index(
        "ix_matching_recompute_queue_due",
        "matching_recompute_queue",
        ["status", "scheduled_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_matching_recompute_queue_due", "matching_recompute_queue")
    op.drop_table("matching_recompute_queue")
    op.drop_table("matching_text_embeddings")
    op.drop_index(
        "ix_company_driver_match_scores_job_overall", "company_driver_match_scores"
    )
    op.drop_table("company_driver_match_scores")
    op.drop_index("ix_driver_job_match_scores_driver_overall", "driver_job_match_scores")
    op.drop_table("driver_job_match_scores")
