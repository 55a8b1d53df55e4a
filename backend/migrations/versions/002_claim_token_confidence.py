"""Queue claim ownership and driver-job confidence.

Revision ID: 002_claim_token_confidence
Revises: 001_matching_tables
Create Date: 2026-10-19

matching_recompute_queue.claim_token identifies the claim that owns a
processing row. driver_job_match_scores.confidence grades each driver-facing
score as high, medium or low.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "002_claim_token_confidence"
down_revision: str | None = "001_matching_tables"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "matching_recompute_queue",
        sa.Column("claim_token", sa.UUID(), nullable=True),
    )

    op.add_column(
        "driver_job_match_scores",
        sa.Column(
            "confidence",
            sa.String(10),
            nullable=False,
            server_default=sa.text("'low'"),
        ),
    )
    op.create_check_constraint(
        "ck_driver_job_match_scores_confidence",
        "driver_job_match_scores",
        "confidence IN ('high', 'medium', 'low')",
    )


def downgrade() -> None:
    op.drop_constraint(
        "ck_driver_job_match_scores_confidence",
        "driver_job_match_scores",
        type_="check",
    )
    op.drop_column("driver_job_match_scores", "confidence")
    op.drop_column("matching_recompute_queue", "claim_token")
