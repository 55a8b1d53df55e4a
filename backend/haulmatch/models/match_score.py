"""Persisted match scores, one row per scored pair.

Both tables are written only through upserts keyed by their unique
constraint, so re-scoring a pair replaces the row in place.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from haulmatch.models.base import Base

_DEFAULT_UUID = text("gen_random_uuid()")


class _ScoreColumnsMixin:
    """Columns shared by both score tables.

    Attributes:
        overall_score: min(rules_score + semantic_score, 100).
        rules_score: Deterministic rules score (0-90).
        semantic_score: Embedding bonus (0-10), NULL in degraded mode.
        score_breakdown: {dimension: {score, maxScore, detail}}.
        top_reasons: [{text, positive}], up to 3.
        cautions: [{text, positive}], up to 2.
        provider: Embedding provider used, NULL in rules-only mode.
        model: Embedding model used, NULL in rules-only mode.
        version: Scoring version that produced the row.
    """

    overall_score: Mapped[int] = mapped_column(Integer, nullable=False)
    rules_score: Mapped[int] = mapped_column(Integer, nullable=False)
    semantic_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    score_breakdown: Mapped[dict] = mapped_column(
        JSONB,
        server_default=text("'{}'::jsonb"),
        nullable=False,
    )
    top_reasons: Mapped[list] = mapped_column(
        JSONB,
        server_default=text("'[]'::jsonb"),
        nullable=False,
    )
    cautions: Mapped[list] = mapped_column(
        JSONB,
        server_default=text("'[]'::jsonb"),
        nullable=False,
    )
    degraded_mode: Mapped[bool] = mapped_column(
        Boolean,
        server_default=text("false"),
        nullable=False,
    )
    provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    model: Mapped[str | None] = mapped_column(String(200), nullable=True)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        server_default=text("1"),
        nullable=False,
    )


class DriverJobMatchScore(Base, _ScoreColumnsMixin):
    """How well a job fits a driver (driver-facing recommendations)."""

    __tablename__ = "driver_job_match_scores"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    driver_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    job_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    # Profile completeness hints for the driver ("zip code", "endorsements", ...)
    missing_fields: Mapped[list] = mapped_column(
        JSONB,
        server_default=text("'[]'::jsonb"),
        nullable=False,
    )
    confidence: Mapped[str] = mapped_column(
        String(10),
        server_default=text("'low'"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("driver_id", "job_id", name="uq_driver_job_match_scores_pair"),
        CheckConstraint(
            "confidence IN ('high', 'medium', 'low')",
            name="ck_driver_job_match_scores_confidence",
        ),
        CheckConstraint(
            "overall_score >= 0 AND overall_score <= 100",
            name="ck_driver_job_match_scores_overall",
        ),
        CheckConstraint(
            "rules_score >= 0 AND rules_score <= 90",
            name="ck_driver_job_match_scores_rules",
        ),
    )


class CompanyDriverMatchScore(Base, _ScoreColumnsMixin):
    """How well a candidate fits one of a company's jobs (hiring side)."""

    __tablename__ = "company_driver_match_scores"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    job_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    candidate_source: Mapped[str] = mapped_column(String(20), nullable=False)
    candidate_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    candidate_driver_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "company_id",
            "job_id",
            "candidate_source",
            "candidate_id",
            name="uq_company_driver_match_scores_pair",
        ),
        CheckConstraint(
            "candidate_source IN ('application', 'lead')",
            name="ck_company_driver_match_scores_source",
        ),
        CheckConstraint(
            "overall_score >= 0 AND overall_score <= 100",
            name="ck_company_driver_match_scores_overall",
        ),
    )
