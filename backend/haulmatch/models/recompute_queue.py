"""Recompute queue: one row per entity whose scores need refreshing.

Rows are inserted by database triggers in the marketplace application;
the recompute worker claims and completes them.

Lifecycle:
    pending -> processing -> done
                          -> pending (retry, scheduled_at pushed back)
                          -> error   (terminal after max_attempts)

A processing row whose lease expired counts as a failed attempt: it is
reclaimed with attempts + 1, or parked in error once that reaches
max_attempts.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from haulmatch.models.base import Base

_DEFAULT_UUID = text("gen_random_uuid()")

QUEUE_ENTITY_TYPES = ("driver_profile", "job", "application", "lead")

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_DONE = "done"
STATUS_ERROR = "error"

DEFAULT_MAX_ATTEMPTS = 3


class RecomputeQueueItem(Base):
    """A pending request to re-score everything involving one entity."""

    __tablename__ = "matching_recompute_queue"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    company_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        server_default=text("0"),
        nullable=False,
    )
    max_attempts: Mapped[int] = mapped_column(
        Integer,
        server_default=text(str(DEFAULT_MAX_ATTEMPTS)),
        nullable=False,
    )
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # Fresh per claim; transitions out of processing must present it
    claim_token: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "entity_type IN ('driver_profile', 'job', 'application', 'lead')",
            name="ck_matching_recompute_queue_entity_type",
        ),
        CheckConstraint(
            "status IN ('pending', 'processing', 'done', 'error')",
            name="ck_matching_recompute_queue_status",
        ),
        Index(
            "ix_matching_recompute_queue_due",
            "status",
            "scheduled_at",
        ),
    )
