"""Cached text embeddings, one row per (entity_type, entity_id).

The row is reused while content_hash matches the entity's current text
block; a mismatch means the text changed and the vector is recomputed.
"""

import uuid
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from haulmatch.models.base import Base

_DEFAULT_UUID = text("gen_random_uuid()")

EMBEDDING_ENTITY_TYPES = ("driver", "job", "application", "lead")


class MatchingTextEmbedding(Base):
    """Embedding of one entity's PII-free text block.

    Attributes:
        content_hash: SHA-256 hex digest of the embedded text.
        embedding: Vector of `dimensions` floats. The column is unsized so
            the provider (384-d Hugging Face, 1536-d OpenAI) can change.
    """

    __tablename__ = "matching_text_embeddings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    embedding: Mapped[list[float]] = mapped_column(Vector(), nullable=False)
    dimensions: Mapped[int] = mapped_column(Integer, nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(200), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "entity_type", "entity_id", name="uq_matching_text_embeddings_entity"
        ),
        CheckConstraint(
            "entity_type IN ('driver', 'job', 'application', 'lead')",
            name="ck_matching_text_embeddings_entity_type",
        ),
    )
