"""Persistent embedding cache rows (matching_text_embeddings)."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.embedding import MatchingTextEmbedding


class EmbeddingRepository:
    """Stateless repository for cached embeddings."""

    @staticmethod
    async def get(
        db: AsyncSession, entity_type: str, entity_id: uuid.UUID
    ) -> MatchingTextEmbedding | None:
        stmt = select(MatchingTextEmbedding).where(
            MatchingTextEmbedding.entity_type == entity_type,
            MatchingTextEmbedding.entity_id == entity_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def upsert(
        db: AsyncSession,
        *,
        entity_type: str,
        entity_id: uuid.UUID,
        content_hash: str,
        embedding: list[float],
        provider: str,
        model: str,
    ) -> None:
        """Insert or replace the cached embedding for an entity.

        Args:
            db: Async database session.
            entity_type: One of driver, job, application, lead.
            entity_id: UUID of the entity.
            content_hash: SHA-256 of the embedded text block.
            embedding: The vector.
            provider: Provider that produced the vector.
            model: Model that produced the vector.
        """
        values = {
            "content_hash": content_hash,
            "embedding": embedding,
            "dimensions": len(embedding),
            "provider": provider,
            "model": model,
        }
        stmt = (
            insert(MatchingTextEmbedding)
            .values(entity_type=entity_type, entity_id=entity_id, **values)
            .on_conflict_do_update(
                index_elements=["entity_type", "entity_id"],
                set_={**values, "updated_at": func.now()},
            )
        )
        await db.execute(stmt)
