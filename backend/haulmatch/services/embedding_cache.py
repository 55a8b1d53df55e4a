"""Two-level embedding cache for matching text blocks.

Lookup order for get_or_compute():
1. In-process LRU entry whose content hash matches the current text
2. Persistent row (matching_text_embeddings) whose hash and model match
3. The embedding provider; the result is upserted and cached

Provider failures never propagate: the caller gets None and scores the pair
in degraded mode. Database errors do propagate, so the enclosing unit of work
fails and is retried.
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass

import httpx

from haulmatch.providers.embedding.base import EmbeddingProvider
from haulmatch.providers.errors import ProviderError
from haulmatch.services.embedding_storage import compute_content_hash
from haulmatch.services.matching_store import MatchingStore

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Default maximum LRU size. A 384-dimension vector is ~3KB as Python floats.
_DEFAULT_MAX_SIZE = 1000


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class _CachedEmbedding:
    content_hash: str
    vector: list[float]
    model: str


@dataclass
class CacheStats:
    """Cache statistics for monitoring.

    Attributes:
        size: Number of entries currently in the LRU.
        max_size: Maximum LRU size.
        hits: Lookups answered from the LRU or the persistent table.
        misses: Lookups that needed the provider.
        provider_calls: Calls made to the provider.
        failures: Provider calls that failed or returned unusable data.
        evictions: LRU evictions since creation.
    """

    size: int
    max_size: int
    hits: int
    misses: int
    provider_calls: int
    failures: int
    evictions: int


# =============================================================================
# Embedding Cache
# =============================================================================


class EmbeddingCache:
    """Embedding lookup with an LRU in front of the persistent table.

    Designed for single-task asyncio use within one worker invocation.

    Example:
        >>> cache = EmbeddingCache(store, provider)
        >>> vector = await cache.get_or_compute("job", job.id, text_block)
        >>> if vector is None:
        ...     # score rules-only
    """

    def __init__(
        self,
        store: MatchingStore,
        provider: EmbeddingProvider | None,
        max_size: int = _DEFAULT_MAX_SIZE,
    ) -> None:
        if max_size <= 0:
            msg = f"max_size must be positive, got {max_size}"
            raise ValueError(msg)

        self._store = store
        self._provider = provider
        self._max_size = max_size
        self._cache: OrderedDict[tuple[str, uuid.UUID], _CachedEmbedding] = (
            OrderedDict()
        )
        self._hits = 0
        self._misses = 0
        self._provider_calls = 0
        self._failures = 0
        self._evictions = 0

    @property
    def provider(self) -> EmbeddingProvider | None:
        return self._provider

    async def get_or_compute(
        self, entity_type: str, entity_id: uuid.UUID, text: str
    ) -> list[float] | None:
        """Return the embedding for an entity's current text block.

        Args:
            entity_type: One of driver, job, application, lead.
            entity_id: UUID of the entity.
            text: The entity's current text block.

        Returns:
            The vector, or None if there is no provider, the text is blank,
            or the provider failed.
        """
        if self._provider is None or not text.strip():
            return None

        key = (entity_type, entity_id)
        content_hash = compute_content_hash(text)
        model = self._provider.model_name

        entry = self._cache.get(key)
        if (
            entry is not None
            and entry.content_hash == content_hash
            and entry.model == model
        ):
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.vector

        stored = await self._store.get_embedding(entity_type, entity_id)
        if (
            stored is not None
            and stored.content_hash == content_hash
            and stored.model == model
        ):
            self._hits += 1
            self._put(key, _CachedEmbedding(content_hash, stored.vector, stored.model))
            return stored.vector

        self._misses += 1
        vector = await self._embed(
            self._provider, entity_type, entity_id, text
        )
        if vector is None:
            return None

        await self._store.upsert_embedding(
            entity_type,
            entity_id,
            content_hash=content_hash,
            vector=vector,
            provider=self._provider.provider_name,
            model=model,
        )
        self._put(key, _CachedEmbedding(content_hash, vector, model))
        return vector

    async def _embed(
        self,
        provider: EmbeddingProvider,
        entity_type: str,
        entity_id: uuid.UUID,
        text: str,
    ) -> list[float] | None:
        """Call the provider for one text; None on any provider failure."""
        self._provider_calls += 1
        try:
            result = await provider.embed([text])
        except (ProviderError, httpx.HTTPError) as e:
            self._failures += 1
            logger.warning(
                "Embedding failed for %s %s: %s: %s",
                entity_type,
                entity_id,
                type(e).__name__,
                e,
            )
            return None

        if len(result.vectors) != 1 or not result.vectors[0]:
            self._failures += 1
            logger.warning(
                "Embedding for %s %s returned %d vectors; expected 1 non-empty",
                entity_type,
                entity_id,
                len(result.vectors),
            )
            return None

        return [float(x) for x in result.vectors[0]]

    def _put(self, key: tuple[str, uuid.UUID], entry: _CachedEmbedding) -> None:
        if key in self._cache:
            del self._cache[key]
        while len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)
            self._evictions += 1
        self._cache[key] = entry

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._cache),
            max_size=self._max_size,
            hits=self._hits,
            misses=self._misses,
            provider_calls=self._provider_calls,
            failures=self._failures,
            evictions=self._evictions,
        )
