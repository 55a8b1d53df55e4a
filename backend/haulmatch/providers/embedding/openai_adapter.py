"""OpenAI embedding adapter.

Alternative to the Hugging Face endpoint. Requires the pgvector column
dimensions to match the configured model (1536 for text-embedding-3-small).
"""

import contextlib
from typing import TYPE_CHECKING

import openai
import structlog
from openai import AsyncOpenAI

from haulmatch.providers.embedding.base import EmbeddingProvider, EmbeddingResult
from haulmatch.providers.errors import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from haulmatch.providers.retry import with_retries

if TYPE_CHECKING:
    from haulmatch.providers.config import ProviderConfig

logger = structlog.get_logger()

# OpenAI API limits
MAX_BATCH_SIZE = 2048


def _classify_openai_error(error: Exception) -> ProviderError:
    """Map OpenAI SDK exceptions to the provider error taxonomy.

    Returns a ProviderError subclass instance (does not raise).
    """
    if isinstance(error, openai.RateLimitError):
        retry_after = None
        if getattr(error, "response", None) is not None:
            retry_header = error.response.headers.get("retry-after")
            if retry_header is not None:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_header)
        return RateLimitError(str(error), retry_after_seconds=retry_after)

    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthenticationError(str(error))

    if isinstance(error, (openai.APIConnectionError, openai.InternalServerError)):
        return TransientError(str(error))

    return ProviderError(str(error))


class OpenAIEmbeddingAdapter(EmbeddingProvider):
    """OpenAI adapter for text embeddings."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize OpenAI embedding adapter.

        Args:
            config: Provider configuration with OpenAI API key.
        """
        super().__init__(config)
        self.client = AsyncOpenAI(api_key=config.openai_api_key, max_retries=0)
        self._model = config.embedding_model
        self._dimensions = config.embedding_dimensions

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate embeddings using OpenAI, chunking at 2048 inputs per call.

        Args:
            texts: List of texts to embed.

        Returns:
            EmbeddingResult with vectors in same order as input.
        """
        all_vectors: list[list[float]] = []
        total_tokens = 0
        for i in range(0, len(texts), MAX_BATCH_SIZE):
            batch = texts[i : i + MAX_BATCH_SIZE]
            vectors, tokens = await with_retries(
                lambda batch=batch: self._embed_batch(batch), self.config
            )
            all_vectors.extend(vectors)
            total_tokens += tokens

        return EmbeddingResult(
            vectors=all_vectors,
            model=self._model,
            dimensions=self._dimensions,
            total_tokens=total_tokens,
        )

    async def _embed_batch(self, texts: list[str]) -> tuple[list[list[float]], int]:
        """Embed a single batch of texts (up to 2048)."""
        try:
            response = await self.client.embeddings.create(
                model=self._model,
                input=texts,
            )
        except openai.OpenAIError as e:
            logger.error(
                "embedding_request_failed",
                provider="openai",
                model=self._model,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise _classify_openai_error(e) from e

        vectors = [item.embedding for item in response.data]
        return vectors, response.usage.total_tokens

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions (e.g., 1536 for text-embedding-3-small)."""
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
