"""Hugging Face Inference API embedding adapter.

Calls the hosted feature-extraction pipeline:

    POST {base_url}/pipeline/feature-extraction/{model}
    {"inputs": [...], "options": {"wait_for_model": true}}

The endpoint answers with one vector per input. Sentence-transformer models
return pooled vectors (a 2-D array); anything else is rejected as malformed.
"""

import contextlib
import time
from typing import TYPE_CHECKING

import httpx
import structlog

from haulmatch.providers.embedding.base import EmbeddingProvider, EmbeddingResult
from haulmatch.providers.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from haulmatch.providers.retry import with_retries

if TYPE_CHECKING:
    from haulmatch.providers.config import ProviderConfig

logger = structlog.get_logger()


def _classify_status(response: httpx.Response) -> ProviderError:
    """Map a non-2xx inference response to the provider error taxonomy.

    Returns a ProviderError subclass instance (does not raise).
    """
    detail = f"Hugging Face returned HTTP {response.status_code}: {response.text[:200]}"
    status = response.status_code

    if status in (401, 403):
        return AuthenticationError(detail)

    if status == 429:
        retry_after = None
        retry_header = response.headers.get("retry-after")
        if retry_header is not None:
            with contextlib.suppress(ValueError):
                retry_after = float(retry_header)
        return RateLimitError(detail, retry_after_seconds=retry_after)

    if status >= 500:
        return TransientError(detail)

    return ProviderError(detail)


def _parse_vectors(payload: object, expected: int) -> list[list[float]]:
    """Validate that payload is a 2-D numeric array with one row per input.

    Raises:
        MalformedResponseError: If the shape or element types are wrong.
    """
    if not isinstance(payload, list) or len(payload) != expected:
        raise MalformedResponseError(
            f"Expected a list of {expected} vectors, got {type(payload).__name__}"
        )

    vectors: list[list[float]] = []
    for row in payload:
        if not isinstance(row, list) or not row:
            raise MalformedResponseError("Embedding row is not a non-empty list")
        if not all(
            isinstance(value, (int, float)) and not isinstance(value, bool)
            for value in row
        ):
            raise MalformedResponseError("Embedding row contains non-numeric values")
        vectors.append([float(value) for value in row])

    if len({len(vector) for vector in vectors}) > 1:
        raise MalformedResponseError("Embedding rows have inconsistent lengths")

    return vectors


class HuggingFaceEmbeddingAdapter(EmbeddingProvider):
    """Hugging Face feature-extraction adapter over httpx."""

    def __init__(
        self,
        config: "ProviderConfig",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Provider configuration with the Hugging Face token.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        super().__init__(config)
        self._model = config.embedding_model
        self._dimensions = config.embedding_dimensions
        self._url = (
            f"{config.hf_base_url.rstrip('/')}/pipeline/feature-extraction/{self._model}"
        )
        self._transport = transport

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Embed texts via the inference endpoint.

        Transient and rate-limit failures are retried per the config's retry
        policy; authentication, client and malformed-body errors are raised
        immediately.

        Args:
            texts: List of texts to embed.

        Returns:
            EmbeddingResult with vectors in same order as input.

        Raises:
            ProviderError: Subclass describing the failure.
        """
        if not texts:
            return EmbeddingResult(vectors=[], model=self._model, dimensions=self._dimensions)

        logger.info(
            "embedding_request_start",
            provider="huggingface",
            model=self._model,
            text_count=len(texts),
        )
        start_time = time.monotonic()

        try:
            vectors = await with_retries(lambda: self._post(texts), self.config)
        except ProviderError as e:
            logger.error(
                "embedding_request_failed",
                provider="huggingface",
                model=self._model,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info(
            "embedding_request_complete",
            provider="huggingface",
            model=self._model,
            text_count=len(texts),
            latency_ms=round((time.monotonic() - start_time) * 1000, 2),
        )

        return EmbeddingResult(
            vectors=vectors,
            model=self._model,
            dimensions=len(vectors[0]),
        )

    async def _post(self, texts: list[str]) -> list[list[float]]:
        """Issue one inference request and return the validated vectors."""
        payload = {"inputs": texts, "options": {"wait_for_model": True}}
        headers = {"Authorization": f"Bearer {self.config.hf_api_key}"}

        async with httpx.AsyncClient(
            timeout=self.config.request_timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(self._url, json=payload, headers=headers)
            except httpx.TransportError as e:
                raise TransientError(f"Hugging Face request failed: {e}") from e

        if not response.is_success:
            raise _classify_status(response)

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not valid JSON") from e

        return _parse_vectors(body, expected=len(texts))

    @property
    def dimensions(self) -> int:
        """Return configured embedding dimensions (384 for all-MiniLM-L6-v2)."""
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "huggingface"

    @property
    def model_name(self) -> str:
        return self._model
