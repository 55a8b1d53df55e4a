"""Mock embedding provider for tests and local runs without an API key."""

import hashlib
from typing import Any

from haulmatch.providers.embedding.base import EmbeddingProvider, EmbeddingResult


class MockEmbeddingProvider(EmbeddingProvider):
    """Deterministic embedding provider.

    Each vector is derived from the SHA-256 digest of its text, so equal texts
    embed identically and different texts (almost always) differ.

    Attributes:
        calls: Record of all method invocations for test assertions.
    """

    MOCK_DIMENSIONS = 384

    def __init__(self, dimensions: int = MOCK_DIMENSIONS) -> None:
        """Initialize mock embedding provider.

        Note: Does not call super().__init__() - no config needed for mock.
        """
        self.calls: list[dict[str, Any]] = []
        self._dimensions = dimensions

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate deterministic mock embeddings.

        Args:
            texts: List of strings to embed.

        Returns:
            EmbeddingResult with mock vectors.
        """
        self.calls.append(
            {
                "method": "embed",
                "texts": texts,
            }
        )

        vectors = [self._vector_for(text) for text in texts]

        return EmbeddingResult(
            vectors=vectors,
            model=self.model_name,
            dimensions=self._dimensions,
            total_tokens=len(texts) * 10,
        )

    def _vector_for(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        # Values in [-1, 1]; cycle the 32-byte digest to fill the vector
        return [
            (digest[i % len(digest)] + i) % 256 / 127.5 - 1.0
            for i in range(self._dimensions)
        ]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "mock-embedding-model"

    def assert_embedded(self, text: str) -> None:
        """Test helper to verify a text was embedded.

        Raises:
            AssertionError: If the text was not embedded.
        """
        all_texts = []
        for call in self.calls:
            all_texts.extend(call["texts"])
        assert text in all_texts, f"Expected '{text}' to be embedded, got {all_texts}"
