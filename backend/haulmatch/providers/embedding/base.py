"""Abstract base class and types for embedding providers.

Batch-first interface: a single text is embedded as embed([text]).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from haulmatch.providers.config import ProviderConfig


@dataclass
class EmbeddingResult:
    """Result of embedding operation.

    Attributes:
        vectors: One embedding vector per input text, in same order.
        model: Model identifier used for embedding.
        dimensions: Number of dimensions in each vector.
        total_tokens: Tokens processed, when the provider reports it.
    """

    vectors: list[list[float]]
    model: str
    dimensions: int
    total_tokens: int | None = None


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including API keys.
        """
        self.config = config

    @abstractmethod
    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed.

        Returns:
            EmbeddingResult with vectors in same order as input.

        Raises:
            ProviderError: On API failure after retries.
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the embedding dimensions (e.g., 384)."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short provider identifier stored alongside cached vectors."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier stored alongside cached vectors."""
        ...
