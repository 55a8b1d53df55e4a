"""Embedding provider module.

Exports:
    EmbeddingProvider: Abstract base class for embeddings
    EmbeddingResult: Result dataclass from embedding operations
    HuggingFaceEmbeddingAdapter: Hugging Face Inference API implementation
    OpenAIEmbeddingAdapter: OpenAI implementation
    MockEmbeddingProvider: Deterministic provider for tests
"""

from haulmatch.providers.embedding.base import EmbeddingProvider, EmbeddingResult
from haulmatch.providers.embedding.huggingface_adapter import (
    HuggingFaceEmbeddingAdapter,
)
from haulmatch.providers.embedding.mock_adapter import MockEmbeddingProvider
from haulmatch.providers.embedding.openai_adapter import OpenAIEmbeddingAdapter

__all__ = [
    "EmbeddingProvider",
    "EmbeddingResult",
    "HuggingFaceEmbeddingAdapter",
    "MockEmbeddingProvider",
    "OpenAIEmbeddingAdapter",
]
