"""Provider factory functions.

A missing API key is not an error: the pipeline then runs in rules-only
(degraded) mode and get_embedding_provider returns None.
"""

import logging

from haulmatch.providers.config import ProviderConfig
from haulmatch.providers.embedding.base import EmbeddingProvider
from haulmatch.providers.embedding.huggingface_adapter import (
    HuggingFaceEmbeddingAdapter,
)
from haulmatch.providers.embedding.mock_adapter import MockEmbeddingProvider
from haulmatch.providers.embedding.openai_adapter import OpenAIEmbeddingAdapter

logger = logging.getLogger(__name__)

_embedding_provider: EmbeddingProvider | None = None
_resolved = False


def create_embedding_provider(config: ProviderConfig) -> EmbeddingProvider | None:
    """Build a new embedding provider for the given configuration.

    Args:
        config: Provider configuration.

    Returns:
        EmbeddingProvider instance, or None if the selected provider has no
        API key configured.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    if config.embedding_provider == "mock":
        return MockEmbeddingProvider(dimensions=config.embedding_dimensions)

    if config.embedding_provider not in ("huggingface", "openai"):
        raise ValueError(f"Unknown embedding provider: {config.embedding_provider}")

    if config.api_key is None:
        logger.warning(
            "No API key for embedding provider %r; semantic scoring disabled",
            config.embedding_provider,
        )
        return None

    if config.embedding_provider == "huggingface":
        return HuggingFaceEmbeddingAdapter(config)
    return OpenAIEmbeddingAdapter(config)


def get_embedding_provider(
    config: ProviderConfig | None = None,
) -> EmbeddingProvider | None:
    """Get or create the embedding provider singleton.

    Args:
        config: Optional provider configuration. If None and no provider
            has been resolved yet, loads from environment.

    Returns:
        EmbeddingProvider instance, or None in rules-only mode.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _embedding_provider, _resolved

    if not _resolved:
        if config is None:
            config = ProviderConfig.from_env()
        _embedding_provider = create_embedding_provider(config)
        _resolved = True

    return _embedding_provider


def reset_providers() -> None:
    """Reset the provider singleton.

    Used in tests to ensure isolation between test cases.
    """
    global _embedding_provider, _resolved
    _embedding_provider = None
    _resolved = False
