"""Tests for provider factory functions."""

from unittest.mock import patch

import pytest

from haulmatch.providers.config import ProviderConfig
from haulmatch.providers.embedding.huggingface_adapter import (
    HuggingFaceEmbeddingAdapter,
)
from haulmatch.providers.embedding.mock_adapter import MockEmbeddingProvider
from haulmatch.providers.embedding.openai_adapter import OpenAIEmbeddingAdapter
from haulmatch.providers.factory import (
    create_embedding_provider,
    get_embedding_provider,
    reset_providers,
)


class TestCreateEmbeddingProvider:
    """Test create_embedding_provider()."""

    def test_huggingface_with_key(self):
        provider = create_embedding_provider(ProviderConfig(hf_api_key="hf-test"))
        assert isinstance(provider, HuggingFaceEmbeddingAdapter)
        assert provider.provider_name == "huggingface"

    def test_openai_with_key(self):
        config = ProviderConfig(embedding_provider="openai", openai_api_key="sk-test")
        assert isinstance(create_embedding_provider(config), OpenAIEmbeddingAdapter)

    def test_missing_key_means_rules_only(self):
        """No API key is not an error; the pipeline runs without embeddings."""
        assert create_embedding_provider(ProviderConfig()) is None

    def test_mock_needs_no_key(self):
        config = ProviderConfig(embedding_provider="mock", embedding_dimensions=8)
        provider = create_embedding_provider(config)
        assert isinstance(provider, MockEmbeddingProvider)
        assert provider.dimensions == 8

    def test_raises_for_unknown_provider(self):
        config = ProviderConfig(embedding_provider="unknown_provider")
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            create_embedding_provider(config)


class TestGetEmbeddingProvider:
    """Test get_embedding_provider() singleton behavior."""

    def setup_method(self):
        """Reset singletons before each test."""
        reset_providers()

    def teardown_method(self):
        reset_providers()

    def test_singleton_returns_same_instance(self):
        config = ProviderConfig(hf_api_key="hf-test")
        provider1 = get_embedding_provider(config)
        provider2 = get_embedding_provider()  # No config, uses cached
        assert provider1 is provider2

    def test_rules_only_result_is_cached(self):
        """A None provider is resolved once, not re-read on every call."""
        with patch(
            "haulmatch.providers.factory.ProviderConfig.from_env",
            return_value=ProviderConfig(),
        ) as mock_from_env:
            assert get_embedding_provider() is None
            assert get_embedding_provider() is None
        mock_from_env.assert_called_once()

    def test_reset_clears_singleton(self):
        config = ProviderConfig(hf_api_key="hf-test")
        provider1 = get_embedding_provider(config)
        reset_providers()
        provider2 = get_embedding_provider(config)
        assert provider1 is not provider2
