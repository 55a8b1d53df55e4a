"""Tests for ProviderConfig."""

import os
from unittest.mock import patch

from haulmatch.providers.config import (
    DEFAULT_HF_BASE_URL,
    DEFAULT_HF_MODEL,
    ProviderConfig,
)


class TestProviderConfigDefaults:
    """Test default values for ProviderConfig."""

    def test_default_embedding_provider_is_huggingface(self):
        """Default embedding provider should be the Hugging Face endpoint."""
        assert ProviderConfig().embedding_provider == "huggingface"

    def test_default_model_matches_vector_size(self):
        """Default model is all-MiniLM-L6-v2 with 384 dimensions."""
        config = ProviderConfig()
        assert config.embedding_model == DEFAULT_HF_MODEL
        assert config.embedding_dimensions == 384

    def test_api_keys_default_to_none(self):
        config = ProviderConfig()
        assert config.hf_api_key is None
        assert config.openai_api_key is None
        assert config.api_key is None


class TestApiKeySelection:
    """api_key follows the selected provider."""

    def test_huggingface_key(self):
        config = ProviderConfig(hf_api_key="hf-key", openai_api_key="sk-key")
        assert config.api_key == "hf-key"

    def test_openai_key(self):
        config = ProviderConfig(
            embedding_provider="openai", hf_api_key="hf-key", openai_api_key="sk-key"
        )
        assert config.api_key == "sk-key"

    def test_empty_key_is_none(self):
        assert ProviderConfig(hf_api_key="").api_key is None

    def test_mock_has_no_key(self):
        assert ProviderConfig(embedding_provider="mock", hf_api_key="x").api_key is None


class TestProviderConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_loads_from_environment(self):
        env = {
            "EMBEDDING_PROVIDER": "openai",
            "OPENAI_API_KEY": "sk-test",
            "EMBEDDING_MODEL": "text-embedding-3-small",
            "EMBEDDING_DIMENSIONS": "1536",
            "EMBEDDING_TIMEOUT_SECONDS": "5",
            "EMBEDDING_MAX_RETRIES": "4",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ProviderConfig.from_env()

        assert config.embedding_provider == "openai"
        assert config.openai_api_key == "sk-test"
        assert config.embedding_model == "text-embedding-3-small"
        assert config.embedding_dimensions == 1536
        assert config.request_timeout_seconds == 5.0
        assert config.max_retries == 4

    def test_defaults_when_environment_empty(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ProviderConfig.from_env()

        assert config.embedding_provider == "huggingface"
        assert config.hf_api_key is None
        assert config.hf_base_url == DEFAULT_HF_BASE_URL
        assert config.max_retries == 2
