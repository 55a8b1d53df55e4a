"""Tests for the OpenAI embedding adapter."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from haulmatch.providers.config import ProviderConfig
from haulmatch.providers.embedding.openai_adapter import (
    MAX_BATCH_SIZE,
    OpenAIEmbeddingAdapter,
)
from haulmatch.providers.errors import (
    AuthenticationError,
    RateLimitError,
    TransientError,
)

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


@pytest.fixture
def config():
    """Provider config with test API key and no retries."""
    return ProviderConfig(
        embedding_provider="openai",
        openai_api_key="test-api-key",
        embedding_model="text-embedding-3-small",
        embedding_dimensions=1536,
        max_retries=0,
    )


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client for embedding tests."""
    with patch(
        "haulmatch.providers.embedding.openai_adapter.AsyncOpenAI"
    ) as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value = mock_client
        yield mock_client


def _response(count: int, dims: int = 4, tokens: int = 5) -> MagicMock:
    mock_response = MagicMock()
    mock_response.data = [MagicMock(embedding=[float(i)] * dims) for i in range(count)]
    mock_response.usage.total_tokens = tokens
    return mock_response


class TestOpenAIEmbeddingAdapterEmbed:
    """Test embed() method behavior."""

    @pytest.mark.asyncio
    async def test_embed_returns_vectors_in_order(self, config, mock_openai_client):
        mock_openai_client.embeddings.create = AsyncMock(return_value=_response(3))

        adapter = OpenAIEmbeddingAdapter(config)
        result = await adapter.embed(["a", "b", "c"])

        assert [v[0] for v in result.vectors] == [0.0, 1.0, 2.0]
        assert result.model == "text-embedding-3-small"
        assert result.total_tokens == 5
        mock_openai_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small",
            input=["a", "b", "c"],
        )

    @pytest.mark.asyncio
    async def test_large_batch_chunks_into_multiple_calls(
        self, config, mock_openai_client
    ):
        """Inputs over the API limit are split; token counts are summed."""

        async def mock_create(*, model, input):  # noqa: ARG001
            return _response(len(input), tokens=len(input))

        mock_openai_client.embeddings.create = AsyncMock(side_effect=mock_create)

        adapter = OpenAIEmbeddingAdapter(config)
        result = await adapter.embed(["text"] * (MAX_BATCH_SIZE + 10))

        assert mock_openai_client.embeddings.create.call_count == 2
        assert len(result.vectors) == MAX_BATCH_SIZE + 10
        assert result.total_tokens == MAX_BATCH_SIZE + 10

    @pytest.mark.usefixtures("mock_openai_client")
    def test_identity(self, config):
        adapter = OpenAIEmbeddingAdapter(config)
        assert adapter.provider_name == "openai"
        assert adapter.model_name == "text-embedding-3-small"
        assert adapter.dimensions == 1536


class TestOpenAIErrorClassification:
    """SDK exceptions are mapped onto the provider error taxonomy."""

    @pytest.mark.asyncio
    async def test_rate_limit(self, config, mock_openai_client):
        error = openai.RateLimitError(
            "rate limited",
            response=httpx.Response(
                429, headers={"retry-after": "2"}, request=_REQUEST
            ),
            body=None,
        )
        mock_openai_client.embeddings.create = AsyncMock(side_effect=error)

        with pytest.raises(RateLimitError) as exc_info:
            await OpenAIEmbeddingAdapter(config).embed(["text"])

        assert exc_info.value.retry_after_seconds == 2.0

    @pytest.mark.asyncio
    async def test_authentication(self, config, mock_openai_client):
        error = openai.AuthenticationError(
            "bad key", response=httpx.Response(401, request=_REQUEST), body=None
        )
        mock_openai_client.embeddings.create = AsyncMock(side_effect=error)

        with pytest.raises(AuthenticationError):
            await OpenAIEmbeddingAdapter(config).embed(["text"])

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self, config, mock_openai_client):
        error = openai.APIConnectionError(request=_REQUEST)
        mock_openai_client.embeddings.create = AsyncMock(side_effect=error)

        with pytest.raises(TransientError):
            await OpenAIEmbeddingAdapter(config).embed(["text"])
