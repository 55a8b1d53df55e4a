"""Tests for the Hugging Face feature-extraction adapter.

Requests are served by httpx.MockTransport; no network access.
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from haulmatch.providers.config import ProviderConfig
from haulmatch.providers.embedding.huggingface_adapter import (
    HuggingFaceEmbeddingAdapter,
)
from haulmatch.providers.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    TransientError,
)

_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


@pytest.fixture
def config():
    """Provider config with a test token and fast retries."""
    return ProviderConfig(
        hf_api_key="hf-test-token",
        hf_base_url="https://hf.test",
        max_retries=2,
        retry_base_delay_ms=1,
        retry_max_delay_ms=5,
    )


def _adapter(config, handler):
    return HuggingFaceEmbeddingAdapter(config, transport=httpx.MockTransport(handler))


class TestEmbedSuccess:
    @pytest.mark.asyncio
    async def test_posts_inputs_and_returns_vectors(self, config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])

        result = await _adapter(config, handler).embed(["first", "second"])

        assert result.vectors == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
        assert result.dimensions == 3
        assert result.model == _MODEL

        request = seen[0]
        assert str(request.url) == (
            f"https://hf.test/pipeline/feature-extraction/{_MODEL}"
        )
        assert request.headers["Authorization"] == "Bearer hf-test-token"
        assert json.loads(request.content) == {
            "inputs": ["first", "second"],
            "options": {"wait_for_model": True},
        }

    @pytest.mark.asyncio
    async def test_integers_are_converted_to_floats(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[[1, 0]])

        result = await _adapter(config, handler).embed(["text"])

        assert result.vectors == [[1.0, 0.0]]
        assert all(isinstance(v, float) for v in result.vectors[0])

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self, config):
        handler = AsyncMock()

        result = await _adapter(config, handler).embed([])

        assert result.vectors == []
        handler.assert_not_called()

    def test_identity(self, config):
        adapter = HuggingFaceEmbeddingAdapter(config)
        assert adapter.provider_name == "huggingface"
        assert adapter.model_name == _MODEL
        assert adapter.dimensions == 384


class TestEmbedErrors:
    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, config):
        responses = [
            httpx.Response(503, text="loading"),
            httpx.Response(200, json=[[0.5, 0.5]]),
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        with patch("haulmatch.providers.retry.asyncio.sleep", new_callable=AsyncMock):
            result = await _adapter(config, handler).embed(["text"])

        assert result.vectors == [[0.5, 0.5]]
        assert responses == []

    @pytest.mark.asyncio
    async def test_persistent_server_error_raises_transient(self, config):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500, text="boom")

        with (
            patch("haulmatch.providers.retry.asyncio.sleep", new_callable=AsyncMock),
            pytest.raises(TransientError),
        ):
            await _adapter(config, handler).embed(["text"])

        # Initial attempt + 2 retries
        assert calls == 3

    @pytest.mark.asyncio
    async def test_unauthorized_is_not_retried(self, config):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(401, text="bad token")

        with pytest.raises(AuthenticationError):
            await _adapter(config, handler).embed(["text"])

        assert calls == 1

    @pytest.mark.asyncio
    async def test_rate_limit_carries_retry_after(self):
        config = ProviderConfig(hf_api_key="hf-test-token", max_retries=0)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"retry-after": "7"}, text="slow down")

        with pytest.raises(RateLimitError) as exc_info:
            await _adapter(config, handler).embed(["text"])

        assert exc_info.value.retry_after_seconds == 7.0

    @pytest.mark.asyncio
    async def test_other_client_error_is_provider_error(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="bad input")

        with pytest.raises(ProviderError) as exc_info:
            await _adapter(config, handler).embed(["text"])

        assert type(exc_info.value) is ProviderError

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        config = ProviderConfig(hf_api_key="hf-test-token", max_retries=0)

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransientError):
            await _adapter(config, handler).embed(["text"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"error": "unexpected"},
            [[0.1, 0.2]],
            [[0.1], []],
            [[0.1, "x"], [0.2, 0.3]],
            [[0.1, 0.2], [0.3]],
            [[True, False], [0.1, 0.2]],
        ],
    )
    async def test_malformed_body(self, config, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        with pytest.raises(MalformedResponseError):
            await _adapter(config, handler).embed(["first", "second"])

    @pytest.mark.asyncio
    async def test_non_json_body(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(MalformedResponseError):
            await _adapter(config, handler).embed(["text"])
