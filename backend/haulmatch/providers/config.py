"""Embedding provider configuration.

Loaded separately from haulmatch.core.config.Settings so the scoring pipeline
can be wired with a provider (or none) without touching the database settings.
"""

import os
from dataclasses import dataclass

DEFAULT_HF_BASE_URL = "https://api-inference.huggingface.co"
DEFAULT_HF_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_HF_DIMENSIONS = 384


@dataclass
class ProviderConfig:
    """Centralized embedding provider configuration.

    Attributes:
        embedding_provider: Which provider to use ("huggingface", "openai", "mock").
        hf_api_key: Hugging Face Inference API token.
        openai_api_key: OpenAI API key.
        embedding_model: Embedding model identifier.
        embedding_dimensions: Vector dimensions (must match the pgvector column).
        hf_base_url: Base URL of the Hugging Face inference endpoint.
        request_timeout_seconds: Per-request HTTP timeout.
        max_retries: Max retry attempts for transient and rate-limit errors.
        retry_base_delay_ms: Base delay for exponential backoff.
        retry_max_delay_ms: Max delay cap for exponential backoff.
    """

    # Provider selection
    embedding_provider: str = "huggingface"

    # API keys (loaded from environment)
    hf_api_key: str | None = None
    openai_api_key: str | None = None

    # Embedding config
    embedding_model: str = DEFAULT_HF_MODEL
    embedding_dimensions: int = DEFAULT_HF_DIMENSIONS
    hf_base_url: str = DEFAULT_HF_BASE_URL
    request_timeout_seconds: float = 30.0

    # Retry policy
    max_retries: int = 2
    retry_base_delay_ms: int = 500
    retry_max_delay_ms: int = 5000

    @property
    def api_key(self) -> str | None:
        """API key for the selected provider, or None when not configured."""
        if self.embedding_provider == "huggingface":
            return self.hf_api_key or None
        if self.embedding_provider == "openai":
            return self.openai_api_key or None
        return None

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load configuration from environment variables.

        Returns:
            ProviderConfig instance with values from environment.
        """
        return cls(
            embedding_provider=os.getenv("EMBEDDING_PROVIDER", "huggingface"),
            hf_api_key=os.getenv("HF_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            embedding_model=os.getenv("EMBEDDING_MODEL", DEFAULT_HF_MODEL),
            embedding_dimensions=int(
                os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_HF_DIMENSIONS))
            ),
            hf_base_url=os.getenv("HF_BASE_URL", DEFAULT_HF_BASE_URL),
            request_timeout_seconds=float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "30")),
            max_retries=int(os.getenv("EMBEDDING_MAX_RETRIES", "2")),
        )
