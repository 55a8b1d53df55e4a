"""Embedding provider error taxonomy.

Adapters translate transport and vendor SDK failures into these classes so
that callers (the embedding cache, the retry helper) can decide what to
retry and what to degrade on without knowing which vendor is configured.
"""

__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "MalformedResponseError",
    "TransientError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    Also raised directly for client errors that fit no narrower class
    (e.g. an unexpected 4xx from the inference endpoint).
    """

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded (HTTP 429). Retryable."""

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        """Initialize RateLimitError.

        Args:
            message: Error description from the provider.
            retry_after_seconds: Optional hint from provider on when to retry.
        """
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ProviderError):
    """Invalid or expired API key (HTTP 401/403). Not retryable."""

    pass


class MalformedResponseError(ProviderError):
    """Provider answered 2xx but the body is not a 2-D numeric array."""

    pass


class TransientError(ProviderError):
    """Temporary failure: connection errors, timeouts, 5xx responses."""

    pass
