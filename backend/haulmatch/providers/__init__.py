"""Provider abstraction layer.

Exports:
    Error classes for provider error handling
    ProviderConfig for configuration
    Factory functions for provider instances
"""

from haulmatch.providers.config import ProviderConfig
from haulmatch.providers.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from haulmatch.providers.factory import (
    create_embedding_provider,
    get_embedding_provider,
    reset_providers,
)

__all__ = [
    # Config
    "ProviderConfig",
    # Errors
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "MalformedResponseError",
    "TransientError",
    # Factory
    "create_embedding_provider",
    "get_embedding_provider",
    "reset_providers",
]
