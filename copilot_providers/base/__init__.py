"""
Base package

Exports the shared building blocks used by the API client, the completion
pipeline and the chat session:

- Cancellation: cooperative tokens and asyncio bridges
- Errors: normalized taxonomy
- Models (DTOs): request/response objects
- Resilience: TTL cache and circuit breaker
- Timeouts: deadline configuration
"""

from .cancellation import CancellationToken, CancelledError, deadline_token, wait_cancellable
from .errors import (
    CircuitOpenError,
    ConfigurationError,
    ConnectivityError,
    ErrorCode,
    ProtocolError,
    ProviderError,
)
from .models import ChatMessage, ChatRequest, CompletionRequest, CompletionResponse, Role
from .resilience.circuit_breaker import CircuitBreaker, CircuitState
from .resilience.ttl_cache import CacheEntry, TTLCache
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    # Cancellation
    "CancellationToken",
    "CancelledError",
    "deadline_token",
    "wait_cancellable",
    # Errors
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "ConnectivityError",
    "CircuitOpenError",
    "ProtocolError",
    # Models
    "Role",
    "ChatMessage",
    "ChatRequest",
    "CompletionRequest",
    "CompletionResponse",
    # Resilience
    "CacheEntry",
    "TTLCache",
    "CircuitBreaker",
    "CircuitState",
    # Timeouts
    "TimeoutConfig",
    "get_timeout_config",
]
