"""copilot_providers package

Editor add-on core for OpenAI-compatible code assistants: an async API client
with SSE streaming and a circuit breaker, an inline completion pipeline with
debounce and a TTL cache, and a streamed chat session.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode` and the typed
      subclasses
    - Client: :class:`OpenAICompatClient`, :func:`create_client`
    - Pipelines: :class:`InlineCompletionProvider`, :class:`ChatSession`
"""

__version__ = "0.1.0"

from typing import Optional  # noqa: E402

from .base.errors import (  # noqa: E402
    CircuitOpenError,
    ConfigurationError,
    ConnectivityError,
    ErrorCode,
    ProtocolError,
    ProviderError,
)
from .base.cancellation import CancellationToken, CancelledError  # noqa: E402
from .base.interfaces import ConfigurationProvider, CredentialStore  # noqa: E402
from .openai_compat import OpenAICompatClient  # noqa: E402
from .completion import InlineCompletionProvider  # noqa: E402
from .chat import ChatSession  # noqa: E402

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "ProviderError",
    "ErrorCode",
    "ConfigurationError",
    "ConnectivityError",
    "CircuitOpenError",
    "ProtocolError",
    "CancelledError",
    "CancellationToken",
    # Core
    "OpenAICompatClient",
    "InlineCompletionProvider",
    "ChatSession",
    "create_client",
]


def create_client(
    config: Optional[ConfigurationProvider] = None,
    credentials: Optional[CredentialStore] = None,
    **kwargs,
) -> OpenAICompatClient:
    """Build an :class:`OpenAICompatClient` from settings and the environment.

    Parameters
    ----------
    config:
        Configuration provider; defaults to a fresh ``SettingsConfiguration``
        (defaults, ``COPILOT_CONFIG_FILE``, ``COPILOT_*`` environment).
    credentials:
        Credential store; defaults to ``EnvCredentialStore``.
    **kwargs:
        Forwarded to :class:`OpenAICompatClient` (``http_client``,
        ``breaker``, ``notifier``, ``timeouts``).
    """
    from .config import SettingsConfiguration
    from .config.env import EnvCredentialStore

    return OpenAICompatClient(
        config if config is not None else SettingsConfiguration(),
        credentials if credentials is not None else EnvCredentialStore(),
        **kwargs,
    )
