"""OpenAI-compatible client package.

Exposes :class:`OpenAICompatClient`, the async client for ``/models``,
``/completions`` and streamed ``/chat/completions`` endpoints.
"""

from .client import OpenAICompatClient

__all__ = ["OpenAICompatClient"]
