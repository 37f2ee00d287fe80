"""Common helpers for the OpenAI-compatible client.

Purpose:
    Keep header/endpoint construction, credential resolution and lifecycle
    logging out of ``client.py`` so the client module stays focused on the
    request flow.

Notes:
    These helpers assume the consumer provides ``_config`` (a
    ``ConfigurationProvider``), ``_credentials`` (a ``CredentialStore``) and
    ``_logger`` attributes.
"""

from __future__ import annotations

import inspect
import logging
import time
import uuid
from typing import Dict, Optional, Tuple

from ..base.constants import (
    MISSING_API_KEY_ERROR,
    MISSING_BASE_URL_ERROR,
    PROVIDER_NAME,
    SECRET_KEY,
    USER_AGENT,
)
from ..base.errors import ConfigurationError, classify_exception
from ..base.logging import LogContext, normalized_log_event


class OpenAICompatCommonMixin:
    """Mixin offering credential, header and logging helpers."""

    async def _resolve_endpoint(self) -> Tuple[str, str]:
        """Return ``(base_url, api_key)`` or raise ``ConfigurationError``.

        Credential stores may be synchronous or return an awaitable.
        """
        api_key = self._credentials.get(SECRET_KEY)
        if inspect.isawaitable(api_key):
            api_key = await api_key
        if not api_key:
            raise ConfigurationError(MISSING_API_KEY_ERROR, setting=SECRET_KEY)
        base_url = self._config.get("api.baseUrl")
        if not base_url:
            raise ConfigurationError(MISSING_BASE_URL_ERROR, setting="api.baseUrl")
        return str(base_url).rstrip("/"), api_key

    def _build_headers(self, api_key: str) -> Dict[str, str]:
        """Headers attached to every upstream request."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "User-Agent": USER_AGENT,
        }

    def _model(self) -> Optional[str]:
        return self._config.get("api.model")

    def _new_context(self, operation: str, model: Optional[str]) -> LogContext:
        return LogContext(
            provider=PROVIDER_NAME,
            model=model,
            request_id=uuid.uuid4().hex[:12],
            operation=operation,
        )

    def _log_start(self, event: str, ctx: LogContext) -> float:
        normalized_log_event(self._logger, event, ctx, phase="start", emitted=False, level=logging.DEBUG)
        return time.perf_counter()

    def _log_end(self, event: str, ctx: LogContext, started: float, **fields) -> None:
        normalized_log_event(
            self._logger,
            event,
            ctx,
            phase="finalize",
            emitted=True,
            latency_ms=round((time.perf_counter() - started) * 1000.0, 2),
            **fields,
        )

    def _log_failure(self, event: str, ctx: LogContext, exc: Exception, **fields) -> None:
        normalized_log_event(
            self._logger,
            event,
            ctx,
            phase="finalize",
            emitted=False,
            error_code=classify_exception(exc).value,
            level=logging.WARNING,
            error=getattr(exc, "message", None) or str(exc),
            **fields,
        )


__all__ = ["OpenAICompatCommonMixin"]
