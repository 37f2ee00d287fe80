"""OpenAI-compatible API client (async, ``httpx``).

Summary:
- ``test_connection``: bounded GET ``/models`` probe
- ``create_completion``: single-shot POST ``/completions``
- ``create_chat_completion``: streamed POST ``/chat/completions`` returning a
  ``ChatStream`` of text fragments

Deadlines & Cancellation:
- Every call arms a loop timer (``deadline_token``) from ``TimeoutConfig``
  and merges it with the caller's token (``CancellationToken.any_of``),
  first-wins. Network awaits are raced against the merged token with
  ``wait_cancellable``.
- Caller cancellation surfaces as ``CancelledError(reason="cancelled")`` (or
  the caller's own reason); the deadline as ``CancelledError(reason="timeout")``.

Resilience:
- A ``CircuitBreaker`` owned by the client is consulted before any I/O.
  Non-2xx responses are reported to it; only 5xx and 429 count.
- No retries: a failed call is surfaced to the caller as a typed error.

This module orchestrates I/O only; framing, parsing and state machines live
in the shared base layers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..base.cancellation import CancellationToken, CancelledError, deadline_token, wait_cancellable
from ..base.errors import ConnectivityError, ProtocolError
from ..base.http import create_async_client
from ..base.interfaces import ConfigurationProvider, CredentialStore, Notifier
from ..base.logging import get_logger
from ..base.models import ChatRequest, CompletionRequest, CompletionResponse
from ..base.resilience.circuit_breaker import CircuitBreaker
from ..base.streaming import ChatStream
from ..base.timeouts import TimeoutConfig, get_timeout_config
from ..base.utils.notify import LoggingNotifier
from .helpers import OpenAICompatCommonMixin


class OpenAICompatClient(OpenAICompatCommonMixin):
    """Client for OpenAI-compatible ``/models``, ``/completions`` and ``/chat/completions``.

    Parameters:
        config: Settings source (``api.baseUrl``, ``api.model``).
        credentials: Secret lookup for the bearer token.
        http_client: Optional ``httpx.AsyncClient``; when omitted the client
            creates and owns one (closed by ``aclose``).
        breaker: Optional circuit breaker; defaults to one that reports its
            cooling-down warning through ``notifier``.
        notifier: User-visible warning surface (defaults to the log).
        timeouts: Deadline configuration (defaults to ``get_timeout_config()``).

    Side effects:
        - Performs outbound HTTP I/O.
        - Emits structured start/finalize log events per call.
    """

    def __init__(
        self,
        config: ConfigurationProvider,
        credentials: CredentialStore,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        breaker: Optional[CircuitBreaker] = None,
        notifier: Optional[Notifier] = None,
        timeouts: Optional[TimeoutConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._timeouts = timeouts or get_timeout_config()
        self._owns_http = http_client is None
        self._http = http_client or create_async_client(timeout=self._timeouts.http_timeout_seconds)
        self._notifier = notifier or LoggingNotifier()
        self._breaker = breaker or CircuitBreaker(on_open=self._notifier.warn)
        self._logger = logger or get_logger("copilot.client")

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    # ------------------------------------------------------------ diagnostics
    async def test_connection(self) -> None:
        """Probe ``GET {baseUrl}/models``.

        Succeeds only if the status is 2xx and the body is valid JSON.

        Raises:
            ConfigurationError: credential or base URL missing.
            ConnectivityError: timeout, transport failure, non-2xx status or
                a body that is not JSON.
        """
        base_url, api_key = await self._resolve_endpoint()
        ctx = self._new_context("test_connection", self._model())
        started = self._log_start("client.test_connection", ctx)
        token, deadline = deadline_token(self._timeouts.connect_test_seconds)
        try:
            response = await wait_cancellable(
                self._http.get(f"{base_url}/models", headers=self._build_headers(api_key)),
                token,
            )
        except CancelledError as exc:
            err = ConnectivityError(
                f"Connection timed out after {self._timeouts.connect_test_seconds:g}s",
                model=ctx.model,
                raw=exc,
            )
            self._log_failure("client.test_connection", ctx, err)
            raise err from exc
        except httpx.HTTPError as exc:
            err = ConnectivityError(f"Connection failed: {exc}", model=ctx.model, raw=exc)
            self._log_failure("client.test_connection", ctx, err)
            raise err from exc
        finally:
            deadline.cancel()

        if not response.is_success:
            err = ConnectivityError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
                model=ctx.model,
            )
            self._log_failure("client.test_connection", ctx, err)
            raise err
        try:
            response.json()
        except ValueError as exc:
            err = ConnectivityError("Invalid JSON from /models", status=response.status_code, model=ctx.model, raw=exc)
            self._log_failure("client.test_connection", ctx, err)
            raise err from exc
        self._log_end("client.test_connection", ctx, started, status=response.status_code)

    # ------------------------------------------------------------- completion
    async def create_completion(self, request: CompletionRequest) -> CompletionResponse:
        """Single-shot completion.

        Raises:
            CircuitOpenError: the breaker is cooling down (no I/O attempted).
            ConfigurationError: credential or base URL missing.
            CancelledError: caller cancellation or the completion deadline.
            ConnectivityError: transport failure or non-2xx status.
            ProtocolError: the body is not a completion payload.
        """
        self._breaker.check()
        base_url, api_key = await self._resolve_endpoint()
        model = self._model()
        ctx = self._new_context("completion", model)
        started = self._log_start("client.completion", ctx)

        deadline, handle = deadline_token(self._timeouts.completion_seconds)
        token = CancellationToken.any_of(deadline, request.cancellation)
        try:
            response = await wait_cancellable(
                self._http.post(
                    f"{base_url}/completions",
                    json=request.to_payload(model),
                    headers=self._build_headers(api_key),
                ),
                token,
            )
        except CancelledError as exc:
            self._log_failure("client.completion", ctx, exc, reason=exc.reason)
            raise
        except httpx.HTTPError as exc:
            err = ConnectivityError(f"Request failed: {exc}", model=model, raw=exc)
            self._log_failure("client.completion", ctx, err)
            raise err from exc
        finally:
            handle.cancel()

        if not response.is_success:
            self._breaker.record_failure(response.status_code)
            err = ConnectivityError(
                f"API Error {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
                model=model,
            )
            self._log_failure("client.completion", ctx, err, status=response.status_code)
            raise err

        self._breaker.record_success()
        try:
            parsed = CompletionResponse.model_validate_json(response.content)
        except ValidationError as exc:
            err = ProtocolError("Invalid completion response", payload=response.text[:200], raw=exc)
            self._log_failure("client.completion", ctx, err)
            raise err from exc
        self._log_end("client.completion", ctx, started, status=response.status_code, chars=len(parsed.text))
        return parsed

    # ------------------------------------------------------------------- chat
    async def create_chat_completion(
        self,
        request: ChatRequest,
        token: Optional[CancellationToken] = None,
    ) -> ChatStream:
        """Start a streamed chat completion and return its fragment stream.

        The chat deadline covers the whole stream; it is disarmed when the
        stream is released. Cancelling ``token`` aborts the request or ends
        the stream.

        Raises:
            CircuitOpenError, ConfigurationError, CancelledError,
            ConnectivityError (``"API Error <status>: <body>"`` on non-2xx).
        """
        self._breaker.check()
        base_url, api_key = await self._resolve_endpoint()
        model = self._model()
        ctx = self._new_context("chat", model)
        started = self._log_start("client.chat", ctx)

        deadline, handle = deadline_token(self._timeouts.chat_seconds)
        merged = CancellationToken.any_of(deadline, token)
        http_request = self._http.build_request(
            "POST",
            f"{base_url}/chat/completions",
            json=request.to_payload(model),
            headers=self._build_headers(api_key),
        )
        try:
            response = await wait_cancellable(self._http.send(http_request, stream=True), merged)
        except CancelledError as exc:
            handle.cancel()
            self._log_failure("client.chat", ctx, exc, reason=exc.reason)
            raise
        except httpx.HTTPError as exc:
            handle.cancel()
            err = ConnectivityError(f"Request failed: {exc}", model=model, raw=exc)
            self._log_failure("client.chat", ctx, err)
            raise err from exc
        except asyncio.CancelledError:
            handle.cancel()
            raise

        if not response.is_success:
            self._breaker.record_failure(response.status_code)
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError:
                body = response.reason_phrase
            finally:
                await response.aclose()
                handle.cancel()
            err = ConnectivityError(f"API Error {response.status_code}: {body}", status=response.status_code, model=model)
            self._log_failure("client.chat", ctx, err, status=response.status_code)
            raise err

        self._breaker.record_success()
        self._log_end("client.chat", ctx, started, status=response.status_code)
        return ChatStream(response, merged, deadline=handle, ctx=ctx, logger=get_logger("copilot.stream"))

    # -------------------------------------------------------------- lifecycle
    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "OpenAICompatClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["OpenAICompatClient"]
