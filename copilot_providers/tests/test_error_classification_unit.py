from __future__ import annotations

import types

import httpx
import pytest

from copilot_providers.base.cancellation import CancelledError
from copilot_providers.base.errors import (
    CircuitOpenError,
    ConfigurationError,
    ConnectivityError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    classify_exception,
    is_circuit_failure,
)


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests


def test_classify_http_status_mapping():
    # Direct attr
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101 - assert is appropriate in unit tests
    # response.status_code
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101 - assert is appropriate in unit tests


def test_classify_cancellation_and_transport():
    assert classify_exception(CancelledError(reason="timeout")) is ErrorCode.TIMEOUT
    assert classify_exception(CancelledError(reason="superseded")) is ErrorCode.CANCELLED
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSIENT
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN


@pytest.mark.parametrize(
    "status, counts",
    [(500, True), (503, True), (599, True), (429, True), (400, False), (401, False), (404, False), (200, False)],
)
def test_circuit_failure_statuses(status, counts):
    assert is_circuit_failure(status) is counts


def test_typed_errors_carry_codes_and_details():
    conn = ConnectivityError("API Error 503: Service Unavailable", status=503, model="m")
    assert conn.code is ErrorCode.UNAVAILABLE and conn.status == 503 and conn.retryable
    assert ConnectivityError("Request failed: boom").code is ErrorCode.TRANSIENT
    assert ConnectivityError("API Error 418: teapot", status=418).code is ErrorCode.UNKNOWN

    cfg = ConfigurationError("API key not configured", setting="copilot.apiKey")
    assert cfg.code is ErrorCode.CONFIGURATION and cfg.setting == "copilot.apiKey"

    proto = ProtocolError("Malformed SSE data", payload="{oops")
    assert proto.code is ErrorCode.PROTOCOL and proto.payload == "{oops"

    circuit = CircuitOpenError("cooling", retry_after_seconds=12.5)
    assert circuit.code is ErrorCode.CIRCUIT_OPEN and circuit.retry_after_seconds == 12.5
    assert isinstance(circuit, ProviderError)
