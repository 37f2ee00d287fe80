"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``copilot_providers.base.errors_parts`` to maintain a stable import path.

Taxonomy
--------
- ``ConfigurationError``: missing credential/endpoint; fatal to the operation.
- ``ConnectivityError``: timeout, transport failure or non-2xx status.
- ``CircuitOpenError``: rejected locally while the breaker cools down.
- ``ProtocolError``: malformed SSE record or JSON body.
- ``CancelledError`` (``base.cancellation``): explicit or deadline abort.
"""

from .cancellation import CancelledError
from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.configuration_error import ConfigurationError
from .errors_parts.connectivity_error import ConnectivityError
from .errors_parts.circuit_open_error import CircuitOpenError
from .errors_parts.protocol_error import ProtocolError
from .errors_parts.classification import classify_exception, is_circuit_failure

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "ConnectivityError",
    "CircuitOpenError",
    "ProtocolError",
    "CancelledError",
    "classify_exception",
    "is_circuit_failure",
]
