"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `copilot_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .configuration_error import ConfigurationError
from .connectivity_error import ConnectivityError
from .circuit_open_error import CircuitOpenError
from .protocol_error import ProtocolError
from .classification import classify_exception, is_circuit_failure

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "ConnectivityError",
    "CircuitOpenError",
    "ProtocolError",
    "classify_exception",
    "is_circuit_failure",
]
