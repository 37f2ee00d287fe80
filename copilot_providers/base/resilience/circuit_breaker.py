"""Failure-counting circuit breaker owned by the API client.

Two states only: CLOSED (requests flow) and OPEN (cooling down). There is no
half-open probe: once the cooldown elapses the next request simply proceeds
and either resets the counter (success) or increments it again (failure).

Legal transitions:
    record_failure(status)  -- qualifying status increments; reaching
                               ``max_failures`` arms the cooldown (OPEN).
    record_success()        -- resets the counter and cooldown to zero.

Any success forgives every earlier failure; there is no decay curve.
"""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from ..constants import CIRCUIT_COOLDOWN_SECONDS, CIRCUIT_MAX_FAILURES
from ..errors import CircuitOpenError, is_circuit_failure
from ..logging import get_logger, log_event

COOLING_DOWN_MESSAGE = "Service is cooling down due to repeated failures"


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class CircuitBreaker:
    """Gate that rejects requests for a cooldown after repeated upstream failures.

    Parameters:
        max_failures: Qualifying failures that open the circuit.
        cooldown_seconds: How long the circuit stays open.
        clock: Monotonic time source in seconds; injectable for tests.
        on_open: Called with a user-visible warning when the breaker trips.
    """

    def __init__(
        self,
        max_failures: int = CIRCUIT_MAX_FAILURES,
        cooldown_seconds: float = CIRCUIT_COOLDOWN_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_open: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._max_failures = max_failures
        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._on_open = on_open
        self._logger = logger or get_logger("copilot.circuit")
        self._failure_count = 0
        self._cooldown_until = 0.0

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def cooldown_until(self) -> float:
        return self._cooldown_until

    @property
    def state(self) -> CircuitState:
        return CircuitState.OPEN if self._clock() < self._cooldown_until else CircuitState.CLOSED

    def check(self) -> None:
        """Raise ``CircuitOpenError`` while cooling down; no side effects."""
        remaining = self._cooldown_until - self._clock()
        if remaining > 0:
            raise CircuitOpenError(COOLING_DOWN_MESSAGE, retry_after_seconds=remaining)

    def record_failure(self, status: int) -> bool:
        """Count a failed response; return True if this failure opened the circuit."""
        if not is_circuit_failure(status):
            return False
        self._failure_count += 1
        if self._failure_count < self._max_failures:
            return False
        self._cooldown_until = max(self._cooldown_until, self._clock() + self._cooldown_seconds)
        message = f"Too many errors, cooling down for {self._cooldown_seconds:g}s"
        log_event(
            self._logger,
            "circuit.open",
            level=logging.WARNING,
            failures=self._failure_count,
            status=status,
            cooldown_seconds=self._cooldown_seconds,
        )
        if self._on_open is not None:
            self._on_open(message)
        return True

    def record_success(self) -> None:
        """Reset the failure counter and any cooldown."""
        if self._failure_count:
            log_event(self._logger, "circuit.reset", failures=self._failure_count)
        self._failure_count = 0
        self._cooldown_until = 0.0


__all__ = ["CircuitBreaker", "CircuitState", "COOLING_DOWN_MESSAGE"]
