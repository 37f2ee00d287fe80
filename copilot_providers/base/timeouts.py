"""Unified timeout values for the OpenAI-compatible client.

This module centralizes the deadlines used by the client (connectivity probe,
single-shot completion, streamed chat) and the baseline ``httpx`` transport
timeout. Deadlines are enforced by the client through loop timers that cancel
a request token (see ``base.cancellation.deadline_token``), independently of
any caller-supplied cancellation.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values. Fields are explicit and
    stable.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use only. Supported environment variables (all optional):
        COPILOT_TIMEOUT_CONNECT_SECONDS
        COPILOT_TIMEOUT_COMPLETION_SECONDS
        COPILOT_TIMEOUT_CHAT_SECONDS
        COPILOT_TIMEOUT_HTTP_SECONDS

Design Constraints
------------------
1. No hard-coded ad-hoc timeouts outside this module.
2. Avoid per-call env parsing (cache after first read).
3. Side-effect free access (apart from first load) for deterministic tests.
"""
from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_test_seconds: Deadline for the ``/models`` connectivity probe.
        completion_seconds: Deadline for a single-shot ``/completions`` call.
        chat_seconds: Deadline for a streamed ``/chat/completions`` call,
            covering the whole stream until it is released.
        http_timeout_seconds: Baseline transport timeout handed to ``httpx``
            (connect/read/write/pool). Acts as a backstop only.
    """

    connect_test_seconds: float = 10.0
    completion_seconds: float = 30.0
    chat_seconds: float = 30.0
    http_timeout_seconds: float = 60.0


_CACHED: TimeoutConfig | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float with a fallback default.

    Args:
        name: The name of the environment variable to read.
        default: The fallback value to use if parsing fails.

    Returns:
        The parsed float value from the environment variable, or the provided default.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:  # pragma: no cover - defensive
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return process-cached ``TimeoutConfig`` instance."""
    global _CACHED  # noqa: PLW0603 - intentional, documented module cache
    if _CACHED is not None:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_test_seconds=_parse_env_float("COPILOT_TIMEOUT_CONNECT_SECONDS", 10.0),
        completion_seconds=_parse_env_float("COPILOT_TIMEOUT_COMPLETION_SECONDS", 30.0),
        chat_seconds=_parse_env_float("COPILOT_TIMEOUT_CHAT_SECONDS", 30.0),
        http_timeout_seconds=_parse_env_float("COPILOT_TIMEOUT_HTTP_SECONDS", 60.0),
    )
    return _CACHED


def reset_timeout_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _CACHED  # noqa: PLW0603
    _CACHED = None


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "reset_timeout_config",
]
