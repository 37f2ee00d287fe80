"""Pytest configuration for the copilot_providers test suite.

Shared fixtures:

- ``anyio_backend`` pins ``pytest.mark.anyio`` tests to asyncio.
- ``clock`` is a manually advanced time source for TTL and circuit tests.
- ``config`` / ``credentials`` give a complete, environment-independent setup.
- ``make_client`` builds an ``OpenAICompatClient`` over ``httpx.MockTransport``.
- ``copilot_caplog`` attaches ``caplog`` to the non-propagating ``copilot``
  logger.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Iterator, List

import httpx
import pytest

from copilot_providers.base.constants import SECRET_KEY
from copilot_providers.base.http import create_async_client
from copilot_providers.base.logging import ROOT_LOGGER_NAME
from copilot_providers.base.memory.in_memory_store import InMemoryCredentialStore
from copilot_providers.base.timeouts import TimeoutConfig
from copilot_providers.config import SettingsConfiguration
from copilot_providers.openai_compat import OpenAICompatClient

BASE_URL = "https://api.test/v1"
MODEL = "test-model"
API_KEY = "sk-test-123"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeClock:
    """Callable time source advanced explicitly by tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> SettingsConfiguration:
    """Settings with a base URL and model and an empty environment."""
    return SettingsConfiguration(
        {"api.baseUrl": BASE_URL, "api.model": MODEL, "autocomplete.debounceMs": 20},
        environ={},
    )


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore({SECRET_KEY: API_KEY})


class RecordingNotifier:
    def __init__(self) -> None:
        self.warnings: List[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_client(config, credentials) -> Callable[..., OpenAICompatClient]:
    """Factory: ``make_client(handler, **client_kwargs)``.

    ``handler`` receives each ``httpx.Request`` and returns an
    ``httpx.Response`` (sync or async). Short deadlines keep timeout tests fast
    unless ``timeouts=`` is given.
    """

    def _make(handler, **kwargs) -> OpenAICompatClient:
        kwargs.setdefault("config", config)
        kwargs.setdefault("credentials", credentials)
        kwargs.setdefault(
            "timeouts",
            TimeoutConfig(connect_test_seconds=1.0, completion_seconds=1.0, chat_seconds=1.0, http_timeout_seconds=5.0),
        )
        http = create_async_client(transport=httpx.MockTransport(handler))
        return OpenAICompatClient(
            kwargs.pop("config"),
            kwargs.pop("credentials"),
            http_client=http,
            **kwargs,
        )

    return _make


@pytest.fixture
def copilot_caplog(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    """``caplog`` wired to the shared ``copilot`` logger (which does not propagate)."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)


def _sse_body(*records: str, done: bool = True) -> bytes:
    lines = [f"data: {r}\n\n" for r in records]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def _delta(content: str) -> str:
    return json.dumps({"choices": [{"index": 0, "delta": {"content": content}}]})


@pytest.fixture
def sse_body() -> Callable[..., bytes]:
    """``sse_body(*json_records, done=True)`` encodes an SSE response body."""
    return _sse_body


@pytest.fixture
def delta() -> Callable[[str], str]:
    """``delta(text)`` is the JSON of one streamed chat chunk carrying ``text``."""
    return _delta
