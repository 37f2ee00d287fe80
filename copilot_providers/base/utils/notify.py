"""Default notifier that routes user-visible messages to the log."""
from __future__ import annotations

import logging

from ..logging import get_logger, log_event


class LoggingNotifier:
    """Notifier used when no host UI is attached (CLI, tests, headless)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("copilot.notify")

    def warn(self, message: str) -> None:
        log_event(self._logger, "notify.warning", level=logging.WARNING, message=message)


__all__ = ["LoggingNotifier"]
