"""Unified configuration layer.

Goals
-----
* Centralize defaults for every setting (``config.defaults``).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by COPILOT_CONFIG_FILE
    3. Environment variables (``COPILOT_API_BASE_URL``, ``COPILOT_API_MODEL``...)
    4. In-code overrides (``overrides=`` or ``update()``)
* Implement the ``ConfigurationProvider`` contract: synchronous ``get`` with a
  value cache that is cleared whenever a setting changes, plus change
  listeners.

External Config File (Optional)
-------------------------------
Keys may be given flat (``"api.baseUrl": ...``) or nested::

    api:
      baseUrl: https://api.openai.com/v1
      model: gpt-3.5-turbo-instruct
    autocomplete:
      debounceMs: 250

Public API
----------
* SettingsConfiguration(overrides=None, *, config_file=None, environ=None)
* load_config_file(path) -> dict
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from ..base.logging import get_logger, log_event
from .defaults import DEFAULTS
from .env import CONFIG_FILE_ENV, ENV_SETTINGS

_logger = get_logger("copilot.config")

_MISSING = object()


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        full = f"{prefix}{key}"
        if isinstance(value, Mapping):
            out.update(_flatten(value, full + "."))
        else:
            out[full] = value
    return out


def load_config_file(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """Load a JSON or YAML settings file into a flat dotted-key dict.

    A missing file yields ``{}``. JSON is tried first, then YAML; content that
    is neither, or not a mapping, is logged and ignored.
    """
    p = Path(path).expanduser()
    if not p.is_file():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            log_event(_logger, "config.file_invalid", level=logging.WARNING, path=str(p), error=str(exc))
            return {}
    if not isinstance(data, Mapping):
        log_event(_logger, "config.file_invalid", level=logging.WARNING, path=str(p), error="not a mapping")
        return {}
    return _flatten(data)


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, (var, parse) in ENV_SETTINGS.items():
        raw = environ.get(var)
        if raw is None or not raw.strip():
            continue
        try:
            out[key] = parse(raw.strip())
        except ValueError:
            log_event(_logger, "config.env_invalid", level=logging.WARNING, var=var, value=raw)
    return out


def _affects(changed: str, watched: str) -> bool:
    return (
        changed == watched
        or changed.startswith(watched + ".")
        or watched.startswith(changed + ".")
    )


class SettingsConfiguration:
    """Layered settings with caching and change notification.

    Parameters:
        overrides: In-code values that win over every other source.
        config_file: Settings file path; defaults to ``$COPILOT_CONFIG_FILE``.
        environ: Environment mapping (``os.environ`` by default).
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._config_file = config_file if config_file is not None else self._environ.get(CONFIG_FILE_ENV)
        self._overrides: Dict[str, Any] = _flatten(overrides or {})
        self._lock = RLock()
        self._cache: Dict[str, Any] = {}
        self._listeners: List[Tuple[str, Callable[[], None]]] = []
        self._layers = self._load_layers()

    def _load_layers(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = dict(DEFAULTS)
        if self._config_file:
            merged |= load_config_file(self._config_file)
        merged |= _env_overrides(self._environ)
        return merged

    # ------------------------------------------------------------------ reads
    def get(self, key: str, default: Any = None) -> Any:
        """Return the merged value for ``key`` (``default`` when unset)."""
        with self._lock:
            cached = self._cache.get(key, _MISSING)
            if cached is not _MISSING:
                return default if cached is None else cached
            value = self._overrides.get(key, self._layers.get(key))
            self._cache[key] = value
        return default if value is None else value

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {**self._layers, **self._overrides}

    # ----------------------------------------------------------------- writes
    def update(self, key: str, value: Any) -> None:
        """Set an in-code override (``None`` removes it) and notify listeners."""
        with self._lock:
            if value is None:
                self._overrides.pop(key, None)
            else:
                self._overrides[key] = value
            self._cache.clear()
        self._notify([key])

    def reload(self) -> None:
        """Re-read the settings file and environment; notify on changed keys."""
        with self._lock:
            before = self.as_dict()
            self._layers = self._load_layers()
            self._cache.clear()
            after = self.as_dict()
        changed = [k for k in set(before) | set(after) if before.get(k) != after.get(k)]
        if changed:
            self._notify(changed)

    # -------------------------------------------------------------- listeners
    def on_did_change(self, key: str, listener: Callable[[], None]) -> Callable[[], None]:
        """Call ``listener`` when ``key`` changes; returns an unsubscribe function."""
        entry = (key, listener)
        with self._lock:
            self._listeners.append(entry)

        def _unsubscribe() -> None:
            with self._lock:
                if entry in self._listeners:
                    self._listeners.remove(entry)

        return _unsubscribe

    def _notify(self, changed: List[str]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for watched, listener in listeners:
            if any(_affects(c, watched) for c in changed):
                try:
                    listener()
                except Exception as exc:  # noqa: BLE001 - one listener must not starve the rest
                    log_event(_logger, "config.listener_failed", level=logging.ERROR, key=watched, error=str(exc))

    def dispose(self) -> None:
        """Drop every listener."""
        with self._lock:
            self._listeners.clear()


__all__ = [
    "SettingsConfiguration",
    "load_config_file",
    "DEFAULTS",
]
