"""
Collaborator interfaces (Protocols) consumed by the client and pipeline.

This module re-exports Protocols split into single-class modules under
``copilot_providers.base.interfaces_parts`` while keeping imports stable for
upstream code. Implementations live with the host editor; reference
implementations for tests and the CLI live in ``base.memory`` and ``config``.
"""

from __future__ import annotations

from .interfaces_parts import (
    ConfigurationProvider,
    CredentialStore,
    KeyedStore,
    Notifier,
    WorkspaceContext,
)

__all__ = [
    "ConfigurationProvider",
    "CredentialStore",
    "KeyedStore",
    "Notifier",
    "WorkspaceContext",
]
