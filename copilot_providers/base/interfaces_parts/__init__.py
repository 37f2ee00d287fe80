"""Interfaces (Protocols) split into single-class modules.

This package provides one Protocol per file while allowing
``copilot_providers.base.interfaces`` to re-export a stable API.
"""

from .keyed_store import KeyedStore
from .credential_store import CredentialStore
from .configuration_provider import ConfigurationProvider
from .notifier import Notifier
from .workspace_context import WorkspaceContext

__all__ = [
    "KeyedStore",
    "CredentialStore",
    "ConfigurationProvider",
    "Notifier",
    "WorkspaceContext",
]
