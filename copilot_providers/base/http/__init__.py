"""HTTP utilities package.

Exposes the async httpx client factory.
"""

from .client import create_async_client

__all__ = ["create_async_client"]
