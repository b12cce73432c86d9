"""Core utilities for async HTTP clients and retries."""

from .async_context import AsyncContextManager
from .async_http_client import (
    DEFAULT_USER_AGENT,
    BaseAsyncHttpClient,
    cleanup_all_clients,
    register_cleanup,
)
from .retry import TRANSIENT_HTTP_ERRORS, is_transient_status, with_retry

__all__ = [
    "AsyncContextManager",
    "BaseAsyncHttpClient",
    "DEFAULT_USER_AGENT",
    "cleanup_all_clients",
    "register_cleanup",
    "TRANSIENT_HTTP_ERRORS",
    "is_transient_status",
    "with_retry",
]
