"""Base async HTTP client with lazy initialization and a shutdown registry."""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from .async_context import AsyncContextManager

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; pdf-harvest/0.1; document research pipeline) "
    "AppleWebKit/537.36"
)

# ---------------------------------------------------------------------------
# Global Cleanup Registry
# ---------------------------------------------------------------------------

_cleanup_registry: list[tuple[str, Callable[[], Awaitable[None]]]] = []


def register_cleanup(name: str, closer: Callable[[], Awaitable[None]]) -> None:
    """Register a cleanup function to be called on shutdown."""
    _cleanup_registry.append((name, closer))


async def cleanup_all_clients() -> None:
    """Close all registered HTTP clients (idempotent)."""
    for name, closer in _cleanup_registry:
        try:
            await closer()
        except Exception as e:
            logger.warning(f"Error closing {name} client: {e}")


class BaseAsyncHttpClient(AsyncContextManager):
    """
    Base async HTTP client with lazy initialization.

    Provides:
    - Lazy httpx.AsyncClient creation with shared default headers
    - Injection of a pre-built client (tests pass one with MockTransport)
    - Context manager support and close()

    An injected client is owned by the caller and is never closed here.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        follow_redirects: bool = True,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.headers = {"User-Agent": DEFAULT_USER_AGENT, **(headers or {})}
        self.follow_redirects = follow_redirects
        self._client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None

    def _request_headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Default headers merged with per-request ones.

        Sent on every request so an injected client carries them too.
        """
        return {**self.headers, **(extra or {})}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            kwargs = {}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=self.follow_redirects,
                **kwargs,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
