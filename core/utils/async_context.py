"""Base class for async context managers."""


class AsyncContextManager:
    """Async context manager that calls ``close()`` on exit."""

    async def close(self) -> None:
        """Release resources. Override in subclass."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
