"""
Rovex async client.

Provides the async interface to the review backend, including the live
progress event subscription.
"""

from typing import Any

from rovex.async_clients import AsyncReviewRunsClient, AsyncThreadsClient
from rovex.async_transport import AsyncHTTPTransport
from rovex.client import DEFAULT_TIMEOUT, read_env_config
from rovex.transport import RetryConfig


class AsyncRovexClient:
    """
    Async client for the review backend.

    Example:
        ```python
        import asyncio
        from rovex import AsyncRovexClient

        async def main():
            async with AsyncRovexClient(base_url="http://127.0.0.1:8787") as client:
                async for event in client.runs.subscribe(thread_id=1):
                    print(event.status, event.message)

        asyncio.run(main())
        ```
    """

    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: AsyncHTTPTransport | None = None,
    ) -> None:
        """
        Initialize the async client.

        Args:
            base_url: Base URL for API requests
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            transport: Pre-built transport (optional, mainly for tests)
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = transport or AsyncHTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.runs = AsyncReviewRunsClient(self._transport)
        self.threads = AsyncThreadsClient(self._transport)

    @classmethod
    def from_env(
        cls,
        retry_config: RetryConfig | None = None,
    ) -> "AsyncRovexClient":
        """
        Create an async client from ``ROVEX_BASE_URL`` and ``ROVEX_TIMEOUT``.

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        base_url, timeout = read_env_config()
        return cls(base_url=base_url, timeout=timeout, retry_config=retry_config)

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncRovexClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
