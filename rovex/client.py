"""
Rovex main client.

Provides the synchronous interface to the review backend.
"""

import os
from typing import Any

from rovex.clients import ReviewRunsClient, ThreadsClient
from rovex.exceptions import ConfigurationError
from rovex.transport import HTTPTransport, RetryConfig

DEFAULT_TIMEOUT = 30.0


def read_env_config(default_timeout: float = DEFAULT_TIMEOUT) -> tuple[str, float]:
    """
    Read backend settings from the environment.

    Environment variables:
        ROVEX_BASE_URL: Base URL of the review backend (required)
        ROVEX_TIMEOUT: Request timeout in seconds (optional)

    Returns:
        Tuple of (base_url, timeout)

    Raises:
        ConfigurationError: If a variable is missing or invalid
    """
    base_url = os.environ.get("ROVEX_BASE_URL", "").strip()
    if not base_url:
        raise ConfigurationError("ROVEX_BASE_URL environment variable not set")

    raw_timeout = os.environ.get("ROVEX_TIMEOUT", "").strip()
    if not raw_timeout:
        return base_url, default_timeout
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError(
            f"Invalid ROVEX_TIMEOUT: {raw_timeout}. Must be a number of seconds"
        ) from None
    if timeout <= 0:
        raise ConfigurationError(f"Invalid ROVEX_TIMEOUT: {raw_timeout}. Must be positive")
    return base_url, timeout


class RovexClient:
    """
    Main client for the review backend.

    Aggregates the resource clients over one HTTP transport.

    Example:
        ```python
        from rovex import RovexClient

        with RovexClient(base_url="http://127.0.0.1:8787") as client:
            runs = client.runs.list(thread_id=1)
            messages = client.threads.list_messages(1)
        ```
    """

    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: HTTPTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL for API requests
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            transport: Pre-built transport (optional, mainly for tests)
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = transport or HTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.runs = ReviewRunsClient(self._transport)
        self.threads = ThreadsClient(self._transport)

    @classmethod
    def from_env(
        cls,
        retry_config: RetryConfig | None = None,
    ) -> "RovexClient":
        """
        Create a client from ``ROVEX_BASE_URL`` and ``ROVEX_TIMEOUT``.

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        base_url, timeout = read_env_config()
        return cls(base_url=base_url, timeout=timeout, retry_config=retry_config)

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "RovexClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
