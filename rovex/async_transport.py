"""
Async HTTP Transport for the Rovex backend.

Handles async HTTP communication with automatic retry logic, error handling
and newline-delimited JSON streaming using the httpx async client.
"""

import asyncio
import json
import time
from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any

import httpx

from rovex.exceptions import RovexError, ServerError
from rovex.logging import get_logger, log_http_request, log_http_response
from rovex.transport import RetryConfig, get_backoff_time, parse_error_response, should_retry

logger = get_logger("http")


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with retry logic.

    Handles:
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions
    - Streaming of newline-delimited JSON objects
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "http://127.0.0.1:8787")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Optional httpx async transport (e.g. ``httpx.MockTransport`` in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method
            path: API path
            params: Query parameters
            body: Request body (for POST/PUT)

        Returns:
            Parsed JSON response

        Raises:
            RovexError: On API errors
        """
        async def make_request() -> httpx.Response:
            log_http_request(method, path, params=params, body=body)
            started = time.monotonic()
            response = await self._client.request(method, path, params=params, json=body)
            log_http_response(response.status_code, path, (time.monotonic() - started) * 1000)
            return response

        return await self._execute_with_retry(make_request)

    async def stream_json_lines(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Stream newline-delimited JSON objects from a long-lived GET request.

        Blank lines are keep-alives and are skipped. Lines that are not JSON
        objects are logged and skipped. The stream is not retried; callers
        resubscribe and rely on polling to catch up.

        Args:
            path: API path
            params: Query parameters

        Yields:
            One decoded JSON object per line

        Raises:
            RovexError: If the stream cannot be opened
        """
        log_http_request("GET", path, params=params)
        try:
            async with self._client.stream(
                "GET", path, params=params, timeout=httpx.Timeout(self.timeout, read=None)
            ) as response:
                log_http_response(response.status_code, path)
                if response.status_code >= 400:
                    await response.aread()
                    raise parse_error_response(response)

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        payload = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Skipping malformed stream line from %s: %.120s", path, line)
                        continue
                    if not isinstance(payload, dict):
                        logger.warning("Skipping non-object stream line from %s", path)
                        continue
                    yield payload
        except httpx.RequestError as e:
            raise ServerError("CONNECTION_ERROR", str(e)) from e

    async def _execute_with_retry(
        self, request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]]
    ) -> dict[str, Any]:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Async function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            RovexError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await request_fn()

                if response.status_code < 400:
                    return response.json()

                error = parse_error_response(response)

                if not should_retry(self.retry_config, response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                await asyncio.sleep(get_backoff_time(self.retry_config, attempt, retry_after))

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                await asyncio.sleep(get_backoff_time(self.retry_config, attempt, None))

        if last_error:
            if isinstance(last_error, RovexError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")
