"""
HTTP Transport for the Rovex backend.

Handles HTTP communication with automatic retry logic and error handling.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from rovex.exceptions import (
    ConflictError,
    NotFoundError,
    RateLimitedError,
    RovexError,
    ServerError,
    ValidationError,
)
from rovex.logging import log_http_request, log_http_response


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def get_backoff_time(config: RetryConfig, attempt: int, retry_after: str | None) -> float:
    """
    Calculate backoff time for retry.

    Uses exponential backoff with jitter, respecting Retry-After header
    if present.

    Args:
        config: Retry configuration
        attempt: Current attempt number (0-indexed)
        retry_after: Value of Retry-After header (if present)

    Returns:
        Time to wait in seconds
    """
    if retry_after and config.respect_retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass  # Fall through to exponential backoff

    # Exponential backoff: backoff_factor ^ attempt
    base_wait = config.backoff_factor ** attempt

    jitter_range = base_wait * config.jitter
    jitter = random.uniform(-jitter_range, jitter_range)
    wait_time = base_wait + jitter

    return min(wait_time, config.max_backoff)


def should_retry(config: RetryConfig, status_code: int, attempt: int) -> bool:
    """Determine if a request should be retried."""
    if attempt >= config.max_retries:
        return False

    return status_code in config.retry_on


def parse_error_response(response: httpx.Response) -> RovexError:
    """
    Parse an error response into a typed exception.

    Args:
        response: HTTP response with error status

    Returns:
        Appropriate RovexError subclass
    """
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    error = data.get("error") or {}
    code = error.get("code", "UNKNOWN_ERROR")
    message = error.get("message", f"HTTP {response.status_code}")
    request_id = (data.get("meta") or {}).get("requestId")

    status_code = response.status_code

    if status_code == 404:
        return NotFoundError(code, message, request_id)
    elif status_code == 409:
        return ConflictError(code, message, request_id)
    elif status_code == 429:
        retry_after_str = response.headers.get("Retry-After", "60")
        try:
            retry_after = int(retry_after_str)
        except ValueError:
            retry_after = 60
        return RateLimitedError(code, message, retry_after, request_id)
    elif status_code >= 500:
        return ServerError(code, message, request_id)
    else:
        return ValidationError(code, message, request_id)


class HTTPTransport:
    """
    HTTP transport layer with retry logic.

    Handles:
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "http://127.0.0.1:8787")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=http_transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
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
            path: API path (e.g., "/v1/threads/1/review-runs")
            params: Query parameters
            body: Request body (for POST/PUT)

        Returns:
            Parsed JSON response

        Raises:
            RovexError: On API errors
        """
        def make_request() -> httpx.Response:
            log_http_request(method, path, params=params, body=body)
            started = time.monotonic()
            response = self._client.request(method, path, params=params, json=body)
            log_http_response(response.status_code, path, (time.monotonic() - started) * 1000)
            return response

        return self._execute_with_retry(make_request)

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> dict[str, Any]:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            RovexError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = request_fn()

                if response.status_code < 400:
                    return response.json()

                error = parse_error_response(response)

                if not should_retry(self.retry_config, response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                time.sleep(get_backoff_time(self.retry_config, attempt, retry_after))

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                time.sleep(get_backoff_time(self.retry_config, attempt, None))

        if last_error:
            if isinstance(last_error, RovexError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")
