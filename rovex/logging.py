"""
Rovex logging utilities.

Provides configurable logging for backend HTTP traffic, review run
transitions and git invocations. Ensures no credentials or tokens are logged.
"""

import logging
import re
from typing import Any

# Create package-specific loggers
_root_logger = logging.getLogger("rovex")
_http_logger = logging.getLogger("rovex.http")
_runs_logger = logging.getLogger("rovex.runs")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Bearer tokens in headers
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE), r"\1[REDACTED]"),
    # Provider access tokens (GitHub classic/fine-grained)
    (re.compile(r"\b(gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b"), "[TOKEN_REDACTED]"),
    # OpenAI-style API keys
    (re.compile(r"\bsk-[A-Za-z0-9_-]{16,}\b"), "[API_KEY_REDACTED]"),
    # Secret/token patterns
    (re.compile(r"(secret|token|password|api_key|access_token)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"authorization", "secret", "token", "password", "api_key", "apikey"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    runs_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure Rovex logging.

    Args:
        level: Default log level for all Rovex loggers (default: INFO)
        http_level: Log level for backend request/response logging (default: same as level)
        runs_level: Log level for review run transitions (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from rovex.logging import configure_logging

        # Trace every event applied to the run list
        configure_logging(level=logging.INFO, runs_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)

    _runs_logger.setLevel(runs_level if runs_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a Rovex logger.

    Args:
        name: Logger name suffix (e.g., "http", "runs", "git"). If None, returns the root package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"rovex.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Replaces bearer tokens, provider tokens and API keys with redacted
    placeholders.

    Args:
        text: Text that may contain sensitive data

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Diff and review bodies are replaced by a size marker since they can be
    very large and may contain proprietary code.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Set of keys to mask (default: authorization, secret, token, password, api_key)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif key_lower in ("diff", "review") and isinstance(value, str):
            result[key] = f"[{len(value)} chars]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """
    Log an HTTP request at DEBUG level with sensitive data masked.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL or path
        params: Query parameters (optional)
        body: Request body (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(mask_sensitive_data(" | ".join(log_parts)))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
) -> None:
    """
    Log an HTTP response at DEBUG level.

    Args:
        status_code: HTTP status code
        url: Request URL or path
        elapsed_ms: Request duration in milliseconds (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _http_logger.debug(" | ".join(log_parts))


def log_run_transition(
    run_id: str,
    previous_status: str | None,
    status: str,
    source: str,
) -> None:
    """
    Log a review run status change at DEBUG level.

    Args:
        run_id: Review run identifier
        previous_status: Status before the update (None for a newly seen run)
        status: Status after the update
        source: What caused the change ("event", "poll", "start", "cancel")
    """
    if not _runs_logger.isEnabledFor(logging.DEBUG):
        return
    if previous_status == status:
        return

    _runs_logger.debug(
        "run %s: %s -> %s (%s)", run_id, previous_status or "<new>", status, source
    )


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_run_transition",
]
