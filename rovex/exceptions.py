"""Rovex exception classes.

Only the transport, configuration and git layers raise these. The diff,
scope, status, sync and reducer modules are total and report problems as
data (``None`` results, ``ReviewRun.error``) instead.
"""


class RovexError(Exception):
    """Base exception for all Rovex errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(RovexError):
    """Raised when client configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class NotFoundError(RovexError):
    """Raised when a thread or review run is not found."""

    pass


class ConflictError(RovexError):
    """Raised on conflicts (run already finished, duplicate start, etc.)."""

    pass


class RateLimitedError(RovexError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(RovexError):
    """Raised on validation errors."""

    pass


class ServerError(RovexError):
    """Raised on server errors (5xx) and exhausted connection retries."""

    pass


class GitError(RovexError):
    """Raised when a git command against a workspace fails."""

    def __init__(self, message: str, command: list[str] | None = None) -> None:
        super().__init__("GIT_ERROR", message)
        self.command = command or []
