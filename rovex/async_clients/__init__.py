"""Rovex async resource clients."""

from rovex.async_clients.runs import AsyncReviewRunsClient
from rovex.async_clients.threads import AsyncThreadsClient

__all__ = [
    "AsyncReviewRunsClient",
    "AsyncThreadsClient",
]
