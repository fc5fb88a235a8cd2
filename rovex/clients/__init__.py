"""Rovex resource clients."""

from rovex.clients.runs import ReviewRunsClient
from rovex.clients.threads import ThreadsClient

__all__ = [
    "ReviewRunsClient",
    "ThreadsClient",
]
