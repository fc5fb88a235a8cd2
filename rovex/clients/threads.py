"""Threads resource client."""

from typing import TYPE_CHECKING

from rovex.payloads import extract_list, parse_thread_message
from rovex.types.threads import ThreadMessage

if TYPE_CHECKING:
    from rovex.transport import HTTPTransport


class ThreadsClient:
    """Client for review thread operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def list_messages(self, thread_id: int, limit: int | None = None) -> list[ThreadMessage]:
        """
        List the messages of a review thread.

        Args:
            thread_id: The review thread identifier
            limit: Optional maximum number of messages

        Returns:
            List of ThreadMessage objects, oldest first
        """
        params = {"limit": limit} if limit is not None else None
        response = self.transport.request(
            method="GET",
            path=f"/v1/threads/{thread_id}/messages",
            params=params,
        )
        return [parse_thread_message(message) for message in extract_list(response, "messages")]
