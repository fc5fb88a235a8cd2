"""
A closable single-consumer channel of progress events.

The live subscription writes into the channel and the session drains it one
event at a time. Closing the channel ends iteration after the events already
queued; events sent after ``close`` are dropped.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by ``receive`` once the channel is closed and drained."""


class EventChannel(Generic[T]):
    """Unbounded FIFO channel with explicit close."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> bool:
        """
        Enqueue an item without waiting.

        Returns:
            False if the channel is closed and the item was dropped
        """
        if self._closed:
            return False
        self._queue.put_nowait(item)
        return True

    def close(self) -> None:
        """Close the channel; pending items are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def receive(self) -> T:
        """
        Wait for the next item.

        Raises:
            ChannelClosed: When the channel is closed and empty
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any other waiter
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed()
        return item  # type: ignore[return-value]

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.receive()
            except ChannelClosed:
                return
