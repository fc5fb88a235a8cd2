"""Async review runs resource client."""

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from rovex.logging import get_logger
from rovex.payloads import (
    extract_list,
    parse_cancel_result,
    parse_persisted_runs,
    parse_progress_event,
    parse_start_result,
    start_input_to_body,
)
from rovex.types.runs import (
    CancelReviewRunResult,
    PersistedReviewRun,
    ProgressEvent,
    StartReviewRunInput,
    StartReviewRunResult,
)

if TYPE_CHECKING:
    from rovex.async_transport import AsyncHTTPTransport

logger = get_logger("http")


class AsyncReviewRunsClient:
    """Async client for AI review run operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async review runs client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def start(self, run_input: StartReviewRunInput) -> StartReviewRunResult:
        """
        Queue a review run for a scoped diff.

        Args:
            run_input: Thread, workspace comparison and scoped diff to review

        Returns:
            StartReviewRunResult with the backend run id
        """
        response = await self.transport.request(
            method="POST",
            path=f"/v1/threads/{run_input.thread_id}/review-runs",
            body=start_input_to_body(run_input),
        )
        return parse_start_result(response.get("data", {}))

    async def cancel(self, run_id: str) -> CancelReviewRunResult:
        """
        Request cancellation of a queued or running review run.

        Args:
            run_id: The review run identifier

        Returns:
            CancelReviewRunResult
        """
        response = await self.transport.request(
            method="POST",
            path=f"/v1/review-runs/{run_id}/cancel",
        )
        return parse_cancel_result(response.get("data", {}))

    async def list(self, thread_id: int) -> list[PersistedReviewRun]:
        """
        List persisted review runs of a thread.

        Args:
            thread_id: The review thread identifier

        Returns:
            List of PersistedReviewRun objects in server order
        """
        response = await self.transport.request(
            method="GET",
            path=f"/v1/threads/{thread_id}/review-runs",
        )
        return parse_persisted_runs(extract_list(response, "runs"))

    async def subscribe(self, thread_id: int) -> AsyncIterator[ProgressEvent]:
        """
        Subscribe to live progress events of a thread.

        Events arrive in transport order. Events that do not match the
        progress event shape are logged and skipped. Closing the iterator
        (``aclose``) or cancelling the consuming task ends the subscription.

        Args:
            thread_id: The review thread identifier

        Yields:
            ProgressEvent objects as they are emitted
        """
        async for payload in self.transport.stream_json_lines(
            f"/v1/threads/{thread_id}/review-events"
        ):
            try:
                event = parse_progress_event(payload)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed progress event for thread %s: %r", thread_id, e)
                continue
            yield event
