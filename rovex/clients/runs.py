"""Review runs resource client."""

from typing import TYPE_CHECKING

from rovex.payloads import (
    extract_list,
    parse_cancel_result,
    parse_persisted_runs,
    parse_start_result,
    start_input_to_body,
)
from rovex.types.runs import (
    CancelReviewRunResult,
    PersistedReviewRun,
    StartReviewRunInput,
    StartReviewRunResult,
)

if TYPE_CHECKING:
    from rovex.transport import HTTPTransport


class ReviewRunsClient:
    """Client for AI review run operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the review runs client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def start(self, run_input: StartReviewRunInput) -> StartReviewRunResult:
        """
        Queue a review run for a scoped diff.

        Args:
            run_input: Thread, workspace comparison and scoped diff to review

        Returns:
            StartReviewRunResult with the backend run id

        Raises:
            ValidationError: If the diff or thread is rejected
            NotFoundError: If the thread does not exist
        """
        response = self.transport.request(
            method="POST",
            path=f"/v1/threads/{run_input.thread_id}/review-runs",
            body=start_input_to_body(run_input),
        )
        return parse_start_result(response.get("data", {}))

    def cancel(self, run_id: str) -> CancelReviewRunResult:
        """
        Request cancellation of a queued or running review run.

        Args:
            run_id: The review run identifier

        Returns:
            CancelReviewRunResult; ``status == "canceled"`` when the run stopped
            immediately, otherwise the cancel is pending

        Raises:
            NotFoundError: If the run does not exist
        """
        response = self.transport.request(
            method="POST",
            path=f"/v1/review-runs/{run_id}/cancel",
        )
        return parse_cancel_result(response.get("data", {}))

    def list(self, thread_id: int) -> list[PersistedReviewRun]:
        """
        List persisted review runs of a thread.

        Args:
            thread_id: The review thread identifier

        Returns:
            List of PersistedReviewRun objects in server order
        """
        response = self.transport.request(
            method="GET",
            path=f"/v1/threads/{thread_id}/review-runs",
        )
        return parse_persisted_runs(extract_list(response, "runs"))
