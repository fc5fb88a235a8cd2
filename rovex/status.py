"""
Review run status machine.

Runs move through ``queued`` and ``running`` (active) into exactly one of
``completed``, ``completed_with_errors``, ``failed`` or ``canceled``
(terminal). Nothing leaves a terminal status.

Backend snapshots can report a stale ``running`` status after the last chunk
finished but before the terminal event was recorded, so the progress log is
consulted as the source of truth for completion.
"""

from collections.abc import Sequence

from rovex.types.runs import ProgressEvent

QUEUED = "queued"
RUNNING = "running"
COMPLETED = "completed"
COMPLETED_WITH_ERRORS = "completed_with_errors"
FAILED = "failed"
CANCELED = "canceled"

ACTIVE_STATUSES = frozenset({QUEUED, RUNNING})
TERMINAL_STATUSES = frozenset({COMPLETED, COMPLETED_WITH_ERRORS, FAILED, CANCELED})

# Progress event kinds that carry no status information of their own
DESCRIPTION_DELTA = "description-delta"
ERROR_EVENT_STATUSES = frozenset({"chunk-failed", "description-failed"})


def is_active_review_run_status(status: str) -> bool:
    """Return True for ``queued`` and ``running``."""
    return status in ACTIVE_STATUSES


def is_terminal_review_run_status(status: str) -> bool:
    """Return True for any status that is not active."""
    return not is_active_review_run_status(status)


def normalize_review_run_status(status: str | None) -> str:
    """
    Map a backend status string onto the closed run status set.

    Unknown values (including legacy strings such as ``"started"``) map to
    ``running`` so a new backend status never breaks the client.
    """
    if status in ACTIVE_STATUSES or status in TERMINAL_STATUSES:
        return status
    return RUNNING


def derive_terminal_status_from_progress_events(
    progress_events: Sequence[ProgressEvent],
) -> str | None:
    """
    Infer a terminal status from a progress log.

    Args:
        progress_events: Progress log, oldest first

    Returns:
        The newest terminal event status if one exists; otherwise
        ``completed``/``completed_with_errors`` when the newest meaningful event
        reports every chunk done; otherwise None
    """
    for event in reversed(progress_events):
        if event.status in TERMINAL_STATUSES:
            return event.status

    last_meaningful = next(
        (event for event in reversed(progress_events) if event.status != DESCRIPTION_DELTA),
        None,
    )
    if last_meaningful is None:
        return None
    if last_meaningful.total_chunks <= 0:
        return None
    if last_meaningful.completed_chunks < last_meaningful.total_chunks:
        return None

    had_errors = any(event.status in ERROR_EVENT_STATUSES for event in progress_events)
    return COMPLETED_WITH_ERRORS if had_errors else COMPLETED


def resolve_review_run_status_from_progress(
    status: str | None,
    progress_events: Sequence[ProgressEvent],
) -> str:
    """
    Resolve a run's effective status from its reported status and its log.

    A terminal status is returned unchanged; an active one is upgraded to the
    status derived from the progress log when the log shows the run finished.
    """
    normalized = normalize_review_run_status(status)
    if is_terminal_review_run_status(normalized):
        return normalized
    return derive_terminal_status_from_progress_events(progress_events) or normalized


__all__ = [
    "QUEUED",
    "RUNNING",
    "COMPLETED",
    "COMPLETED_WITH_ERRORS",
    "FAILED",
    "CANCELED",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "DESCRIPTION_DELTA",
    "is_active_review_run_status",
    "is_terminal_review_run_status",
    "normalize_review_run_status",
    "derive_terminal_status_from_progress_events",
    "resolve_review_run_status_from_progress",
]
