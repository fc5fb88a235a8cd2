"""
Streaming progress event reducer.

Applies one progress event at a time to the run list. Every function here
returns a new list and leaves its input untouched, so a caller can compute
the next state and assign it in a single step.
"""

import secrets
from collections.abc import Sequence
from dataclasses import replace

from rovex.logging import log_run_transition
from rovex.scope import create_full_review_scope, get_review_scope_label
from rovex.status import (
    CANCELED,
    DESCRIPTION_DELTA,
    FAILED,
    QUEUED,
    RUNNING,
    TERMINAL_STATUSES,
    is_active_review_run_status,
    is_terminal_review_run_status,
    resolve_review_run_status_from_progress,
)
from rovex.sync import DEFAULT_RUN_LABEL, OPTIMISTIC_RUN_PREFIX, now_ms, parse_timestamp_ms
from rovex.types.diff import ReviewScope
from rovex.types.runs import (
    CancelReviewRunResult,
    ProgressEvent,
    ReviewChunk,
    ReviewFinding,
    ReviewRun,
    StartReviewRunResult,
)

MAX_PROGRESS_EVENTS = 160

DESCRIPTION_START = "description-start"
DESCRIPTION_FAILED = "description-failed"
STARTED = "started"


def _upsert_chunk(chunks: list[ReviewChunk], chunk: ReviewChunk) -> list[ReviewChunk]:
    next_chunks = [candidate for candidate in chunks if candidate.id != chunk.id]
    next_chunks.append(chunk)
    next_chunks.sort(key=lambda candidate: (candidate.file_path, candidate.chunk_index))
    return next_chunks


def _insert_finding(findings: list[ReviewFinding], finding: ReviewFinding) -> list[ReviewFinding]:
    if any(candidate.id == finding.id for candidate in findings):
        return findings
    return [*findings, finding]


def _resolve_target_index(
    runs: Sequence[ReviewRun], run_id: str, fallback_run_id: str | None
) -> int:
    if run_id:
        return next((index for index, run in enumerate(runs) if run.id == run_id), -1)
    if fallback_run_id:
        index = next((i for i, run in enumerate(runs) if run.id == fallback_run_id), -1)
        if index >= 0:
            return index
    return next(
        (index for index, run in enumerate(runs) if is_active_review_run_status(run.status)), -1
    )


def _apply_status(run: ReviewRun, event: ProgressEvent, now: int) -> ReviewRun:
    status = event.status
    if status == QUEUED:
        if is_active_review_run_status(run.status):
            return replace(run, status=QUEUED)
        return run
    if status == STARTED:
        if is_active_review_run_status(run.status):
            return replace(run, status=RUNNING, error=None)
        return run
    if status in TERMINAL_STATUSES:
        if is_terminal_review_run_status(run.status):
            return run
        error = run.error
        if status == FAILED and error is None:
            error = event.message or None
        return replace(
            run,
            status=status,
            ended_at=run.ended_at if run.ended_at is not None else now,
            error=error,
        )
    if status == DESCRIPTION_FAILED:
        if run.error is None:
            return replace(run, error=event.message or None)
    return run


def apply_progress_event_to_run(run: ReviewRun, event: ProgressEvent, now: int) -> ReviewRun:
    """Apply one progress event to a single run."""
    next_run = run

    if event.status != DESCRIPTION_DELTA:
        progress_events = [*run.progress_events, event][-MAX_PROGRESS_EVENTS:]
        next_run = replace(next_run, progress_events=progress_events)

    if event.status == DESCRIPTION_START:
        next_run = replace(next_run, review="")
    elif event.status == DESCRIPTION_DELTA:
        next_run = replace(next_run, review=(next_run.review or "") + event.message)

    if event.chunk is not None:
        next_run = replace(next_run, chunks=_upsert_chunk(next_run.chunks, event.chunk))

    if event.finding is not None:
        findings = _insert_finding(next_run.findings, event.finding)
        if findings is not next_run.findings:
            next_run = replace(next_run, findings=findings)

    next_run = _apply_status(next_run, event, now)

    resolved = resolve_review_run_status_from_progress(next_run.status, next_run.progress_events)
    if resolved != next_run.status:
        next_run = replace(next_run, status=resolved)
    if is_terminal_review_run_status(next_run.status) and next_run.ended_at is None:
        next_run = replace(next_run, ended_at=now)

    return next_run


def apply_progress_event(
    runs: Sequence[ReviewRun],
    event: ProgressEvent,
    now: int | None = None,
    fallback_run_id: str | None = None,
) -> list[ReviewRun]:
    """
    Apply one progress event to the run list.

    The target run is looked up by ``event.run_id``; an unknown id creates a
    new queued run at the front of the list. Events without a run id go to
    ``fallback_run_id`` (usually the selected run) or the first active run,
    and are dropped when neither exists.

    Args:
        runs: Current run list
        event: Incoming progress event
        now: Clock override in epoch milliseconds (default: current time)
        fallback_run_id: Run to target when the event has no run id

    Returns:
        New run list with the event applied

    Example:
        ```python
        runs = apply_progress_event(runs, event)
        if is_terminal_transition(previous, runs, event.run_id):
            await session.refresh()
        ```
    """
    current = now if now is not None else now_ms()
    run_id = (event.run_id or "").strip()
    next_runs = list(runs)

    index = _resolve_target_index(next_runs, run_id, fallback_run_id)
    if index < 0:
        if not run_id:
            return next_runs
        next_runs.insert(
            0,
            ReviewRun(
                id=run_id,
                status=QUEUED,
                scope=create_full_review_scope(),
                scope_label=DEFAULT_RUN_LABEL,
                started_at=current,
            ),
        )
        log_run_transition(run_id, None, QUEUED, "event")
        index = 0

    run = next_runs[index]
    updated = apply_progress_event_to_run(run, event, current)
    log_run_transition(updated.id, run.status, updated.status, "event")
    next_runs[index] = updated
    return next_runs


def find_run(runs: Sequence[ReviewRun], run_id: str | None) -> ReviewRun | None:
    """Find a run by id."""
    if not run_id:
        return None
    return next((run for run in runs if run.id == run_id), None)


def is_terminal_transition(
    before: Sequence[ReviewRun], after: Sequence[ReviewRun], run_id: str | None = None
) -> bool:
    """
    Return True when a run went from absent/active to terminal.

    With ``run_id`` only that run is checked; without it, any run counts.
    """
    previous_by_id = {run.id: run for run in before}
    for updated in after:
        if run_id and updated.id != run_id:
            continue
        if not is_terminal_review_run_status(updated.status):
            continue
        previous = previous_by_id.get(updated.id)
        if previous is None or is_active_review_run_status(previous.status):
            return True
    return False


def generate_optimistic_run_id(now: int | None = None) -> str:
    """Generate a placeholder id such as ``run-pending-1718000000000-a1b2c3``."""
    current = now if now is not None else now_ms()
    return f"{OPTIMISTIC_RUN_PREFIX}{current}-{secrets.token_hex(3)}"


def create_optimistic_review_run(scope: ReviewScope, now: int | None = None) -> ReviewRun:
    """Create the queued placeholder run shown while a start request is in flight."""
    current = now if now is not None else now_ms()
    return ReviewRun(
        id=generate_optimistic_run_id(current),
        status=QUEUED,
        scope=scope,
        scope_label=get_review_scope_label(scope),
        started_at=current,
    )


def acknowledge_optimistic_run(
    runs: Sequence[ReviewRun], placeholder_id: str, result: StartReviewRunResult
) -> list[ReviewRun]:
    """
    Swap a placeholder id for the backend run id once the start is acknowledged.

    If live events for the backend id arrived before the acknowledgement, that
    run already exists; it takes over the placeholder's scope and the
    placeholder is dropped.
    """
    placeholder = find_run(runs, placeholder_id)
    if placeholder is not None and any(
        run.id == result.run_id for run in runs if run.id != placeholder_id
    ):
        return [
            replace(run, scope=placeholder.scope, scope_label=placeholder.scope_label)
            if run.id == result.run_id
            else run
            for run in runs
            if run.id != placeholder_id
        ]

    next_runs: list[ReviewRun] = []
    for run in runs:
        if run.id != placeholder_id:
            next_runs.append(run)
            continue
        started_at = parse_timestamp_ms(result.created_at) or run.started_at
        status = run.status
        if is_active_review_run_status(status):
            status = QUEUED if result.status == QUEUED else RUNNING
        next_runs.append(replace(run, id=result.run_id, status=status, started_at=started_at))
        log_run_transition(result.run_id, run.status, status, "start")
    return next_runs


def fail_optimistic_run(
    runs: Sequence[ReviewRun], run_id: str, message: str, now: int | None = None
) -> list[ReviewRun]:
    """Mark a run as failed after its start request was rejected."""
    current = now if now is not None else now_ms()
    return [
        replace(run, status=FAILED, ended_at=current, error=message) if run.id == run_id else run
        for run in runs
    ]


def mark_run_canceled(
    runs: Sequence[ReviewRun],
    run_id: str,
    result: CancelReviewRunResult,
    now: int | None = None,
) -> list[ReviewRun]:
    """Apply a cancel acknowledgement; only a ``canceled`` answer ends the run."""
    if result.status != CANCELED:
        return list(runs)
    current = now if now is not None else now_ms()
    next_runs: list[ReviewRun] = []
    for run in runs:
        if run.id == run_id and is_active_review_run_status(run.status):
            log_run_transition(run.id, run.status, CANCELED, "cancel")
            run = replace(run, status=CANCELED, ended_at=current)
        next_runs.append(run)
    return next_runs


__all__ = [
    "MAX_PROGRESS_EVENTS",
    "apply_progress_event",
    "apply_progress_event_to_run",
    "find_run",
    "is_terminal_transition",
    "generate_optimistic_run_id",
    "create_optimistic_review_run",
    "acknowledge_optimistic_run",
    "fail_optimistic_run",
    "mark_run_canceled",
]
