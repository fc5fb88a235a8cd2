"""
Reconciliation of locally held review runs with the persisted run list.

The persisted list is the authoritative run history, but it is only
available by polling. Locally the client shows optimistic placeholders and
applies live progress events before the next poll lands. A poll issued just
before a run finished can therefore report it as still running; merging must
never let such a stale snapshot revert a run the client already saw finish.
"""

import time
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone

from rovex.logging import log_run_transition
from rovex.scope import create_full_review_scope
from rovex.status import (
    is_active_review_run_status,
    is_terminal_review_run_status,
    resolve_review_run_status_from_progress,
)
from rovex.types.runs import PersistedReviewRun, ReviewRun

OPTIMISTIC_RUN_PREFIX = "run-pending-"
DEFAULT_RUN_LABEL = "AI review run"


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def parse_timestamp_ms(raw: str | None) -> int | None:
    """
    Parse an ISO-8601 timestamp into epoch milliseconds.

    Naive timestamps are read as UTC. Unparseable input yields None.
    """
    if not raw:
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def is_optimistic_run_id(run_id: str) -> bool:
    """Return True for locally generated placeholder run ids."""
    return run_id.startswith(OPTIMISTIC_RUN_PREFIX)


def map_persisted_review_run(run: PersistedReviewRun, now: int | None = None) -> ReviewRun:
    """
    Convert a persisted run into the client-side representation.

    Args:
        run: Run as returned by the backend
        now: Clock override in epoch milliseconds (default: current time)

    Returns:
        ReviewRun whose status has been resolved against its progress log. A
        run resolved as terminal without a recorded end time gets ``now``.
    """
    current = now if now is not None else now_ms()
    resolved_status = resolve_review_run_status_from_progress(run.status, run.progress_events)
    ended_at = parse_timestamp_ms(run.ended_at)
    if ended_at is None and is_terminal_review_run_status(resolved_status):
        ended_at = current

    started_at = parse_timestamp_ms(run.started_at)
    if started_at is None:
        started_at = parse_timestamp_ms(run.created_at)
    if started_at is None:
        started_at = current

    return ReviewRun(
        id=run.run_id,
        status=resolved_status,
        scope=create_full_review_scope(),
        scope_label=(run.scope_label or "").strip() or DEFAULT_RUN_LABEL,
        started_at=started_at,
        ended_at=ended_at,
        model=run.model,
        review=run.review,
        diff_truncated=run.diff_truncated,
        error=run.error,
        progress_events=list(run.progress_events),
        chunks=list(run.chunks),
        findings=list(run.findings),
    )


def _merge_run_for_race_recovery(local_run: ReviewRun, persisted_run: ReviewRun) -> ReviewRun:
    # Local saw the run finish; the poll predates the terminal event.
    prefer_persisted_text = bool((persisted_run.review or "").strip())
    prefer_persisted_events = len(persisted_run.progress_events) >= len(local_run.progress_events)
    prefer_persisted_chunks = len(persisted_run.chunks) >= len(local_run.chunks)
    prefer_persisted_findings = len(persisted_run.findings) >= len(local_run.findings)

    return replace(
        persisted_run,
        status=local_run.status,
        ended_at=local_run.ended_at if local_run.ended_at is not None else persisted_run.ended_at,
        review=persisted_run.review if prefer_persisted_text else local_run.review,
        error=persisted_run.error if persisted_run.error is not None else local_run.error,
        progress_events=(
            persisted_run.progress_events if prefer_persisted_events else local_run.progress_events
        ),
        chunks=persisted_run.chunks if prefer_persisted_chunks else local_run.chunks,
        findings=persisted_run.findings if prefer_persisted_findings else local_run.findings,
    )


def merge_persisted_review_runs(
    local_runs: Sequence[ReviewRun],
    persisted_runs: Sequence[PersistedReviewRun],
    now: int | None = None,
) -> list[ReviewRun]:
    """
    Merge the local run list with a freshly fetched persisted run list.

    Persisted runs win, except when the local copy is terminal and the
    persisted copy is still active: then the local status and end time are
    kept and the richer side of each collection is used. Local runs missing
    from the persisted list survive only while active or optimistic.

    Args:
        local_runs: Runs currently held by the client
        persisted_runs: Runs returned by the backend, in server order
        now: Clock override in epoch milliseconds (default: current time)

    Returns:
        Surviving local-only runs followed by the merged persisted runs
    """
    local_by_id = {run.id: run for run in local_runs}

    merged_persisted: list[ReviewRun] = []
    for persisted in persisted_runs:
        mapped = map_persisted_review_run(persisted, now=now)
        local_run = local_by_id.get(mapped.id)
        if local_run is None:
            merged = mapped
        elif is_terminal_review_run_status(local_run.status) and is_active_review_run_status(mapped.status):
            merged = _merge_run_for_race_recovery(local_run, mapped)
        else:
            merged = mapped
        log_run_transition(
            merged.id, local_run.status if local_run else None, merged.status, "poll"
        )
        merged_persisted.append(merged)

    merged_ids = {run.id for run in merged_persisted}
    local_runs_to_keep = [
        run
        for run in local_runs
        if run.id not in merged_ids
        and (is_active_review_run_status(run.status) or is_optimistic_run_id(run.id))
    ]

    return [*local_runs_to_keep, *merged_persisted]


def has_active_review_runs(runs: Sequence[ReviewRun]) -> bool:
    """Return True if any run is queued or running."""
    return any(is_active_review_run_status(run.status) for run in runs)


__all__ = [
    "OPTIMISTIC_RUN_PREFIX",
    "DEFAULT_RUN_LABEL",
    "now_ms",
    "parse_timestamp_ms",
    "is_optimistic_run_id",
    "map_persisted_review_run",
    "merge_persisted_review_runs",
    "has_active_review_runs",
]
