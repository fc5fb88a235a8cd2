"""
Parsing of backend JSON payloads into Rovex data models.

The backend speaks camelCase; older builds and the persisted store use
snake_case, so every lookup accepts both spellings.
"""

from datetime import datetime, timezone
from typing import Any

from rovex.logging import get_logger
from rovex.types.runs import (
    CancelReviewRunResult,
    PersistedReviewRun,
    ProgressEvent,
    ReviewChunk,
    ReviewFinding,
    StartReviewRunInput,
    StartReviewRunResult,
)
from rovex.types.threads import ThreadMessage

logger = get_logger("http")


def _get(data: dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    value = data.get(camel)
    if value is None:
        value = data.get(snake)
    return default if value is None else value


def _parse_datetime(raw: str | None) -> datetime:
    if not raw:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def parse_finding(data: dict[str, Any]) -> ReviewFinding:
    """Parse a finding payload."""
    confidence = data.get("confidence")
    return ReviewFinding(
        id=str(data["id"]),
        file_path=_get(data, "filePath", "file_path", ""),
        chunk_id=_get(data, "chunkId", "chunk_id", ""),
        chunk_index=int(_get(data, "chunkIndex", "chunk_index", 0)),
        hunk_header=_get(data, "hunkHeader", "hunk_header", ""),
        side=data.get("side") or "additions",
        line_number=int(_get(data, "lineNumber", "line_number", 0)),
        title=data.get("title") or "",
        body=data.get("body") or "",
        severity=data.get("severity") or "medium",
        confidence=float(confidence) if confidence is not None else None,
    )


def parse_chunk(data: dict[str, Any]) -> ReviewChunk:
    """Parse a chunk payload together with its nested findings."""
    return ReviewChunk(
        id=str(data["id"]),
        file_path=_get(data, "filePath", "file_path", ""),
        chunk_index=int(_get(data, "chunkIndex", "chunk_index", 0)),
        hunk_header=_get(data, "hunkHeader", "hunk_header", ""),
        summary=data.get("summary") or "",
        findings=tuple(parse_finding(item) for item in data.get("findings") or []),
    )


def parse_progress_event(data: dict[str, Any]) -> ProgressEvent:
    """
    Parse a progress event payload.

    Args:
        data: Event object from the live stream or a persisted run

    Returns:
        ProgressEvent with nested chunk/finding parsed when present
    """
    chunk = data.get("chunk")
    finding = data.get("finding")
    chunk_index = _get(data, "chunkIndex", "chunk_index")
    finding_count = _get(data, "findingCount", "finding_count")
    return ProgressEvent(
        run_id=_get(data, "runId", "run_id"),
        thread_id=int(_get(data, "threadId", "thread_id", 0)),
        status=data.get("status") or "",
        message=data.get("message") or "",
        total_chunks=int(_get(data, "totalChunks", "total_chunks", 0)),
        completed_chunks=int(_get(data, "completedChunks", "completed_chunks", 0)),
        chunk_id=_get(data, "chunkId", "chunk_id"),
        file_path=_get(data, "filePath", "file_path"),
        chunk_index=int(chunk_index) if chunk_index is not None else None,
        finding_count=int(finding_count) if finding_count is not None else None,
        chunk=parse_chunk(chunk) if chunk else None,
        finding=parse_finding(finding) if finding else None,
    )


def parse_persisted_run(data: dict[str, Any]) -> PersistedReviewRun:
    """
    Parse a persisted review run payload.

    Raises:
        ValueError: If the payload carries no run id
    """
    run_id = str(_get(data, "runId", "run_id", "")).strip()
    if not run_id:
        raise ValueError("persisted review run has no run id")
    return PersistedReviewRun(
        run_id=run_id,
        thread_id=int(_get(data, "threadId", "thread_id", 0)),
        status=data.get("status") or "",
        workspace=data.get("workspace") or "",
        base_ref=_get(data, "baseRef", "base_ref", ""),
        merge_base=_get(data, "mergeBase", "merge_base", ""),
        head=data.get("head") or "",
        files_changed=int(_get(data, "filesChanged", "files_changed", 0)),
        insertions=int(data.get("insertions") or 0),
        deletions=int(data.get("deletions") or 0),
        prompt=data.get("prompt"),
        scope_label=_get(data, "scopeLabel", "scope_label"),
        total_chunks=int(_get(data, "totalChunks", "total_chunks", 0)),
        completed_chunks=int(_get(data, "completedChunks", "completed_chunks", 0)),
        failed_chunks=int(_get(data, "failedChunks", "failed_chunks", 0)),
        finding_count=int(_get(data, "findingCount", "finding_count", 0)),
        model=data.get("model"),
        review=data.get("review"),
        diff_chars_used=int(_get(data, "diffCharsUsed", "diff_chars_used", 0)),
        diff_chars_total=int(_get(data, "diffCharsTotal", "diff_chars_total", 0)),
        diff_truncated=bool(_get(data, "diffTruncated", "diff_truncated", False)),
        error=data.get("error"),
        chunks=[parse_chunk(item) for item in data.get("chunks") or []],
        findings=[parse_finding(item) for item in data.get("findings") or []],
        progress_events=[
            parse_progress_event(item)
            for item in _get(data, "progressEvents", "progress_events", [])
        ],
        created_at=_get(data, "createdAt", "created_at"),
        started_at=_get(data, "startedAt", "started_at"),
        ended_at=_get(data, "endedAt", "ended_at"),
        canceled_at=_get(data, "canceledAt", "canceled_at"),
    )


def parse_persisted_runs(items: list[dict[str, Any]]) -> list[PersistedReviewRun]:
    """Parse a persisted run list, skipping entries that cannot identify a run."""
    runs: list[PersistedReviewRun] = []
    for item in items:
        try:
            runs.append(parse_persisted_run(item))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed persisted review run: %s", e)
    return runs


def parse_start_result(data: dict[str, Any]) -> StartReviewRunResult:
    """Parse the acknowledgement of a start request (``data.run`` or ``data``)."""
    run = data.get("run") or data
    return StartReviewRunResult(
        run_id=str(_get(run, "runId", "run_id")),
        status=run.get("status") or "queued",
        created_at=_get(run, "createdAt", "created_at"),
    )


def parse_cancel_result(data: dict[str, Any]) -> CancelReviewRunResult:
    """Parse the answer to a cancel request."""
    return CancelReviewRunResult(
        run_id=str(_get(data, "runId", "run_id", "")),
        canceled=bool(data.get("canceled", False)),
        status=data.get("status") or "",
    )


def parse_thread_message(data: dict[str, Any]) -> ThreadMessage:
    """Parse a thread message payload."""
    return ThreadMessage(
        id=int(data["id"]),
        thread_id=int(_get(data, "threadId", "thread_id", 0)),
        role=data.get("role") or "assistant",
        content=data.get("content") or "",
        created_at=_parse_datetime(_get(data, "createdAt", "created_at")),
    )


def start_input_to_body(run_input: StartReviewRunInput) -> dict[str, Any]:
    """Serialize a start request into the camelCase body the backend expects."""
    return {
        "threadId": run_input.thread_id,
        "workspace": run_input.workspace,
        "baseRef": run_input.base_ref,
        "mergeBase": run_input.merge_base,
        "head": run_input.head,
        "filesChanged": run_input.files_changed,
        "insertions": run_input.insertions,
        "deletions": run_input.deletions,
        "diff": run_input.diff,
        "prompt": run_input.prompt,
        "scopeLabel": run_input.scope_label,
    }


def extract_list(response: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Extract a list from ``data`` whether it is a bare list or ``{key: [...]}``."""
    data = response.get("data", {})
    if isinstance(data, list):
        return data
    return data.get(key, []) or []


__all__ = [
    "parse_finding",
    "parse_chunk",
    "parse_progress_event",
    "parse_persisted_run",
    "parse_persisted_runs",
    "parse_start_result",
    "parse_cancel_result",
    "parse_thread_message",
    "start_input_to_body",
    "extract_list",
]
