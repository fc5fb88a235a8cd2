"""Review run data models.

``ProgressEvent``, ``ReviewChunk`` and ``ReviewFinding`` are emitted by the
backend and never change afterwards, so they are frozen. ``ReviewRun`` is
updated by building a new instance with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field

from rovex.types.diff import FullScope, ReviewScope


@dataclass(frozen=True)
class ReviewFinding:
    """A single issue reported against a line of a diff chunk."""

    id: str
    file_path: str
    chunk_id: str
    chunk_index: int
    hunk_header: str
    side: str  # "additions" or "deletions"
    line_number: int
    title: str
    body: str
    severity: str  # "critical", "high", "medium", "low"
    confidence: float | None = None


@dataclass(frozen=True)
class ReviewChunk:
    """Review output for one chunk of the diff."""

    id: str
    file_path: str
    chunk_index: int
    hunk_header: str
    summary: str
    findings: tuple[ReviewFinding, ...] = ()


@dataclass(frozen=True)
class ProgressEvent:
    """One entry of a run's append-only progress log."""

    run_id: str | None
    thread_id: int
    status: str
    message: str = ""
    total_chunks: int = 0
    completed_chunks: int = 0
    chunk_id: str | None = None
    file_path: str | None = None
    chunk_index: int | None = None
    finding_count: int | None = None
    chunk: ReviewChunk | None = None
    finding: ReviewFinding | None = None


@dataclass
class ReviewRun:
    """Client-side view of one review run. Timestamps are epoch milliseconds."""

    id: str
    status: str  # "queued", "running", "completed", "completed_with_errors", "failed", "canceled"
    scope: ReviewScope = field(default_factory=FullScope)
    scope_label: str = "Full diff"
    started_at: int = 0
    ended_at: int | None = None
    model: str | None = None
    review: str | None = None
    diff_truncated: bool = False
    error: str | None = None
    progress_events: list[ProgressEvent] = field(default_factory=list)
    chunks: list[ReviewChunk] = field(default_factory=list)
    findings: list[ReviewFinding] = field(default_factory=list)


@dataclass
class PersistedReviewRun:
    """Review run as stored by the backend."""

    run_id: str
    thread_id: int
    status: str
    workspace: str = ""
    base_ref: str = ""
    merge_base: str = ""
    head: str = ""
    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0
    prompt: str | None = None
    scope_label: str | None = None
    total_chunks: int = 0
    completed_chunks: int = 0
    failed_chunks: int = 0
    finding_count: int = 0
    model: str | None = None
    review: str | None = None
    diff_chars_used: int = 0
    diff_chars_total: int = 0
    diff_truncated: bool = False
    error: str | None = None
    chunks: list[ReviewChunk] = field(default_factory=list)
    findings: list[ReviewFinding] = field(default_factory=list)
    progress_events: list[ProgressEvent] = field(default_factory=list)
    created_at: str | None = None
    started_at: str | None = None
    ended_at: str | None = None
    canceled_at: str | None = None


@dataclass
class StartReviewRunInput:
    """Request body for starting a review run."""

    thread_id: int
    workspace: str
    base_ref: str
    merge_base: str
    head: str
    files_changed: int
    insertions: int
    deletions: int
    diff: str
    prompt: str | None = None
    scope_label: str | None = None


@dataclass
class StartReviewRunResult:
    """Backend acknowledgement of a queued run."""

    run_id: str
    status: str
    created_at: str | None = None


@dataclass
class CancelReviewRunResult:
    """Backend answer to a cancel request."""

    run_id: str
    canceled: bool
    status: str
