"""Rovex - client-side review run engine for an AI code review assistant."""

from rovex.async_client import AsyncRovexClient
from rovex.branches import (
    build_fallback_review_branch_suggestions,
    build_review_branch_suggestions_from_workspace_branches,
    dedupe_ref_targets,
)
from rovex.channel import ChannelClosed, EventChannel
from rovex.client import RovexClient
from rovex.exceptions import (
    ConfigurationError,
    ConflictError,
    GitError,
    NotFoundError,
    RateLimitedError,
    RovexError,
    ServerError,
    ValidationError,
)
from rovex.git import WorkspaceGit
from rovex.logging import configure_logging, get_logger
from rovex.patch import normalize_diff_path, parse_patch_files
from rovex.reducer import (
    MAX_PROGRESS_EVENTS,
    acknowledge_optimistic_run,
    apply_progress_event,
    create_optimistic_review_run,
    fail_optimistic_run,
    is_terminal_transition,
    mark_run_canceled,
)
from rovex.scope import (
    build_scoped_diff,
    create_full_review_scope,
    get_review_scope_context,
    get_review_scope_label,
    resolve_scope_for_patch,
    scope_exists_in_patch,
    summarize_patch_stats,
)
from rovex.session import ReviewSession
from rovex.status import (
    derive_terminal_status_from_progress_events,
    is_active_review_run_status,
    is_terminal_review_run_status,
    normalize_review_run_status,
    resolve_review_run_status_from_progress,
)
from rovex.sync import (
    has_active_review_runs,
    map_persisted_review_run,
    merge_persisted_review_runs,
)
from rovex.text import format_review_message
from rovex.transport import HTTPTransport, RetryConfig
from rovex.types import (
    CompareWorkspaceDiffResult,
    FileScope,
    FullScope,
    HunkScope,
    ParsedDiffFile,
    ParsedDiffHunk,
    PersistedReviewRun,
    ProgressEvent,
    ReviewChunk,
    ReviewFinding,
    ReviewRun,
    ReviewScope,
    ScopedDiffResult,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Clients
    "RovexClient",
    "AsyncRovexClient",
    "ReviewSession",
    # Git Helper
    "WorkspaceGit",
    # Diff and scope
    "parse_patch_files",
    "normalize_diff_path",
    "scope_exists_in_patch",
    "resolve_scope_for_patch",
    "build_scoped_diff",
    "create_full_review_scope",
    "get_review_scope_label",
    "get_review_scope_context",
    "summarize_patch_stats",
    # Run status and reconciliation
    "is_active_review_run_status",
    "is_terminal_review_run_status",
    "normalize_review_run_status",
    "derive_terminal_status_from_progress_events",
    "resolve_review_run_status_from_progress",
    "map_persisted_review_run",
    "merge_persisted_review_runs",
    "has_active_review_runs",
    # Event reducer
    "MAX_PROGRESS_EVENTS",
    "apply_progress_event",
    "is_terminal_transition",
    "create_optimistic_review_run",
    "acknowledge_optimistic_run",
    "fail_optimistic_run",
    "mark_run_canceled",
    "EventChannel",
    "ChannelClosed",
    # Branches and text
    "dedupe_ref_targets",
    "build_fallback_review_branch_suggestions",
    "build_review_branch_suggestions_from_workspace_branches",
    "format_review_message",
    # Exceptions
    "RovexError",
    "ConfigurationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "GitError",
    # Types
    "ParsedDiffFile",
    "ParsedDiffHunk",
    "ScopedDiffResult",
    "ReviewScope",
    "FullScope",
    "FileScope",
    "HunkScope",
    "CompareWorkspaceDiffResult",
    "ReviewRun",
    "ReviewChunk",
    "ReviewFinding",
    "ProgressEvent",
    "PersistedReviewRun",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
