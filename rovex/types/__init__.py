"""Rovex type definitions.

This module exports all data model types used by the package.
"""

from rovex.types.diff import (
    CompareWorkspaceDiffResult,
    FileScope,
    FullScope,
    HunkScope,
    ParsedDiffFile,
    ParsedDiffHunk,
    ReviewScope,
    ScopedDiffResult,
)
from rovex.types.runs import (
    CancelReviewRunResult,
    PersistedReviewRun,
    ProgressEvent,
    ReviewChunk,
    ReviewFinding,
    ReviewRun,
    StartReviewRunInput,
    StartReviewRunResult,
)
from rovex.types.threads import (
    ReviewBranchSuggestions,
    ThreadMessage,
    WorkspaceBranch,
    WorkspaceBranches,
)

__all__ = [
    # Diff and scope types
    "ParsedDiffFile",
    "ParsedDiffHunk",
    "ScopedDiffResult",
    "ReviewScope",
    "FullScope",
    "FileScope",
    "HunkScope",
    "CompareWorkspaceDiffResult",
    # Run types
    "ReviewRun",
    "ReviewChunk",
    "ReviewFinding",
    "ProgressEvent",
    "PersistedReviewRun",
    "StartReviewRunInput",
    "StartReviewRunResult",
    "CancelReviewRunResult",
    # Thread and branch types
    "ThreadMessage",
    "WorkspaceBranch",
    "WorkspaceBranches",
    "ReviewBranchSuggestions",
]
