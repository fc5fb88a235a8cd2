"""
Pytest fixtures and factories for Rovex testing.

Provides common fixtures for testing code built on the review engine.
"""

from collections.abc import Generator
from typing import Any

import pytest

from rovex.scope import summarize_patch_stats
from rovex.testing.mock import MockAsyncRovexClient
from rovex.types.diff import CompareWorkspaceDiffResult, FullScope
from rovex.types.runs import (
    PersistedReviewRun,
    ProgressEvent,
    ReviewChunk,
    ReviewFinding,
    ReviewRun,
)

SAMPLE_DIFF = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "index 1111111..2222222 100644",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -1,4 +1,5 @@",
        " import os",
        "-import sys",
        "+import sys, json",
        "+import logging",
        " ",
        " def main():",
        "@@ -20,3 +21,3 @@ def main():",
        "-    return 0",
        "+    return run()",
        " ",
        "diff --git a/README.md b/README.md",
        "index 3333333..4444444 100644",
        "--- a/README.md",
        "+++ b/README.md",
        "@@ -1,2 +1,2 @@",
        "-# Old title",
        "+# New title",
        " Some text",
        "diff --git a/old.txt b/old.txt",
        "deleted file mode 100644",
        "index 5555555..0000000",
        "--- a/old.txt",
        "+++ /dev/null",
        "@@ -1,2 +0,0 @@",
        "-line one",
        "-line two",
    ]
)


# ============================================================================
# Factories
# ============================================================================


def create_mock_finding(
    finding_id: str = "chunk-1:additions:3:1",
    chunk_id: str = "chunk-1",
    **kwargs: Any,
) -> ReviewFinding:
    """
    Create a ReviewFinding with customizable fields.

    Args:
        finding_id: Finding ID
        chunk_id: Owning chunk ID
        **kwargs: Additional fields to override

    Returns:
        ReviewFinding object
    """
    defaults = {
        "file_path": "src/app.py",
        "chunk_index": 1,
        "hunk_header": "@@ -1,4 +1,5 @@",
        "side": "additions",
        "line_number": 3,
        "title": "Unused import",
        "body": "json is imported but never used.",
        "severity": "low",
        "confidence": 0.8,
    }
    defaults.update(kwargs)
    return ReviewFinding(id=finding_id, chunk_id=chunk_id, **defaults)


def create_mock_chunk(
    chunk_id: str = "chunk-1",
    file_path: str = "src/app.py",
    chunk_index: int = 1,
    **kwargs: Any,
) -> ReviewChunk:
    """Create a ReviewChunk with customizable fields."""
    defaults: dict[str, Any] = {
        "hunk_header": "@@ -1,4 +1,5 @@",
        "summary": "Adjusts imports.",
        "findings": (),
    }
    defaults.update(kwargs)
    return ReviewChunk(id=chunk_id, file_path=file_path, chunk_index=chunk_index, **defaults)


def create_mock_progress_event(
    status: str = "chunk-complete",
    run_id: str | None = "run-1",
    thread_id: int = 1,
    **kwargs: Any,
) -> ProgressEvent:
    """
    Create a ProgressEvent with customizable fields.

    Args:
        status: Event status
        run_id: Target run ID
        thread_id: Thread ID
        **kwargs: Additional fields to override

    Returns:
        ProgressEvent object
    """
    defaults: dict[str, Any] = {
        "message": status,
        "total_chunks": 0,
        "completed_chunks": 0,
    }
    defaults.update(kwargs)
    return ProgressEvent(run_id=run_id, thread_id=thread_id, status=status, **defaults)


def create_mock_review_run(
    run_id: str = "run-1",
    status: str = "running",
    **kwargs: Any,
) -> ReviewRun:
    """Create a client-side ReviewRun with customizable fields."""
    defaults: dict[str, Any] = {
        "scope": FullScope(),
        "scope_label": "Full diff",
        "started_at": 10,
        "ended_at": None,
        "model": "gpt-4.1-mini",
        "review": None,
    }
    defaults.update(kwargs)
    return ReviewRun(id=run_id, status=status, **defaults)


def create_mock_persisted_run(
    run_id: str = "run-1",
    status: str = "running",
    thread_id: int = 1,
    **kwargs: Any,
) -> PersistedReviewRun:
    """
    Create a PersistedReviewRun with customizable fields.

    Args:
        run_id: Run ID
        status: Raw backend status
        thread_id: Thread ID
        **kwargs: Additional fields to override

    Returns:
        PersistedReviewRun object
    """
    defaults: dict[str, Any] = {
        "workspace": "/tmp/workspace",
        "base_ref": "origin/main",
        "merge_base": "abc123",
        "head": "def456",
        "files_changed": 1,
        "insertions": 2,
        "deletions": 1,
        "scope_label": "Full diff",
        "total_chunks": 1,
        "completed_chunks": 1,
        "model": "gpt-4.1-mini",
        "diff_chars_used": 10,
        "diff_chars_total": 10,
        "created_at": "2026-02-20T00:00:00.000Z",
        "started_at": "2026-02-20T00:00:01.000Z",
    }
    defaults.update(kwargs)
    return PersistedReviewRun(run_id=run_id, thread_id=thread_id, status=status, **defaults)


def create_mock_diff(layout: list[tuple[str, list[tuple[int, int]]]]) -> str:
    """
    Render a unified diff with a known shape.

    Args:
        layout: One ``(path, hunks)`` entry per file, where each hunk is an
            ``(insertions, deletions)`` pair

    Returns:
        Diff text; every hunk carries one context line plus the requested
        removed and added lines
    """
    lines: list[str] = []
    for path, hunks in layout:
        lines.append(f"diff --git a/{path} b/{path}")
        lines.append("index 1111111..2222222 100644")
        lines.append(f"--- a/{path}")
        lines.append(f"+++ b/{path}")
        for position, (insertions, deletions) in enumerate(hunks):
            start = position * 10 + 1
            lines.append(f"@@ -{start},{deletions + 1} +{start},{insertions + 1} @@")
            lines.append(" context")
            lines.extend(f"-removed {i}" for i in range(deletions))
            lines.extend(f"+added {i}" for i in range(insertions))
    return "\n".join(lines)


def create_mock_comparison(diff: str = SAMPLE_DIFF, **kwargs: Any) -> CompareWorkspaceDiffResult:
    """Create a workspace comparison whose stats match ``diff``."""
    files_changed, insertions, deletions = summarize_patch_stats(diff)
    defaults: dict[str, Any] = {
        "workspace": "/tmp/workspace",
        "base_ref": "origin/main",
        "merge_base": "abc123",
        "head": "def456",
        "files_changed": files_changed,
        "insertions": insertions,
        "deletions": deletions,
    }
    defaults.update(kwargs)
    return CompareWorkspaceDiffResult(diff=diff, **defaults)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockAsyncRovexClient, None, None]:
    """
    Provide a MockAsyncRovexClient for testing.

    Example:
        ```python
        def test_refresh(mock_client):
            mock_client.runs.configure_list(response=[create_mock_persisted_run()])
            session = ReviewSession(mock_client, thread_id=1)
            asyncio.run(session.refresh())
            assert mock_client.was_called("runs.list")
        ```
    """
    client = MockAsyncRovexClient()
    yield client
    client.reset()


@pytest.fixture
def sample_diff() -> str:
    """Provide a three-file unified diff (modified, modified, deleted)."""
    return SAMPLE_DIFF


@pytest.fixture
def sample_comparison() -> CompareWorkspaceDiffResult:
    """Provide a workspace comparison over ``sample_diff``."""
    return create_mock_comparison()


@pytest.fixture
def sample_chunk() -> ReviewChunk:
    """Provide a sample ReviewChunk."""
    return create_mock_chunk()


@pytest.fixture
def sample_finding() -> ReviewFinding:
    """Provide a sample ReviewFinding."""
    return create_mock_finding()


@pytest.fixture
def sample_persisted_run() -> PersistedReviewRun:
    """Provide a sample PersistedReviewRun."""
    return create_mock_persisted_run()


@pytest.fixture
def sample_review_run() -> ReviewRun:
    """Provide a sample running ReviewRun."""
    return create_mock_review_run()
