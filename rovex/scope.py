"""
Review scope model.

A review scope selects what part of the current diff is sent to the
reviewer: the full patch, one file, or one hunk of one file. Statistics for a
scope are always recomputed from the exact slice that would be submitted.
"""

from rovex.logging import get_logger
from rovex.patch import DIFF_START_PREFIX, find_patch_file, parse_patch_files
from rovex.types.diff import FileScope, FullScope, HunkScope, ReviewScope, ScopedDiffResult

logger = get_logger("scope")


def create_full_review_scope() -> FullScope:
    """Return the default scope covering the whole patch."""
    return FullScope()


def get_review_scope_label(scope: ReviewScope) -> str:
    """
    Human-readable label for a scope.

    Returns:
        ``"Full diff"``, the file path, or ``"<path> · hunk <n>"``
    """
    if isinstance(scope, HunkScope):
        return f"{scope.file_path} · hunk {scope.hunk_index}"
    if isinstance(scope, FileScope):
        return scope.file_path
    return "Full diff"


def get_review_scope_context(scope: ReviewScope) -> str:
    """Machine-readable scope marker appended to follow-up questions."""
    if isinstance(scope, HunkScope):
        return f"scope=hunk path={scope.file_path} hunk={scope.hunk_index}"
    if isinstance(scope, FileScope):
        return f"scope=file path={scope.file_path}"
    return "scope=full-diff"


def summarize_patch_stats(patch: str) -> tuple[int, int, int]:
    """
    Count files, insertions and deletions in a patch.

    File header lines (``+++``/``---``) are not counted as changes.

    Returns:
        Tuple of (files_changed, insertions, deletions)
    """
    files_changed = 0
    insertions = 0
    deletions = 0

    for line in patch.split("\n"):
        if line.startswith(DIFF_START_PREFIX):
            files_changed += 1
            continue
        if line.startswith("+++") or line.startswith("---"):
            continue
        if line.startswith("+"):
            insertions += 1
        elif line.startswith("-"):
            deletions += 1

    return files_changed, insertions, deletions


def _scoped_result(diff: str) -> ScopedDiffResult:
    files_changed, insertions, deletions = summarize_patch_stats(diff)
    return ScopedDiffResult(
        diff=diff,
        files_changed=files_changed,
        insertions=insertions,
        deletions=deletions,
    )


def scope_exists_in_patch(scope: ReviewScope, patch: str) -> bool:
    """
    Check whether a scope still refers to something in the patch.

    Args:
        scope: Scope to validate
        patch: Current unified diff

    Returns:
        True for the full scope, or when the referenced file (and hunk) exists
    """
    if isinstance(scope, FullScope):
        return True

    parsed = find_patch_file(parse_patch_files(patch), scope.file_path)
    if parsed is None:
        return False
    if isinstance(scope, FileScope):
        return True
    return any(hunk.hunk_index == scope.hunk_index for hunk in parsed.hunks)


def resolve_scope_for_patch(scope: ReviewScope, patch: str) -> ReviewScope:
    """Return ``scope`` if it exists in ``patch``, otherwise the full scope."""
    if scope_exists_in_patch(scope, patch):
        return scope
    logger.info("Scope %r no longer exists in the diff; resetting to full diff", get_review_scope_label(scope))
    return create_full_review_scope()


def build_scoped_diff(patch: str, scope: ReviewScope) -> ScopedDiffResult | None:
    """
    Extract the part of a patch selected by a scope.

    Args:
        patch: Unified diff text
        scope: Full, file or hunk scope

    Returns:
        ScopedDiffResult with stats recomputed from the slice, or None when the
        scope target is missing or the slice is empty

    Example:
        ```python
        result = build_scoped_diff(diff_text, HunkScope("src/app.py", 2))
        if result is not None:
            print(result.insertions, result.deletions)
        ```
    """
    if isinstance(scope, FullScope):
        normalized = patch.strip()
        if not normalized:
            return None
        return _scoped_result(normalized)

    parsed = find_patch_file(parse_patch_files(patch), scope.file_path)
    if parsed is None:
        return None

    if isinstance(scope, FileScope):
        selected_lines = parsed.lines
    else:
        hunk = next(
            (candidate for candidate in parsed.hunks if candidate.hunk_index == scope.hunk_index),
            None,
        )
        if hunk is None:
            return None
        selected_lines = [*parsed.header_lines, *hunk.lines]

    scoped_patch = "\n".join(selected_lines).strip()
    if not scoped_patch:
        return None
    return _scoped_result(scoped_patch)


__all__ = [
    "create_full_review_scope",
    "get_review_scope_label",
    "get_review_scope_context",
    "summarize_patch_stats",
    "scope_exists_in_patch",
    "resolve_scope_for_patch",
    "build_scoped_diff",
]
