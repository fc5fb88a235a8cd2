"""Branch and base-ref suggestions for comparing a workspace."""

from collections.abc import Iterable

from rovex.types.threads import ReviewBranchSuggestions, WorkspaceBranches

DEFAULT_BASE_REF_TARGETS = [
    "origin/main",
    "origin/master",
    "main",
    "master",
    "HEAD~1",
]

FALLBACK_BASE_REF = "origin/main"


def dedupe_ref_targets(values: Iterable[str | None]) -> list[str]:
    """
    De-duplicate ref names case-insensitively.

    Values are trimmed, blanks and None are dropped, and the first spelling
    of each ref wins.

    Example:
        ```python
        dedupe_ref_targets([" main ", "MAIN", "feature/a", "", None, "Feature/A"])
        # ["main", "feature/a"]
        ```
    """
    seen: set[str] = set()
    targets: list[str] = []
    for raw_value in values:
        value = (raw_value or "").strip()
        if not value:
            continue
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        targets.append(value)
    return targets


def build_fallback_review_branch_suggestions(
    fallback_base_ref: str,
    fallback_review_branch: str,
) -> ReviewBranchSuggestions:
    """Suggestions used when the workspace branches could not be listed."""
    branch_targets = dedupe_ref_targets([fallback_review_branch])
    base_ref_targets = dedupe_ref_targets([fallback_base_ref, *DEFAULT_BASE_REF_TARGETS])
    return ReviewBranchSuggestions(
        current_branch=None,
        branch_targets=branch_targets,
        base_ref_targets=base_ref_targets,
        suggested_base_ref=base_ref_targets[0] if base_ref_targets else FALLBACK_BASE_REF,
    )


def build_review_branch_suggestions_from_workspace_branches(
    result: WorkspaceBranches,
    fallback_base_ref: str,
    fallback_review_branch: str,
) -> ReviewBranchSuggestions:
    """
    Combine a workspace branch listing with fallbacks and defaults.

    Args:
        result: Branch listing of the workspace
        fallback_base_ref: Base ref remembered for the thread
        fallback_review_branch: Review branch remembered for the thread

    Returns:
        ReviewBranchSuggestions with de-duplicated branch and base-ref lists
    """
    current_branch = (result.current_branch or "").strip() or None
    remote_targets = [branch.name for branch in result.remote_branches]
    local_targets = [branch.name for branch in result.branches]

    branch_targets = dedupe_ref_targets([current_branch, fallback_review_branch, *local_targets])
    base_ref_targets = dedupe_ref_targets(
        [
            result.suggested_base_ref,
            result.upstream_branch,
            fallback_base_ref,
            *DEFAULT_BASE_REF_TARGETS,
            *remote_targets,
            *local_targets,
        ]
    )
    suggested = (result.suggested_base_ref or "").strip()
    if not suggested:
        suggested = base_ref_targets[0] if base_ref_targets else FALLBACK_BASE_REF

    return ReviewBranchSuggestions(
        current_branch=current_branch,
        branch_targets=branch_targets,
        base_ref_targets=base_ref_targets,
        suggested_base_ref=suggested,
    )


__all__ = [
    "DEFAULT_BASE_REF_TARGETS",
    "dedupe_ref_targets",
    "build_fallback_review_branch_suggestions",
    "build_review_branch_suggestions_from_workspace_branches",
]
