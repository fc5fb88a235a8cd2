"""Thread and workspace branch data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ThreadMessage:
    """A message in a review thread."""

    id: int
    thread_id: int
    role: str  # "system", "user", "assistant"
    content: str
    created_at: datetime


@dataclass
class WorkspaceBranch:
    """A local or remote branch of a workspace."""

    name: str
    is_current: bool = False
    is_remote: bool = False


@dataclass
class WorkspaceBranches:
    """Branch listing of a workspace."""

    current_branch: str | None
    upstream_branch: str | None
    suggested_base_ref: str | None
    branches: list[WorkspaceBranch] = field(default_factory=list)
    remote_branches: list[WorkspaceBranch] = field(default_factory=list)


@dataclass
class ReviewBranchSuggestions:
    """Branch and base-ref choices offered before comparing a workspace."""

    current_branch: str | None
    branch_targets: list[str]
    base_ref_targets: list[str]
    suggested_base_ref: str
