"""Diff and review scope data models."""

from dataclasses import dataclass, field
from typing import ClassVar, Union


@dataclass
class ParsedDiffHunk:
    """One ``@@`` hunk of a file section."""

    hunk_index: int  # 1-based, contiguous within its file
    header: str
    lines: list[str]


@dataclass
class ParsedDiffFile:
    """One ``diff --git`` section of a unified diff."""

    file_path: str
    lines: list[str]
    header_lines: list[str]
    hunks: list[ParsedDiffHunk] = field(default_factory=list)


@dataclass
class ScopedDiffResult:
    """A diff slice together with its recomputed change statistics."""

    diff: str
    files_changed: int
    insertions: int
    deletions: int


@dataclass(frozen=True)
class FullScope:
    """Review the whole patch."""

    kind: ClassVar[str] = "full"


@dataclass(frozen=True)
class FileScope:
    """Review a single file of the patch."""

    file_path: str

    kind: ClassVar[str] = "file"


@dataclass(frozen=True)
class HunkScope:
    """Review a single hunk of one file."""

    file_path: str
    hunk_index: int

    kind: ClassVar[str] = "hunk"


ReviewScope = Union[FullScope, FileScope, HunkScope]


@dataclass
class CompareWorkspaceDiffResult:
    """A workspace compared against a base ref."""

    workspace: str
    base_ref: str
    merge_base: str
    head: str
    diff: str
    files_changed: int
    insertions: int
    deletions: int
