"""
Unified diff parsing.

Splits a ``git diff`` patch into per-file sections and per-file hunks. The
parser is deliberately forgiving: text before the first ``diff --git`` line is
ignored, and sections without hunks (renames, mode changes, binary files)
still produce a ``ParsedDiffFile`` with an empty hunk list.
"""

from rovex.types.diff import ParsedDiffFile, ParsedDiffHunk

DIFF_START_PREFIX = "diff --git "
HUNK_HEADER_PREFIX = "@@ "
DEV_NULL = "/dev/null"


def normalize_diff_path(path: str | None) -> str:
    """
    Normalize a path taken from a diff header.

    Trims surrounding whitespace and strips one leading ``a/`` or ``b/``
    prefix.

    Args:
        path: Raw path (e.g. ``"b/src/app.py"``), may be None

    Returns:
        Normalized path, or an empty string for None/blank input
    """
    if path is None:
        return ""
    trimmed = path.strip()
    if not trimmed:
        return ""
    if trimmed.startswith(("a/", "b/")):
        return trimmed[2:]
    return trimmed


def split_patch_sections(patch: str) -> list[list[str]]:
    """Split a patch into ``diff --git`` sections (CRLF normalized)."""
    lines = patch.replace("\r\n", "\n").split("\n")
    sections: list[list[str]] = []
    current: list[str] | None = None

    for line in lines:
        if line.startswith(DIFF_START_PREFIX):
            if current:
                sections.append(current)
            current = [line]
            continue
        if current is not None:
            current.append(line)

    if current:
        sections.append(current)

    return sections


def _section_file_path(section: list[str]) -> str:
    plus_line = next((line for line in section if line.startswith("+++ ")), None)
    minus_line = next((line for line in section if line.startswith("--- ")), None)

    plus_path = normalize_diff_path(plus_line[4:] if plus_line else None)
    minus_path = normalize_diff_path(minus_line[4:] if minus_line else None)
    if plus_path and plus_path != DEV_NULL:
        return plus_path
    if minus_path:
        return minus_path
    return _path_from_git_header(section[0])


def _path_from_git_header(header: str) -> str:
    # "diff --git a/x b/x" is the only path source for renames and mode changes
    rest = header[len(DIFF_START_PREFIX):].strip()
    marker = rest.rfind(" b/")
    if marker >= 0:
        return normalize_diff_path(rest[marker + 1:])
    return ""


def parse_section(section: list[str]) -> ParsedDiffFile:
    """Parse one ``diff --git`` section into a ``ParsedDiffFile``."""
    hunk_starts = [
        index for index, line in enumerate(section) if line.startswith(HUNK_HEADER_PREFIX)
    ]
    header_end = hunk_starts[0] if hunk_starts else len(section)

    hunks: list[ParsedDiffHunk] = []
    for position, start in enumerate(hunk_starts):
        end = hunk_starts[position + 1] if position + 1 < len(hunk_starts) else len(section)
        hunks.append(
            ParsedDiffHunk(
                hunk_index=position + 1,
                header=section[start],
                lines=section[start:end],
            )
        )

    return ParsedDiffFile(
        file_path=_section_file_path(section),
        lines=list(section),
        header_lines=section[:header_end],
        hunks=hunks,
    )


def parse_patch_files(patch: str) -> list[ParsedDiffFile]:
    """
    Parse a unified diff into files and hunks.

    Args:
        patch: Unified diff text (``diff --git`` format, LF or CRLF)

    Returns:
        One ParsedDiffFile per ``diff --git`` section, in patch order

    Example:
        ```python
        files = parse_patch_files(diff_text)
        for parsed in files:
            print(parsed.file_path, len(parsed.hunks))
        ```
    """
    return [parse_section(section) for section in split_patch_sections(patch)]


def find_patch_file(files: list[ParsedDiffFile], file_path: str) -> ParsedDiffFile | None:
    """Find a parsed file by path, comparing normalized paths."""
    wanted = normalize_diff_path(file_path)
    for candidate in files:
        if normalize_diff_path(candidate.file_path) == wanted:
            return candidate
    return None


__all__ = [
    "normalize_diff_path",
    "parse_patch_files",
    "parse_section",
    "split_patch_sections",
    "find_patch_file",
]
