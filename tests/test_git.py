"""
Tests for the workspace git helper against real temporary repositories.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from rovex.exceptions import GitError
from rovex.git import WorkspaceGit
from rovex.patch import parse_patch_files

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), *args], check=True, capture_output=True, text=True
    )
    return result.stdout


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository with a ``main`` commit and a ``feature`` branch ahead of it."""
    path = tmp_path / "workspace"
    path.mkdir()
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "dev@example.com")
    git(path, "config", "user.name", "Dev")
    git(path, "config", "commit.gpgsign", "false")

    (path / "app.py").write_text("import os\nimport sys\n\n\ndef main():\n    return 0\n")
    (path / "README.md").write_text("# Title\n")
    git(path, "add", ".")
    git(path, "commit", "-q", "-m", "initial")

    git(path, "checkout", "-q", "-b", "feature")
    (path / "app.py").write_text("import os\nimport sys\nimport json\n\n\ndef main():\n    return 1\n")
    git(path, "commit", "-q", "-am", "change app")

    # Uncommitted change in a tracked file
    (path / "README.md").write_text("# New title\n")
    return path


class TestCompare:
    """Tests for WorkspaceGit.compare."""

    def test_compare_against_base(self, repo: Path) -> None:
        comparison = WorkspaceGit().compare(repo, "main")

        assert comparison.base_ref == "main"
        assert comparison.merge_base == git(repo, "rev-parse", "main").strip()
        assert comparison.head == git(repo, "rev-parse", "HEAD").strip()
        assert comparison.files_changed == 2
        assert comparison.insertions == 3
        assert comparison.deletions == 2
        assert sorted(parsed.file_path for parsed in parse_patch_files(comparison.diff)) == [
            "README.md",
            "app.py",
        ]

    def test_non_utf8_change(self, repo: Path) -> None:
        (repo / "README.md").write_bytes(b"caf\xe9\n")

        comparison = WorkspaceGit().compare(repo, "main")

        assert "+caf\ufffd" in comparison.diff
        assert comparison.files_changed == 2

    def test_empty_base_ref(self, repo: Path) -> None:
        with pytest.raises(GitError):
            WorkspaceGit().compare(repo, "  ")

    def test_unknown_ref(self, repo: Path) -> None:
        with pytest.raises(GitError) as exc_info:
            WorkspaceGit().compare(repo, "origin/does-not-exist")

        assert exc_info.value.code == "GIT_ERROR"
        assert "merge-base" in exc_info.value.command

    def test_not_a_repository(self, tmp_path: Path) -> None:
        with pytest.raises(GitError):
            WorkspaceGit().compare(tmp_path, "main")

    def test_missing_git_executable(self, repo: Path) -> None:
        with pytest.raises(GitError) as exc_info:
            WorkspaceGit(git_executable="git-does-not-exist").compare(repo, "main")

        assert "not found" in exc_info.value.message


class TestListBranches:
    """Tests for WorkspaceGit.list_branches."""

    def test_local_branches(self, repo: Path) -> None:
        listing = WorkspaceGit().list_branches(repo)

        assert listing.current_branch == "feature"
        assert listing.upstream_branch is None
        assert listing.suggested_base_ref is None
        assert sorted(branch.name for branch in listing.branches) == ["feature", "main"]
        assert [branch.name for branch in listing.branches if branch.is_current] == ["feature"]
        assert listing.remote_branches == []
