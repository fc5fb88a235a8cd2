"""
Git helper utilities for Rovex.

Produces the unified diff a review runs against by comparing a local
workspace with a base ref, and lists the workspace branches used for
base-ref suggestions.
"""

import subprocess
from pathlib import Path

from rovex.exceptions import GitError
from rovex.logging import get_logger
from rovex.scope import summarize_patch_stats
from rovex.types.diff import CompareWorkspaceDiffResult
from rovex.types.threads import WorkspaceBranch, WorkspaceBranches

logger = get_logger("git")


class WorkspaceGit:
    """
    Helper for read-only git operations on a local workspace.

    Example:
        ```python
        from rovex.git import WorkspaceGit

        git = WorkspaceGit()
        comparison = git.compare("./my-repo", base_ref="origin/main")
        print(comparison.files_changed, comparison.insertions)
        ```
    """

    def __init__(self, git_executable: str = "git", timeout: float = 60.0) -> None:
        """
        Initialize the helper.

        Args:
            git_executable: Name or path of the git binary
            timeout: Per-command timeout in seconds
        """
        self.git_executable = git_executable
        self.timeout = timeout

    def compare(
        self,
        workspace: str | Path,
        base_ref: str,
        fetch_remote: bool = False,
    ) -> CompareWorkspaceDiffResult:
        """
        Compare the workspace against the merge base with ``base_ref``.

        Uncommitted changes in tracked files are included, so the diff matches
        what the user sees in their editor.

        Args:
            workspace: Path to the local repository
            base_ref: Ref to compare against (e.g. "origin/main")
            fetch_remote: Run ``git fetch --prune`` first

        Returns:
            CompareWorkspaceDiffResult with diff text and change statistics

        Raises:
            GitError: If the workspace is not a repository or a ref is unknown
        """
        workspace_path = Path(workspace)
        base_ref = base_ref.strip()
        if not base_ref:
            raise GitError("Base ref must not be empty")

        if fetch_remote:
            self._run(workspace_path, ["fetch", "--prune"])

        head = self._run(workspace_path, ["rev-parse", "HEAD"]).strip()
        merge_base = self._run(workspace_path, ["merge-base", base_ref, "HEAD"]).strip()
        diff = self._run(
            workspace_path,
            ["diff", "--no-color", "--no-ext-diff", "--find-renames", merge_base],
        )
        files_changed, insertions, deletions = summarize_patch_stats(diff)

        logger.debug(
            "Compared %s against %s: %d files, +%d -%d",
            workspace_path, base_ref, files_changed, insertions, deletions,
        )

        return CompareWorkspaceDiffResult(
            workspace=str(workspace_path),
            base_ref=base_ref,
            merge_base=merge_base,
            head=head,
            diff=diff,
            files_changed=files_changed,
            insertions=insertions,
            deletions=deletions,
        )

    def list_branches(self, workspace: str | Path) -> WorkspaceBranches:
        """
        List the local and remote branches of a workspace.

        Args:
            workspace: Path to the local repository

        Returns:
            WorkspaceBranches; ``suggested_base_ref`` is the upstream branch
            when one is configured

        Raises:
            GitError: If the workspace is not a repository
        """
        workspace_path = Path(workspace)
        current = self._run(workspace_path, ["branch", "--show-current"]).strip() or None

        upstream: str | None = None
        if current:
            try:
                upstream = self._run(
                    workspace_path,
                    ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
                ).strip() or None
            except GitError:
                upstream = None

        local_names = self._run(
            workspace_path, ["for-each-ref", "--format=%(refname:short)", "refs/heads"]
        ).splitlines()
        remote_names = self._run(
            workspace_path, ["for-each-ref", "--format=%(refname:short)", "refs/remotes"]
        ).splitlines()

        branches = [
            WorkspaceBranch(name=name, is_current=name == current)
            for name in (line.strip() for line in local_names)
            if name
        ]
        remote_branches = [
            WorkspaceBranch(name=name, is_remote=True)
            for name in (line.strip() for line in remote_names)
            # "origin/HEAD" is a symbolic alias, and a bare remote name is its short form
            if name and not name.endswith("/HEAD") and "/" in name
        ]

        return WorkspaceBranches(
            current_branch=current,
            upstream_branch=upstream,
            suggested_base_ref=upstream,
            branches=branches,
            remote_branches=remote_branches,
        )

    def _run(self, workspace: Path, args: list[str]) -> str:
        """Run a git command in the workspace and return its stdout."""
        cmd = [self.git_executable, "-C", str(workspace), *args]
        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise GitError(f"git executable not found: {self.git_executable}", cmd) from e
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git {args[0]} timed out after {self.timeout}s", cmd) from e
        except subprocess.CalledProcessError as e:
            message = (e.stderr or "").strip() or f"git {args[0]} failed with exit code {e.returncode}"
            raise GitError(message, cmd) from e
        return result.stdout
