"""Thin subprocess wrapper around the git CLI.

Every call runs in the repository root with captured text output. Failures
surface as :class:`GitError` carrying the command, exit code, and stderr so
the deploy sequencer can report exactly what went wrong.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """A git command failed or the git binary could not be run."""

    def __init__(
        self,
        args: list[str],
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = ["git", *args]
        self.returncode = returncode
        self.stderr = stderr


class GitClient:
    """Run git commands against a single working tree."""

    def __init__(self, repo_root: Path) -> None:
        self._repo_root = repo_root

    def _run_git(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repo root. Raises :class:`GitError` on failure."""
        logger.debug("git %s", " ".join(args))
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self._repo_root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            msg = f"git {args[0]} exited with status {exc.returncode}"
            if stderr:
                msg = f"{msg}: {stderr.splitlines()[-1]}"
            raise GitError(list(args), msg, returncode=exc.returncode, stderr=stderr) from exc
        except OSError as exc:
            msg = f"could not run git: {exc}"
            raise GitError(list(args), msg) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def version(self) -> str:
        """Return ``git --version`` output (proves the binary is runnable)."""
        return self._run_git("--version").stdout.strip()

    def is_work_tree(self) -> bool:
        """Whether the repo root lies inside a git working tree."""
        try:
            result = self._run_git("rev-parse", "--is-inside-work-tree")
        except GitError as exc:
            if exc.returncode is None:
                raise
            return False
        return result.stdout.strip() == "true"

    def current_branch(self) -> str:
        """Name of the checked-out branch. Raises on a detached HEAD."""
        name = self._run_git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()
        if name == "HEAD":
            raise GitError(
                ["rev-parse", "--abbrev-ref", "HEAD"],
                "HEAD is detached; check out a branch before deploying",
            )
        return name

    def toplevel(self) -> Path:
        """Absolute path of the working tree's top directory."""
        return Path(self._run_git("rev-parse", "--show-toplevel").stdout.strip()).resolve()

    def branch_exists(self, branch: str) -> bool:
        """Whether a local branch named *branch* exists."""
        try:
            self._run_git("show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        except GitError as exc:
            if exc.returncode is None:
                raise
            return False
        return True

    def dirty_paths(self) -> list[str]:
        """Uncommitted changes and untracked files, as ``git status --porcelain`` lines.

        Ignored files are not reported.
        """
        out = self._run_git("status", "--porcelain", "--untracked-files=all").stdout
        return [line for line in out.splitlines() if line.strip()]

    def head_sha(self, *, short: bool = True) -> str:
        args = ["rev-parse", "--short", "HEAD"] if short else ["rev-parse", "HEAD"]
        return self._run_git(*args).stdout.strip()

    def has_staged_changes(self) -> bool:
        """Whether the index differs from HEAD."""
        try:
            self._run_git("diff", "--cached", "--quiet")
        except GitError as exc:
            # Exit code 1 means there ARE staged changes
            if exc.returncode == 1:
                return True
            raise
        return False

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def checkout(self, branch: str, *, force: bool = False) -> None:
        """Switch branches. *force* discards local changes in the way."""
        if force:
            self._run_git("checkout", "--force", branch)
        else:
            self._run_git("checkout", branch)

    def add_all(self) -> None:
        """Stage every change in the working tree, deletions included."""
        self._run_git("add", "--all", ".")

    def commit(self, message: str) -> bool:
        """Commit staged changes.

        Returns False without committing when nothing is staged.
        """
        if not self.has_staged_changes():
            return False
        self._run_git("commit", "-m", message)
        return True

    def push(self, remote: str, branch: str) -> None:
        self._run_git("push", remote, branch)
