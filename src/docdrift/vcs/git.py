"""Git subprocess wrapper supplying diffs and historical file text."""

from __future__ import annotations

import subprocess
from pathlib import Path

from docdrift.vcs.base import NoRepositoryError, RevisionNotFoundError


class GitCommandError(RuntimeError):
    """Raised when a git command exits non-zero."""

    def __init__(self, args: list[str], stderr: str) -> None:
        super().__init__(stderr or f"git {' '.join(args)} failed")
        self.args_list = args
        self.stderr = stderr


class GitTextProvider:
    """Read diffs and file revisions from a local git checkout."""

    def __init__(self, repo_root: Path) -> None:
        self._repo_root = repo_root.resolve()

    @property
    def repo_root(self) -> Path:
        """Return the checkout root commands run in."""
        return self._repo_root

    def is_inside_repository(self) -> bool:
        """Return True when repo_root is inside a git work tree."""
        try:
            self._git(["rev-parse", "--git-dir"])
        except (GitCommandError, NoRepositoryError):
            return False
        return True

    def ensure_repository(self) -> None:
        """Raise NoRepositoryError unless repo_root is inside a git work tree."""
        if not self.is_inside_repository():
            raise NoRepositoryError(f"Not inside a git repository: {self._repo_root}")

    def get_diff(self, base: str) -> str:
        """Return the diff from base to HEAD, falling back to base vs worktree."""
        self.ensure_repository()
        try:
            return self._git(["diff", f"{base}...HEAD"])
        except GitCommandError:
            return self._git(["diff", base])

    def get_uncommitted_diff(self) -> str:
        """Return staged followed by unstaged changes."""
        self.ensure_repository()
        staged = self._git(["diff", "--cached"])
        unstaged = self._git(["diff"])
        return staged + unstaged

    def merge_base(self, base: str) -> str:
        """Return the commit where HEAD forked from base, or base when there is none."""
        self.ensure_repository()
        try:
            return self._git(["merge-base", base, "HEAD"]).strip()
        except GitCommandError:
            return base

    def get_file_at_revision(self, path: str, revision: str) -> str:
        """Return file text at revision or raise RevisionNotFoundError."""
        try:
            return self._git(["show", f"{revision}:{path}"])
        except (GitCommandError, NoRepositoryError) as error:
            raise RevisionNotFoundError(path, revision) from error

    def read_working_file(self, path: str) -> str:
        """Return current worktree text of a repository-relative path."""
        return (self._repo_root / path).read_text(encoding="utf-8", errors="replace")

    def _git(self, args: list[str]) -> str:
        try:
            completed = subprocess.run(
                ["git", *args],
                cwd=self._repo_root,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as error:
            raise NoRepositoryError("git executable not found on PATH") from error
        if completed.returncode != 0:
            raise GitCommandError(args, completed.stderr.strip())
        return completed.stdout
