"""Text provider protocol shared by the extractor and its collaborators."""

from __future__ import annotations

from typing import Protocol


class NoRepositoryError(RuntimeError):
    """Raised when the working directory is not inside a repository."""


class RevisionNotFoundError(LookupError):
    """Raised when a path did not exist at the requested revision."""

    def __init__(self, path: str, revision: str) -> None:
        super().__init__(f"{path} not found at revision {revision}")
        self.path = path
        self.revision = revision


class SourceTextProvider(Protocol):
    """Read access to current and historical file text."""

    def read_working_file(self, path: str) -> str:
        """Return the current text of a repository-relative path."""

    def get_file_at_revision(self, path: str, revision: str) -> str:
        """Return file text at a revision or raise RevisionNotFoundError."""
