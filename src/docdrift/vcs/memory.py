"""In-memory text provider for diffs whose file contents arrive out of band."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from docdrift.vcs.base import RevisionNotFoundError


@dataclass(slots=True, frozen=True)
class MappingTextProvider:
    """Serve current and per-revision file text from dictionaries."""

    current: Mapping[str, str] = field(default_factory=dict)
    revisions: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def read_working_file(self, path: str) -> str:
        """Return current text or raise FileNotFoundError."""
        try:
            return self.current[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def get_file_at_revision(self, path: str, revision: str) -> str:
        """Return historical text or raise RevisionNotFoundError."""
        files = self.revisions.get(revision, {})
        if path not in files:
            raise RevisionNotFoundError(path, revision)
        return files[path]
