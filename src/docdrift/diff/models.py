"""Typed models for parsed unified diffs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

ChangeKind = Literal["added", "modified", "deleted"]

CHANGE_ADDED: Final[ChangeKind] = "added"
CHANGE_MODIFIED: Final[ChangeKind] = "modified"
CHANGE_DELETED: Final[ChangeKind] = "deleted"


@dataclass(slots=True, frozen=True)
class Hunk:
    """Contiguous changed region described by one ``@@`` header."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int

    def new_line_range(self) -> range:
        """Return the 1-based new-file lines covered by this hunk."""
        return range(self.new_start, self.new_start + self.new_count)


@dataclass(slots=True, frozen=True)
class FileChange:
    """One file's entry in a unified diff."""

    old_path: str
    new_path: str
    change_kind: ChangeKind
    hunks: tuple[Hunk, ...] = ()
    added_lines: tuple[str, ...] = ()
    removed_lines: tuple[str, ...] = ()

    @property
    def is_rename(self) -> bool:
        """Return True when the old and new paths differ."""
        return self.old_path != self.new_path

    def touched_new_lines(self) -> frozenset[int]:
        """Return every new-file line number covered by any hunk."""
        touched: set[int] = set()
        for hunk in self.hunks:
            touched.update(hunk.new_line_range())
        return frozenset(touched)
