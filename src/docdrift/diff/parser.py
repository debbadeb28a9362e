"""Permissive line-based unified diff parser."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from docdrift.config import SourceConfig
from docdrift.diff.models import (
    CHANGE_ADDED,
    CHANGE_DELETED,
    CHANGE_MODIFIED,
    ChangeKind,
    FileChange,
    Hunk,
)


class MalformedDiffError(ValueError):
    """Raised when diff input cannot be scanned line by line."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(slots=True, frozen=True)
class DiffPatterns:
    """Compiled patterns recognised by the diff scanner."""

    file_header: re.Pattern[str] = re.compile(r"^diff --git a/(.+) b/(.+)$")
    hunk_header: re.Pattern[str] = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
    new_file: re.Pattern[str] = re.compile(r"^new file mode")
    deleted_file: re.Pattern[str] = re.compile(r"^deleted file mode")


DEFAULT_DIFF_PATTERNS = DiffPatterns()


@dataclass(slots=True)
class _FileAccumulator:
    """Mutable state for the file currently being scanned."""

    old_path: str
    new_path: str
    change_kind: ChangeKind = CHANGE_MODIFIED
    hunks: list[Hunk] = field(default_factory=list)
    hunk_keys: list[int] = field(default_factory=list)
    added_lines: list[str] = field(default_factory=list)
    removed_lines: list[str] = field(default_factory=list)

    def add_hunk(self, hunk: Hunk) -> None:
        position = bisect.bisect_right(self.hunk_keys, hunk.new_start)
        self.hunk_keys.insert(position, hunk.new_start)
        self.hunks.insert(position, hunk)

    def freeze(self) -> FileChange:
        return FileChange(
            old_path=self.old_path,
            new_path=self.new_path,
            change_kind=self.change_kind,
            hunks=tuple(self.hunks),
            added_lines=tuple(self.added_lines),
            removed_lines=tuple(self.removed_lines),
        )


def parse_diff(
    diff_text: str | bytes,
    patterns: DiffPatterns = DEFAULT_DIFF_PATTERNS,
) -> list[FileChange]:
    """Parse unified diff text into one FileChange per ``diff --git`` header."""
    text = _scannable_text(diff_text)
    changes: list[FileChange] = []
    current: _FileAccumulator | None = None

    for raw_line in text.split("\n"):
        line = raw_line.rstrip("\r")
        header = patterns.file_header.match(line)
        if header is not None:
            if current is not None:
                changes.append(current.freeze())
            current = _FileAccumulator(old_path=header.group(1), new_path=header.group(2))
            continue

        if current is None:
            continue

        if patterns.new_file.match(line):
            current.change_kind = CHANGE_ADDED
            continue
        if patterns.deleted_file.match(line):
            current.change_kind = CHANGE_DELETED
            continue

        hunk_header = patterns.hunk_header.match(line)
        if hunk_header is not None:
            current.add_hunk(_hunk_from_match(hunk_header))
            continue

        if line.startswith("+") and not line.startswith("+++"):
            current.added_lines.append(line[1:])
        elif line.startswith("-") and not line.startswith("---"):
            current.removed_lines.append(line[1:])

    if current is not None:
        changes.append(current.freeze())
    return changes


def is_source_path(path: str, source: SourceConfig) -> bool:
    """Return True when path is a non-test, non-generated source file."""
    if not path.endswith(source.extension):
        return False
    if any(path.endswith(suffix) for suffix in source.exclude_suffixes):
        return False
    directories = PurePosixPath(path).parts[:-1]
    return not any(part in source.exclude_dirs for part in directories)


def filter_source_changes(changes: list[FileChange], source: SourceConfig) -> list[FileChange]:
    """Keep only changes that touch target-language source files."""
    kept: list[FileChange] = []
    for change in changes:
        path = change.old_path if change.change_kind == CHANGE_DELETED else change.new_path
        if is_source_path(path, source):
            kept.append(change)
    return kept


def _scannable_text(diff_text: str | bytes) -> str:
    if isinstance(diff_text, bytes):
        try:
            diff_text = diff_text.decode("utf-8")
        except UnicodeDecodeError as error:
            raise MalformedDiffError(f"Diff is not valid UTF-8: {error.reason}.") from error
    if not isinstance(diff_text, str):
        raise MalformedDiffError(f"Diff must be text, got {type(diff_text).__name__}.")
    if "\x00" in diff_text:
        raise MalformedDiffError("Diff contains NUL bytes and cannot be scanned as text.")
    return diff_text


def _hunk_from_match(match: re.Match[str]) -> Hunk:
    old_start, old_count, new_start, new_count = match.groups()
    return Hunk(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
    )
