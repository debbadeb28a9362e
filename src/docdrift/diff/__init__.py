"""Unified diff parsing and source-file filtering."""

from .models import CHANGE_ADDED, CHANGE_DELETED, CHANGE_MODIFIED, ChangeKind, FileChange, Hunk
from .parser import (
    DEFAULT_DIFF_PATTERNS,
    DiffPatterns,
    MalformedDiffError,
    filter_source_changes,
    is_source_path,
    parse_diff,
)

__all__ = [
    "CHANGE_ADDED",
    "CHANGE_DELETED",
    "CHANGE_MODIFIED",
    "ChangeKind",
    "DEFAULT_DIFF_PATTERNS",
    "DiffPatterns",
    "FileChange",
    "Hunk",
    "MalformedDiffError",
    "filter_source_changes",
    "is_source_path",
    "parse_diff",
]
