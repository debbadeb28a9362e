"""Typed models for changed code symbols."""

from __future__ import annotations

from dataclasses import dataclass

from docdrift.adapters.base import SymbolKind
from docdrift.diff.models import ChangeKind


@dataclass(slots=True, frozen=True)
class ChangedSymbol:
    """Top-level declaration touched by a diff.

    Lines refer to the new file version, or to the old version for deleted
    files. ``old_code``/``new_code`` are empty when not applicable.
    """

    file: str
    name: str
    kind: SymbolKind
    change_kind: ChangeKind
    start_line: int
    end_line: int
    old_code: str = ""
    new_code: str = ""

    def key(self) -> tuple[str, str, str]:
        """Return the identity used when treating results as a set."""
        return (self.file, self.name, self.change_kind)

    def code(self) -> str:
        """Return the most recent code text available."""
        return self.new_code or self.old_code


@dataclass(slots=True, frozen=True)
class ExtractionSkip:
    """A file skipped during extraction and why."""

    path: str
    reason: str


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Symbols from every file that could be processed plus per-file skips."""

    symbols: tuple[ChangedSymbol, ...]
    skips: tuple[ExtractionSkip, ...]
    files_considered: int
