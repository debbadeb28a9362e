"""Typed models for relevance matching."""

from __future__ import annotations

from dataclasses import dataclass

from docdrift.docs.models import DocSegment
from docdrift.symbols.models import ChangedSymbol


@dataclass(slots=True, frozen=True)
class RelevanceResult:
    """Scored association between a changed symbol and a doc segment."""

    symbol: ChangedSymbol
    segment: DocSegment
    confidence: float
    reason: str

    def pair_key(self) -> tuple[str, str, str, str, int]:
        """Return the identity of the (symbol, segment) pair."""
        return (
            self.symbol.file,
            self.symbol.name,
            self.symbol.change_kind,
            self.segment.file,
            self.segment.start_line,
        )
