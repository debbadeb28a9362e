"""Semantic judge interface consumed by the drift engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from docdrift.docs.models import DocSegment
from docdrift.symbols.models import ChangedSymbol


class JudgeError(RuntimeError):
    """Raised when the judge cannot produce an answer."""


@dataclass(slots=True, frozen=True)
class AnalyzeRequest:
    """Fields sent to the judge for one (symbol, segment) pair."""

    doc_content: str
    code_content: str
    symbol_name: str
    file_path: str
    symbol_kind: str = ""
    change_kind: str = ""
    old_code: str = ""
    doc_file: str = ""
    doc_heading: str = ""

    @classmethod
    def from_pair(cls, symbol: ChangedSymbol, segment: DocSegment) -> AnalyzeRequest:
        """Build a request from extracted and scanned records."""
        return cls(
            doc_content=segment.content,
            code_content=symbol.code(),
            symbol_name=symbol.name,
            file_path=symbol.file,
            symbol_kind=symbol.kind,
            change_kind=symbol.change_kind,
            old_code=symbol.old_code,
            doc_file=segment.file,
            doc_heading=segment.heading,
        )


@dataclass(slots=True, frozen=True)
class JudgeVerdict:
    """Judge answer for one pair."""

    related: bool
    consistent: bool
    confidence: float
    reason: str
    suggestion: str = ""


class SemanticJudge(Protocol):
    """Protocol implemented by LLM-backed or scripted judges."""

    name: str

    def analyze(self, request: AnalyzeRequest) -> JudgeVerdict:
        """Return whether the documentation still matches the code."""

    def check_relevance_batch(
        self, symbol: ChangedSymbol, candidates: list[DocSegment]
    ) -> list[int]:
        """Return indices of candidates that describe the symbol."""
