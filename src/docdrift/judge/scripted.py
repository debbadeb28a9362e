"""Deterministic judge used by tests and offline runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from docdrift.docs.models import DocSegment
from docdrift.judge.base import AnalyzeRequest, JudgeError, JudgeVerdict
from docdrift.symbols.models import ChangedSymbol

DEFAULT_VERDICT = JudgeVerdict(
    related=True,
    consistent=True,
    confidence=1.0,
    reason="scripted judge",
)


@dataclass(slots=True)
class ScriptedJudge:
    """Return configured answers and record every call.

    ``verdicts`` overrides the verdict per symbol name. ``relevant_indices``
    of ``None`` keeps every candidate. Setting ``analyze_error`` or
    ``relevance_error`` makes the matching method raise ``JudgeError``.
    """

    verdict: JudgeVerdict = DEFAULT_VERDICT
    verdicts: dict[str, JudgeVerdict] = field(default_factory=dict)
    relevant_indices: list[int] | None = None
    analyze_error: str | None = None
    relevance_error: str | None = None
    name: str = "scripted"
    analyze_calls: list[AnalyzeRequest] = field(default_factory=list)
    relevance_calls: list[tuple[str, int]] = field(default_factory=list)

    def analyze(self, request: AnalyzeRequest) -> JudgeVerdict:
        """Return the scripted verdict for request.symbol_name."""
        self.analyze_calls.append(request)
        if self.analyze_error is not None:
            raise JudgeError(self.analyze_error)
        return self.verdicts.get(request.symbol_name, self.verdict)

    def check_relevance_batch(
        self, symbol: ChangedSymbol, candidates: list[DocSegment]
    ) -> list[int]:
        """Return scripted indices that fall inside the candidate list."""
        self.relevance_calls.append((symbol.name, len(candidates)))
        if self.relevance_error is not None:
            raise JudgeError(self.relevance_error)
        if self.relevant_indices is None:
            return list(range(len(candidates)))
        return [index for index in self.relevant_indices if 0 <= index < len(candidates)]
