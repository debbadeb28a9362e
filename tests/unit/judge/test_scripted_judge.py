from __future__ import annotations

import pytest

from docdrift.docs.models import DocSegment
from docdrift.judge import AnalyzeRequest, JudgeError, JudgeVerdict, ScriptedJudge
from docdrift.symbols.models import ChangedSymbol

_SYMBOL = ChangedSymbol(
    file="a.go", name="Fee", kind="const", change_kind="modified", start_line=1, end_line=1
)
_SEGMENTS = [
    DocSegment(file="a.md", heading=str(i), level=1, start_line=i, end_line=i, content="x")
    for i in range(1, 4)
]


def _request(name: str) -> AnalyzeRequest:
    return AnalyzeRequest(doc_content="d", code_content="c", symbol_name=name, file_path="a.go")


def test_scripted_judge_returns_per_symbol_verdicts_and_records_calls() -> None:
    drift = JudgeVerdict(related=True, consistent=False, confidence=0.9, reason="value changed")
    judge = ScriptedJudge(verdicts={"Fee": drift})

    assert judge.analyze(_request("Fee")) == drift
    assert judge.analyze(_request("Other")).consistent is True
    assert [call.symbol_name for call in judge.analyze_calls] == ["Fee", "Other"]


def test_scripted_relevance_defaults_to_all_and_filters_out_of_range() -> None:
    assert ScriptedJudge().check_relevance_batch(_SYMBOL, _SEGMENTS) == [0, 1, 2]

    judge = ScriptedJudge(relevant_indices=[2, 5, -1])
    assert judge.check_relevance_batch(_SYMBOL, _SEGMENTS) == [2]
    assert judge.relevance_calls == [("Fee", 3)]


def test_scripted_errors_raise_judge_error() -> None:
    judge = ScriptedJudge(analyze_error="timeout", relevance_error="rate limited")

    with pytest.raises(JudgeError, match="timeout"):
        judge.analyze(_request("Fee"))
    with pytest.raises(JudgeError, match="rate limited"):
        judge.check_relevance_batch(_SYMBOL, _SEGMENTS)
