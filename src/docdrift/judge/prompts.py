"""Prompt text for LLM-backed judges and parsers for their JSON replies."""

from __future__ import annotations

import json
import re
from typing import Any

from docdrift.docs.models import DocSegment
from docdrift.judge.base import AnalyzeRequest, JudgeError, JudgeVerdict
from docdrift.symbols.models import ChangedSymbol

CANDIDATE_PREVIEW_CHARS = 500

RELEVANCE_SYSTEM_PROMPT = """\
You decide which documentation segments describe a given code symbol.

Reply with JSON only: {"relevant": [indices of relevant segments]}

Guidelines:
1. A segment is relevant if it specifically describes this symbol.
2. A segment is relevant if it contains usage examples of this symbol.
3. A segment is not relevant if it only mentions the name in passing.
4. A segment is not relevant if it describes a different, similarly named symbol.
5. When in doubt, include the segment."""

CONSISTENCY_SYSTEM_PROMPT = """\
You check whether documentation still matches a code implementation.

First decide whether the documentation describes this specific symbol.
Reply with JSON only, using these fields:
- related: boolean, whether the documentation is about this symbol
- consistent: boolean, whether documentation and code agree (true when not related)
- confidence: number between 0 and 1
- reason: string explaining the judgment
- suggestion: string with a documentation fix when inconsistent

Values, thresholds and conditions must match exactly. Extra behaviour in the
code that the documentation does not mention is acceptable."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def build_relevance_prompt(symbol: ChangedSymbol, candidates: list[DocSegment]) -> str:
    """Render the batch relevance question for one symbol."""
    lines = [
        "## Code Symbol",
        f"Name: {symbol.name}",
        f"Kind: {symbol.kind}",
        f"File: {symbol.file}",
        "",
        "```go",
        symbol.code(),
        "```",
        "",
        "## Candidate Documentation Segments",
        "",
    ]
    for index, segment in enumerate(candidates):
        content = segment.content
        if len(content) > CANDIDATE_PREVIEW_CHARS:
            content = content[:CANDIDATE_PREVIEW_CHARS] + "..."
        lines.append(f"[{index}] {segment.file} - {segment.heading}")
        lines.append(content)
        lines.append("")
    lines.append("Which segments (by index) specifically describe this code symbol?")
    lines.append('Output JSON: {"relevant": [list of indices]}')
    return "\n".join(lines)


def build_consistency_prompt(request: AnalyzeRequest) -> str:
    """Render the consistency question for one (symbol, segment) pair."""
    lines = [
        "Check whether the following documentation matches the code.",
        "",
        "## Documentation",
        request.doc_content,
        "",
        "## Code Implementation",
        f"File: {request.file_path}",
        f"Symbol: {request.symbol_name}",
        "",
        "```go",
        request.code_content,
        "```",
    ]
    if request.old_code and request.old_code != request.code_content:
        lines.extend(["", "## Previous Implementation", "```go", request.old_code, "```"])
    lines.extend(
        [
            "",
            f'First decide whether the documentation describes "{request.symbol_name}".',
            'If it does not, answer {"related": false, "consistent": true, ...}.',
            "Otherwise check the description against the implementation.",
        ]
    )
    return "\n".join(lines)


def parse_relevance_response(text: str, candidate_count: int) -> list[int]:
    """Return valid, de-duplicated candidate indices from a relevance reply."""
    payload = _load_object(text)
    raw = payload.get("relevant")
    if not isinstance(raw, list):
        raise JudgeError("Relevance reply has no 'relevant' list")
    indices: list[int] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, int):
            continue
        if 0 <= item < candidate_count and item not in indices:
            indices.append(item)
    return indices


def parse_verdict_response(text: str) -> JudgeVerdict:
    """Return the verdict encoded in a consistency reply."""
    payload = _load_object(text)
    related = payload.get("related", True)
    consistent = payload.get("consistent")
    if not isinstance(related, bool) or not isinstance(consistent, bool):
        raise JudgeError("Verdict reply needs boolean 'related' and 'consistent'")
    confidence = payload.get("confidence", 0.0)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise JudgeError("Verdict reply has a non-numeric 'confidence'")
    return JudgeVerdict(
        related=related,
        consistent=consistent or not related,
        confidence=min(max(float(confidence), 0.0), 1.0),
        reason=str(payload.get("reason", "")),
        suggestion=str(payload.get("suggestion", "")),
    )


def _load_object(text: str) -> dict[str, Any]:
    match = _JSON_OBJECT.search(text)
    if match is None:
        raise JudgeError("Judge reply contains no JSON object")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as error:
        raise JudgeError(f"Judge reply is not valid JSON: {error.msg}") from error
    if not isinstance(payload, dict):
        raise JudgeError("Judge reply is not a JSON object")
    return payload
