"""Keyword heuristics scoring changed symbols against documentation segments.

Two independent confidence models live here:

* ``broad_match`` sums four heuristics (exact name, code fence, decomposed
  keywords, partial prefix) and clamps to 1.0. It is a high-recall pass meant
  to feed a semantic judge.
* ``quick_match`` scores only the share of decomposed keywords found in the
  segment and is used when no judge runs.

Neither applies a threshold; callers filter.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from docdrift.docs.models import DocSegment
from docdrift.matching.models import RelevanceResult
from docdrift.symbols.models import ChangedSymbol

EXACT_NAME_WEIGHT = 1.0
CODE_FENCE_WEIGHT = 0.8
KEYWORD_WEIGHT = 0.5
PARTIAL_PREFIX_WEIGHT = 0.3

MIN_KEYWORD_LENGTH = 3
MIN_PREFIX_NAME_LENGTH = 6
MIN_PREFIX_LENGTH = 4

CODE_BLOCK_PATTERN = re.compile(
    r"^ {0,3}(`{3,}|~{3,})[^\n]*\n(.*?)^ {0,3}\1", re.MULTILINE | re.DOTALL
)


@dataclass(slots=True, frozen=True)
class _SymbolTerms:
    name: str
    keywords: tuple[str, ...]
    prefix: str | None
    prefix_keyword: str | None


@dataclass(slots=True, frozen=True)
class _SegmentText:
    heading: str
    content: str
    code_blocks: tuple[str, ...]

    def contains(self, term: str) -> bool:
        return term in self.content or term in self.heading


_Heuristic = tuple[str, Callable[[_SymbolTerms, _SegmentText], float]]


def split_keywords(name: str) -> tuple[str, ...]:
    """Split a compound identifier at underscores and uppercase letters.

    ``MinimumNArgs`` becomes ``("minimum", "n", "args")``.
    """
    words: list[str] = []
    for part in name.split("_"):
        current: list[str] = []
        for index, char in enumerate(part):
            if index > 0 and "A" <= char <= "Z" and current:
                words.append("".join(current).lower())
                current = []
            current.append(char)
        if current:
            words.append("".join(current).lower())
    return tuple(words)


def broad_match(
    symbols: list[ChangedSymbol],
    segments: list[DocSegment],
) -> list[RelevanceResult]:
    """Score every (symbol, segment) pair with all four heuristics."""
    texts = [_segment_text(segment) for segment in segments]
    results: list[RelevanceResult] = []
    for symbol in symbols:
        terms = _symbol_terms(symbol.name)
        for segment, text in zip(segments, texts, strict=True):
            score = 0.0
            reasons: list[str] = []
            for label, heuristic in _BROAD_HEURISTICS:
                contribution = heuristic(terms, text)
                if contribution > 0:
                    score += contribution
                    reasons.append(label)
            if score <= 0:
                continue
            results.append(
                RelevanceResult(
                    symbol=symbol,
                    segment=segment,
                    confidence=min(score, 1.0),
                    reason=", ".join(reasons),
                )
            )
    return results


def quick_match(
    symbols: list[ChangedSymbol],
    segments: list[DocSegment],
) -> list[RelevanceResult]:
    """Score pairs by the fraction of decomposed keywords present in the segment."""
    texts = [_segment_text(segment) for segment in segments]
    results: list[RelevanceResult] = []
    for symbol in symbols:
        terms = _symbol_terms(symbol.name)
        if not terms.keywords:
            continue
        for segment, text in zip(segments, texts, strict=True):
            matched = _matched_keywords(terms, text)
            if matched == 0:
                continue
            reason = "keyword match"
            if text.contains(terms.name):
                reason = "exact name match, keyword match"
            results.append(
                RelevanceResult(
                    symbol=symbol,
                    segment=segment,
                    confidence=matched / len(terms.keywords),
                    reason=reason,
                )
            )
    return results


def reduce_results(results: list[RelevanceResult], policy: str = "max") -> list[RelevanceResult]:
    """Collapse results for the same (symbol, segment) pair.

    ``max`` keeps the highest-confidence result. ``sum`` adds confidences,
    clamped to 1.0, and joins distinct reasons. Groups keep first-seen order.
    """
    if policy not in ("max", "sum"):
        raise ValueError(f"Unknown reduce policy: {policy}")
    grouped: dict[tuple[str, str, str, str, int], RelevanceResult] = {}
    for result in results:
        key = result.pair_key()
        existing = grouped.get(key)
        if existing is None:
            grouped[key] = result
            continue
        if policy == "max":
            if result.confidence > existing.confidence:
                grouped[key] = result
            continue
        reasons = existing.reason.split(", ")
        reasons.extend(
            reason for reason in result.reason.split(", ") if reason and reason not in reasons
        )
        grouped[key] = RelevanceResult(
            symbol=existing.symbol,
            segment=existing.segment,
            confidence=min(existing.confidence + result.confidence, 1.0),
            reason=", ".join(reasons),
        )
    return list(grouped.values())


def group_by_symbol(
    results: list[RelevanceResult],
) -> dict[tuple[str, str], list[RelevanceResult]]:
    """Group results by (symbol file, symbol name) in first-seen order."""
    groups: dict[tuple[str, str], list[RelevanceResult]] = {}
    for result in results:
        groups.setdefault((result.symbol.file, result.symbol.name), []).append(result)
    return groups


def _symbol_terms(name: str) -> _SymbolTerms:
    lowered = name.lower()
    keywords = split_keywords(name)
    prefix: str | None = None
    prefix_keyword: str | None = None
    if len(name) >= MIN_PREFIX_NAME_LENGTH:
        candidate = lowered[: len(name) // 2]
        if len(candidate) >= MIN_PREFIX_LENGTH:
            prefix = candidate
            prefix_keyword = next((keyword for keyword in keywords if candidate in keyword), None)
    return _SymbolTerms(
        name=lowered, keywords=keywords, prefix=prefix, prefix_keyword=prefix_keyword
    )


def _segment_text(segment: DocSegment) -> _SegmentText:
    return _SegmentText(
        heading=segment.heading.lower(),
        content=segment.content.lower(),
        code_blocks=tuple(
            match.group(2).lower() for match in CODE_BLOCK_PATTERN.finditer(segment.content)
        ),
    )


def _matched_keywords(terms: _SymbolTerms, text: _SegmentText) -> int:
    return sum(
        1
        for keyword in terms.keywords
        if len(keyword) >= MIN_KEYWORD_LENGTH and text.contains(keyword)
    )


def _exact_name(terms: _SymbolTerms, text: _SegmentText) -> float:
    if terms.name and text.contains(terms.name):
        return EXACT_NAME_WEIGHT
    return 0.0


def _code_fence(terms: _SymbolTerms, text: _SegmentText) -> float:
    if terms.name and any(terms.name in block for block in text.code_blocks):
        return CODE_FENCE_WEIGHT
    return 0.0


def _decomposed_keywords(terms: _SymbolTerms, text: _SegmentText) -> float:
    if not terms.keywords:
        return 0.0
    return KEYWORD_WEIGHT * _matched_keywords(terms, text) / len(terms.keywords)


def _partial_prefix(terms: _SymbolTerms, text: _SegmentText) -> float:
    if terms.prefix is None or not text.contains(terms.prefix):
        return 0.0
    if terms.prefix_keyword is None:
        return PARTIAL_PREFIX_WEIGHT
    # A prefix inside one sub-word stands in for that sub-word and is worth at most its share.
    if text.contains(terms.prefix_keyword):
        return 0.0
    return min(PARTIAL_PREFIX_WEIGHT, KEYWORD_WEIGHT / len(terms.keywords))


_BROAD_HEURISTICS: tuple[_Heuristic, ...] = (
    ("exact name match", _exact_name),
    ("found in code block", _code_fence),
    ("keyword match", _decomposed_keywords),
    ("partial name match", _partial_prefix),
)
