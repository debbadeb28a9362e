"""Heuristic relevance matching between changed symbols and documentation."""

from .matcher import (
    CODE_FENCE_WEIGHT,
    EXACT_NAME_WEIGHT,
    KEYWORD_WEIGHT,
    PARTIAL_PREFIX_WEIGHT,
    broad_match,
    group_by_symbol,
    quick_match,
    reduce_results,
    split_keywords,
)
from .models import RelevanceResult

__all__ = [
    "CODE_FENCE_WEIGHT",
    "EXACT_NAME_WEIGHT",
    "KEYWORD_WEIGHT",
    "PARTIAL_PREFIX_WEIGHT",
    "RelevanceResult",
    "broad_match",
    "group_by_symbol",
    "quick_match",
    "reduce_results",
    "split_keywords",
]
