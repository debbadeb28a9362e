"""Semantic judge boundary: request/verdict types, prompts, judges."""

from .base import AnalyzeRequest, JudgeError, JudgeVerdict, SemanticJudge
from .chat import ChatCompletionsJudge, judge_from_config
from .prompts import (
    CONSISTENCY_SYSTEM_PROMPT,
    RELEVANCE_SYSTEM_PROMPT,
    build_consistency_prompt,
    build_relevance_prompt,
    parse_relevance_response,
    parse_verdict_response,
)
from .scripted import ScriptedJudge

__all__ = [
    "AnalyzeRequest",
    "CONSISTENCY_SYSTEM_PROMPT",
    "ChatCompletionsJudge",
    "JudgeError",
    "JudgeVerdict",
    "RELEVANCE_SYSTEM_PROMPT",
    "ScriptedJudge",
    "SemanticJudge",
    "build_consistency_prompt",
    "build_relevance_prompt",
    "judge_from_config",
    "parse_relevance_response",
    "parse_verdict_response",
]
