"""Judge backed by an OpenAI-compatible ``/chat/completions`` endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from docdrift.config import JudgeConfig
from docdrift.docs.models import DocSegment
from docdrift.judge.base import AnalyzeRequest, JudgeError, JudgeVerdict
from docdrift.judge.prompts import (
    CONSISTENCY_SYSTEM_PROMPT,
    RELEVANCE_SYSTEM_PROMPT,
    build_consistency_prompt,
    build_relevance_prompt,
    parse_relevance_response,
    parse_verdict_response,
)
from docdrift.symbols.models import ChangedSymbol

CHAT_COMPLETIONS_PATH = "/chat/completions"
JUDGE_TEMPERATURE = 0.1


class ChatCompletionsJudge:
    """Ask a chat model for relevance and consistency verdicts.

    Works with any server speaking the OpenAI chat completions dialect,
    including a local Ollama instance under ``/v1``. Transport and HTTP
    failures surface as JudgeError so the engine can fall back.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        api_key: str | None = None,
        timeout: float = 60.0,
        name: str = "openai",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.name = name
        self._model = model
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def analyze(self, request: AnalyzeRequest) -> JudgeVerdict:
        """Return whether the documentation still matches the code."""
        reply = self._complete(CONSISTENCY_SYSTEM_PROMPT, build_consistency_prompt(request))
        return parse_verdict_response(reply)

    def check_relevance_batch(
        self, symbol: ChangedSymbol, candidates: list[DocSegment]
    ) -> list[int]:
        """Return indices of candidates the model judges relevant."""
        if not candidates:
            return []
        reply = self._complete(RELEVANCE_SYSTEM_PROMPT, build_relevance_prompt(symbol, candidates))
        return parse_relevance_response(reply, len(candidates))

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": JUDGE_TEMPERATURE,
            "response_format": {"type": "json_object"},
        }
        try:
            response = self._client.post(CHAT_COMPLETIONS_PATH, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as error:
            raise JudgeError(f"{self.name} request failed: {error}") from error
        except ValueError as error:
            raise JudgeError(f"{self.name} returned a non-JSON body") from error
        return _message_content(body)


def judge_from_config(
    config: JudgeConfig,
    environ: Mapping[str, str],
    transport: httpx.BaseTransport | None = None,
) -> ChatCompletionsJudge | None:
    """Build the configured judge, or None when the provider is ``none``."""
    if config.provider == "none":
        return None
    return ChatCompletionsJudge(
        config.base_url,
        config.model,
        api_key=environ.get(config.api_key_env),
        timeout=config.timeout_seconds,
        name=config.provider,
        transport=transport,
    )


def _message_content(body: Any) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as error:
        raise JudgeError("Judge response has no message content") from error
    if not isinstance(content, str):
        raise JudgeError("Judge response has no message content")
    return content
