from __future__ import annotations

import json

import httpx
import pytest

from docdrift.config import JudgeConfig
from docdrift.docs.models import DocSegment
from docdrift.judge import AnalyzeRequest, ChatCompletionsJudge, JudgeError, judge_from_config
from docdrift.symbols.models import ChangedSymbol

_SYMBOL = ChangedSymbol(
    file="a.go", name="Fee", kind="const", change_kind="modified", start_line=1, end_line=1
)
_SEGMENTS = [
    DocSegment(file="a.md", heading=str(i), level=1, start_line=i, end_line=i, content="x")
    for i in range(1, 4)
]
_REQUEST = AnalyzeRequest(
    doc_content="Fee is 5.", code_content="const Fee = 7", symbol_name="Fee", file_path="a.go"
)


def _reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def _judge(handler, **kwargs: object) -> ChatCompletionsJudge:
    return ChatCompletionsJudge(
        "https://llm.test/v1/",
        "judge-model",
        transport=httpx.MockTransport(handler),
        **kwargs,  # type: ignore[arg-type]
    )


def test_analyze_posts_chat_request_and_parses_verdict() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _reply('{"related": true, "consistent": false, "confidence": 0.9, "reason": "7"}')

    judge = _judge(handler, api_key="secret")

    verdict = judge.analyze(_REQUEST)

    assert (verdict.related, verdict.consistent, verdict.confidence) == (True, False, 0.9)
    (request,) = seen
    assert request.url == "https://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["model"] == "judge-model"
    assert body["response_format"] == {"type": "json_object"}
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert "const Fee = 7" in body["messages"][1]["content"]


def test_relevance_batch_returns_indices_and_skips_empty_input() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _reply('{"relevant": [2, 0, 9]}')

    judge = _judge(handler)

    assert judge.check_relevance_batch(_SYMBOL, _SEGMENTS) == [2, 0]
    assert judge.check_relevance_batch(_SYMBOL, []) == []
    assert len(calls) == 1
    assert "Authorization" not in calls[0].headers


@pytest.mark.parametrize(
    ("response", "message"),
    [
        (httpx.Response(500, text="boom"), "openai request failed"),
        (httpx.Response(200, text="not json"), "non-JSON body"),
        (httpx.Response(200, json={"choices": []}), "no message content"),
    ],
)
def test_backend_failures_surface_as_judge_errors(response: httpx.Response, message: str) -> None:
    judge = _judge(lambda request: response)

    with pytest.raises(JudgeError, match=message):
        judge.analyze(_REQUEST)


def test_transport_errors_surface_as_judge_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    judge = _judge(handler, name="ollama")

    with pytest.raises(JudgeError, match="ollama request failed"):
        judge.check_relevance_batch(_SYMBOL, _SEGMENTS)


def test_judge_from_config_reads_key_from_environment() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _reply('{"related": true, "consistent": true, "confidence": 1}')

    config = JudgeConfig(
        provider="openai",
        model="m",
        base_url="https://llm.test/v1",
        api_key_env="DRIFT_KEY",
        timeout_seconds=5.0,
    )

    judge = judge_from_config(config, {"DRIFT_KEY": "k"}, transport=httpx.MockTransport(handler))
    disabled = judge_from_config(
        JudgeConfig("none", "", "", "DRIFT_KEY", 5.0), {"DRIFT_KEY": "k"}
    )

    assert judge is not None
    assert judge.analyze(_REQUEST).consistent is True
    assert seen[0].headers["Authorization"] == "Bearer k"
    assert disabled is None
    judge.close()
