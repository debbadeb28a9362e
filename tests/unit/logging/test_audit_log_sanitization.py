from __future__ import annotations

import json
from pathlib import Path

from docdrift.logging import JsonlAuditLogger, sanitize_arguments


def test_code_and_content_values_are_replaced_by_length() -> None:
    sanitized = sanitize_arguments(
        {"code": "const Secret = \"s3cr3t\"", "content": "", "symbol": "Secret"}
    )

    assert sanitized == {
        "code_length": len('const Secret = "s3cr3t"'),
        "code_present": True,
        "content_length": 0,
        "content_present": False,
        "symbol": "Secret",
    }


def test_unknown_strings_and_containers_are_summarized() -> None:
    sanitized = sanitize_arguments(
        {
            "note": "token=abc123",
            "paths": ["a.go", "b.go"],
            "extra": {"b": 1, "a": 2},
            "ratio": 0.5,
            "flag": None,
            "where": Path("x"),
        }
    )

    assert sanitized["note_present"] is True
    assert sanitized["note_length"] == len("token=abc123")
    assert "note" not in sanitized
    assert sanitized["paths_type"] == "list"
    assert sanitized["paths_length"] == 2
    assert sanitized["extra_keys"] == ["a", "b"]
    assert sanitized["ratio"] == 0.5
    assert sanitized["flag"] is None
    assert sanitized["where_type"] == type(Path("x")).__name__


def test_recorded_event_never_contains_redacted_text(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "audit.jsonl")

    logger.record("run", "judge", {"prompt": "API_KEY=top-secret", "file": "a.go"})

    text = logger.path.read_text(encoding="utf-8")
    event = json.loads(text)
    assert "API_KEY=top-secret" not in text
    assert event["metadata"]["file"] == "a.go"
    assert event["metadata"]["prompt_length"] == len("API_KEY=top-secret")
