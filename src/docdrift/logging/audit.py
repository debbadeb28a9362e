"""Append-only JSONL audit trail for drift check runs."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

AUDIT_FILE_NAME = "audit.jsonl"

_VERBATIM_STRING_KEYS = frozenset(
    {"base", "file", "mode", "path", "policy", "reason", "revision", "source", "symbol"}
)
_REDACTED_STRING_KEYS = frozenset({"code", "content", "diff", "prompt", "suggestion"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One pipeline stage outcome with sanitized metadata."""

    timestamp: str
    run_id: str
    stage: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_run_id() -> str:
    """Return a short identifier shared by every event of one run."""
    return uuid.uuid4().hex[:12]


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Reduce metadata to loggable scalars; source and doc text is never written."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments.keys()):
        value = arguments[key]
        if key in _REDACTED_STRING_KEYS and isinstance(value, str):
            sanitized[f"{key}_present"] = bool(value)
            sanitized[f"{key}_length"] = len(value)
            continue
        if key in _VERBATIM_STRING_KEYS and isinstance(value, str):
            sanitized[key] = value
            continue
        if isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
            continue
        if isinstance(value, str):
            sanitized[f"{key}_present"] = bool(value)
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (list, tuple)):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def for_data_dir(cls, data_dir: Path) -> JsonlAuditLogger:
        """Return a logger writing to the standard file inside data_dir."""
        return cls(data_dir / AUDIT_FILE_NAME)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def record(
        self,
        run_id: str,
        stage: str,
        metadata: dict[str, object],
        *,
        ok: bool = True,
        error_code: str | None = None,
    ) -> AuditEvent:
        """Sanitize metadata, append the event, and return it."""
        event = AuditEvent(
            timestamp=utc_timestamp(),
            run_id=run_id,
            stage=stage,
            ok=ok,
            error_code=error_code,
            metadata=sanitize_arguments(metadata),
        )
        self.append(event)
        return event

    def read(
        self,
        since: str | None = None,
        limit: int = 50,
        stage: str | None = None,
    ) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound and stage."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                if stage is not None and record.get("stage") != stage:
                    continue
                entries.append(record)
        return entries[-limit:]
