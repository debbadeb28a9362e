"""Single-pass Markdown scanner producing heading-delimited segments."""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from pathlib import Path

from docdrift.docs.models import DocSegment

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CLOSING_HASHES = re.compile(r"\s+#+\s*$")


@dataclass(slots=True)
class _OpenSegment:
    heading: str
    level: int
    start_line: int
    lines: list[str] = field(default_factory=list)

    def close(self, file: str, end_line: int) -> DocSegment | None:
        body = self.lines[1:] if self.level > 0 else self.lines
        if not any(line.strip() for line in body):
            return None
        return DocSegment(
            file=file,
            heading=self.heading,
            level=self.level,
            start_line=self.start_line,
            end_line=end_line,
            content="\n".join(_trim_blank_lines(self.lines)),
        )


def scan_markdown(text: str, path: str = "") -> list[DocSegment]:
    """Split Markdown text into segments, one per heading.

    Headings inside fenced code blocks are ordinary content. A heading with
    no body before the next heading yields no segment.
    """
    segments: list[DocSegment] = []
    current = _OpenSegment(heading="", level=0, start_line=1)
    fence: str | None = None
    lines = _split_lines(text)

    for line_number, line in enumerate(lines, start=1):
        fence_match = FENCE_PATTERN.match(line)
        if fence_match is not None:
            marker = fence_match.group(1)[0]
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            current.lines.append(line)
            continue

        if fence is None:
            heading = HEADING_PATTERN.match(line)
            if heading is not None:
                closed = current.close(path, line_number - 1)
                if closed is not None:
                    segments.append(closed)
                current = _OpenSegment(
                    heading=_CLOSING_HASHES.sub("", heading.group(2)).strip(),
                    level=len(heading.group(1)),
                    start_line=line_number,
                    lines=[line],
                )
                continue

        current.lines.append(line)

    closed = current.close(path, len(lines))
    if closed is not None:
        segments.append(closed)
    return segments


def discover_doc_files(
    root: Path,
    patterns: tuple[str, ...],
    exclude_globs: tuple[str, ...] = (),
) -> list[str]:
    """Return sorted repository-relative paths matching any include pattern."""
    resolved_root = root.resolve()
    found: set[str] = set()
    for pattern in patterns:
        for candidate in resolved_root.glob(pattern):
            if not candidate.is_file():
                continue
            try:
                relative = candidate.resolve().relative_to(resolved_root).as_posix()
            except ValueError:
                continue
            if _is_excluded(relative, exclude_globs):
                continue
            found.add(relative)
    return sorted(found)


def scan_doc_paths(
    root: Path,
    patterns: tuple[str, ...],
    exclude_globs: tuple[str, ...] = (),
) -> list[DocSegment]:
    """Scan every matching Markdown file; unreadable files are skipped."""
    segments: list[DocSegment] = []
    for relative in discover_doc_files(root, patterns, exclude_globs):
        try:
            text = (root / relative).read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        segments.extend(scan_markdown(text, relative))
    return segments


def _split_lines(text: str) -> list[str]:
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _trim_blank_lines(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _is_excluded(relative: str, exclude_globs: tuple[str, ...]) -> bool:
    for pattern in exclude_globs:
        if fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(f"/{relative}", pattern):
            return True
    return False
