"""Go doc comments as documentation segments.

The package doc becomes a level-1 segment headed ``Package <name>``; doc
comments on functions, methods and types become level-2 segments headed
``func <Name>`` or ``type <Name>``. A doc comment is the comment group that
ends on the line directly above the declaration.
"""

from __future__ import annotations

import re
from pathlib import Path

from docdrift.adapters.base import FunctionDecl, SourceParseError, TypeDecl
from docdrift.adapters.go import GoDeclarationAdapter
from docdrift.adapters.lexical import mask_comments_and_strings
from docdrift.config import SourceConfig
from docdrift.diff.parser import is_source_path
from docdrift.docs.models import DocSegment

PACKAGE_PATTERN = re.compile(r"^\s*package\s+([^\W\d]\w*)")
DIRECTIVE_PATTERN = re.compile(r"^//(?:line |extern |export |[a-z0-9]+:[a-z0-9])")


def scan_go_doc(text: str, path: str = "") -> list[DocSegment]:
    """Return doc comment segments for one Go file.

    Raises SourceParseError when the file cannot be parsed.
    """
    declarations = GoDeclarationAdapter().parse(path, text)
    lines = [line.rstrip("\r") for line in text.split("\n")]
    segments: list[DocSegment] = []

    for index, masked_line in enumerate(mask_comments_and_strings(text).split("\n")):
        package = PACKAGE_PATTERN.match(masked_line)
        if package is not None:
            segment = _doc_segment(lines, index, path, f"Package {package.group(1)}", 1)
            if segment is not None:
                segments.append(segment)
            break

    for declaration in declarations:
        if isinstance(declaration, FunctionDecl):
            heading = f"func {declaration.name}"
        elif isinstance(declaration, TypeDecl):
            heading = f"type {declaration.name}"
        else:
            continue
        segment = _doc_segment(lines, declaration.start_line - 1, path, heading, 2)
        if segment is not None:
            segments.append(segment)
    return segments


def scan_go_doc_paths(root: Path, source: SourceConfig) -> list[DocSegment]:
    """Scan doc comments of every source file under root.

    Unreadable or unparsable files are skipped.
    """
    resolved_root = root.resolve()
    segments: list[DocSegment] = []
    for candidate in sorted(resolved_root.rglob(f"*{source.extension}")):
        relative = candidate.relative_to(resolved_root).as_posix()
        if not candidate.is_file() or not is_source_path(relative, source):
            continue
        try:
            text = candidate.read_text(encoding="utf-8", errors="replace")
            segments.extend(scan_go_doc(text, relative))
        except (OSError, SourceParseError):
            continue
    return segments


def _doc_segment(
    lines: list[str], declaration_index: int, path: str, heading: str, level: int
) -> DocSegment | None:
    group = _comment_group_above(lines, declaration_index)
    if group is None:
        return None
    start, end = group
    content = _comment_text(lines[start : end + 1])
    if not content:
        return None
    return DocSegment(
        file=path,
        heading=heading,
        level=level,
        start_line=start + 1,
        end_line=end + 1,
        content=content,
    )


def _comment_group_above(lines: list[str], index: int) -> tuple[int, int] | None:
    end = index - 1
    if end < 0:
        return None
    above = lines[end].strip()
    if above.startswith("//"):
        start = end
        while start > 0 and lines[start - 1].strip().startswith("//"):
            start -= 1
        return start, end
    if above.endswith("*/"):
        start = end
        while start >= 0 and "/*" not in lines[start]:
            start -= 1
        if start < 0 or not lines[start].lstrip().startswith("/*"):
            return None
        return start, end
    return None


def _comment_text(raw_lines: list[str]) -> str:
    body: list[str] = []
    if raw_lines[0].lstrip().startswith("//"):
        for raw in raw_lines:
            stripped = raw.strip()
            if DIRECTIVE_PATTERN.match(stripped):
                continue
            text = stripped[2:]
            body.append((text[1:] if text.startswith(" ") else text).rstrip())
    else:
        block = "\n".join(raw_lines).strip()[2:-2]
        body = [line.rstrip() for line in block.split("\n")]

    collapsed: list[str] = []
    for line in body:
        if not line and (not collapsed or not collapsed[-1]):
            continue
        collapsed.append(line)
    while collapsed and not collapsed[-1]:
        collapsed.pop()
    return "\n".join(collapsed)
