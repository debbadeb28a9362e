"""Explicit documentation-to-code bindings declared with HTML comments.

A bound block looks like::

    <!-- docdrift:start -->
    <!-- docdrift:bind path="pkg/shipping.go" func="CalculateShipping" -->
    Orders of 1000 or more ship free.
    <!-- docdrift:end -->

Text after the bind marker up to the end marker is the documentation checked
against the named declaration. Lines before the bind marker are ignored.
The attribute name picks the declaration kind: ``func``, ``struct`` (any
``type``), ``const`` or ``var``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from docdrift.docs.scanner import discover_doc_files

BLOCK_START_PATTERN = re.compile(r"<!--\s*docdrift:start\s*-->")
BLOCK_END_PATTERN = re.compile(r"<!--\s*docdrift:end\s*-->")
BIND_PATTERN = re.compile(r'<!--\s*docdrift:bind\s+path="([^"]+)"\s+(\w+)="([^"]+)"\s*-->')

BINDING_KINDS = {
    "func": "function",
    "function": "function",
    "struct": "type",
    "type": "type",
    "const": "const",
    "var": "var",
}


@dataclass(slots=True, frozen=True)
class CodeBinding:
    """One documentation block tied to a named declaration."""

    doc_file: str
    doc_line: int
    code_file: str
    kind: str
    symbol: str
    content: str


@dataclass(slots=True)
class _OpenBinding:
    doc_line: int
    code_file: str
    kind: str
    symbol: str
    lines: list[str]

    def close(self, doc_file: str) -> CodeBinding:
        return CodeBinding(
            doc_file=doc_file,
            doc_line=self.doc_line,
            code_file=self.code_file,
            kind=self.kind,
            symbol=self.symbol,
            content="\n".join(self.lines).strip(),
        )


def extract_bindings(text: str, path: str = "") -> list[CodeBinding]:
    """Return bindings declared in one Markdown document, in document order.

    A second bind marker inside the same block closes the previous binding.
    A block left open at end of input yields nothing.
    """
    bindings: list[CodeBinding] = []
    in_block = False
    current: _OpenBinding | None = None

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.rstrip("\r")
        if BLOCK_START_PATTERN.search(line):
            in_block = True
            current = None
            continue
        if BLOCK_END_PATTERN.search(line):
            if current is not None:
                bindings.append(current.close(path))
            in_block = False
            current = None
            continue
        if not in_block:
            continue
        bind = BIND_PATTERN.search(line)
        if bind is not None:
            if current is not None:
                bindings.append(current.close(path))
            current = _OpenBinding(
                doc_line=line_number,
                code_file=bind.group(1),
                kind=_binding_kind(bind.group(2)),
                symbol=bind.group(3),
                lines=[],
            )
        elif current is not None:
            current.lines.append(line)
    return bindings


def scan_binding_paths(
    root: Path,
    patterns: tuple[str, ...],
    exclude_globs: tuple[str, ...] = (),
) -> list[CodeBinding]:
    """Collect bindings from every matching document; unreadable files are skipped."""
    bindings: list[CodeBinding] = []
    for relative in discover_doc_files(root, patterns, exclude_globs):
        try:
            text = (root / relative).read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        bindings.extend(extract_bindings(text, relative))
    return bindings


def _binding_kind(attribute: str) -> str:
    # Unknown attribute names bind a function.
    return BINDING_KINDS.get(attribute.lower(), "function")
