"""Typed models for scanned documentation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class DocSegment:
    """Heading-delimited documentation unit.

    ``level`` is 0 for text that precedes the first heading.
    """

    file: str
    heading: str
    level: int
    start_line: int
    end_line: int
    content: str
