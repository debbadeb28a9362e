"""Core adapter protocol and declaration types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

SymbolKind = Literal["function", "type", "const", "var"]


@dataclass(slots=True, frozen=True)
class FunctionDecl:
    """Top-level function or method declaration."""

    name: str
    receiver: str | None
    start_line: int
    end_line: int
    code: str

    @property
    def kind(self) -> SymbolKind:
        return "function"

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,)


@dataclass(slots=True, frozen=True)
class TypeDecl:
    """Top-level type declaration; ``shape`` is the underlying type keyword."""

    name: str
    shape: str
    start_line: int
    end_line: int
    code: str

    @property
    def kind(self) -> SymbolKind:
        return "type"

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,)

    @property
    def is_struct(self) -> bool:
        return self.shape == "struct"


@dataclass(slots=True, frozen=True)
class ConstGroup:
    """A ``const`` declaration, single or parenthesized, with every bound name."""

    names: tuple[str, ...]
    start_line: int
    end_line: int
    code: str

    @property
    def kind(self) -> SymbolKind:
        return "const"


@dataclass(slots=True, frozen=True)
class VarGroup:
    """A ``var`` declaration, single or parenthesized, with every bound name."""

    names: tuple[str, ...]
    start_line: int
    end_line: int
    code: str

    @property
    def kind(self) -> SymbolKind:
        return "var"


Declaration = FunctionDecl | TypeDecl | ConstGroup | VarGroup


class SourceParseError(ValueError):
    """Raised when source text cannot be parsed into declarations."""

    def __init__(self, path: str, reason: str, line: int | None = None) -> None:
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"{location}: {reason}")
        self.path = path
        self.reason = reason
        self.line = line


def declaration_sort_key(declaration: Declaration) -> tuple[int, int, str]:
    """Return deterministic sort key for declarations."""
    return (declaration.start_line, declaration.end_line, declaration.kind)


def is_reportable(declaration: Declaration) -> bool:
    """Return True for declarations that produce changed symbols.

    Only record-shaped type declarations are tracked; interfaces and aliases
    are skipped.
    """
    if isinstance(declaration, TypeDecl):
        return declaration.is_struct
    return True


class LanguageAdapter(Protocol):
    """Protocol implemented by the active source grammar."""

    name: str

    def supports_path(self, path: str) -> bool:
        """Return True when adapter supports a file path."""

    def parse(self, path: str, text: str) -> list[Declaration]:
        """Return top-level declarations or raise SourceParseError."""
