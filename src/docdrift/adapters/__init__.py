"""Source grammar adapters."""

from .base import (
    ConstGroup,
    Declaration,
    FunctionDecl,
    LanguageAdapter,
    SourceParseError,
    SymbolKind,
    TypeDecl,
    VarGroup,
    declaration_sort_key,
    is_reportable,
)
from .go import GoDeclarationAdapter
from .lexical import (
    GO_LEXICAL_RULES,
    BracketScanResult,
    LexicalRules,
    MaskResult,
    mask_comments_and_strings,
    mask_source,
    scan_brackets,
)
from .runtime import build_source_adapter

__all__ = [
    "BracketScanResult",
    "ConstGroup",
    "Declaration",
    "FunctionDecl",
    "GO_LEXICAL_RULES",
    "GoDeclarationAdapter",
    "LanguageAdapter",
    "LexicalRules",
    "MaskResult",
    "SourceParseError",
    "SymbolKind",
    "TypeDecl",
    "VarGroup",
    "build_source_adapter",
    "declaration_sort_key",
    "is_reportable",
    "mask_comments_and_strings",
    "mask_source",
    "scan_brackets",
]
