"""Changed-symbol extraction from diffs."""

from .extractor import SymbolExtractor, lookup_old_code
from .models import ChangedSymbol, ExtractionResult, ExtractionSkip

__all__ = [
    "ChangedSymbol",
    "ExtractionResult",
    "ExtractionSkip",
    "SymbolExtractor",
    "lookup_old_code",
]
