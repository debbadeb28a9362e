"""Runtime construction of the active source grammar adapter."""

from __future__ import annotations

from docdrift.adapters.base import LanguageAdapter
from docdrift.adapters.go import GoDeclarationAdapter
from docdrift.config import SourceConfig

_ADAPTERS_BY_EXTENSION: dict[str, type[GoDeclarationAdapter]] = {
    ".go": GoDeclarationAdapter,
}


def build_source_adapter(source: SourceConfig) -> LanguageAdapter:
    """Return the adapter for the configured source extension."""
    adapter_type = _ADAPTERS_BY_EXTENSION.get(source.extension)
    if adapter_type is None:
        supported = ", ".join(sorted(_ADAPTERS_BY_EXTENSION))
        raise LookupError(
            f"No declaration parser for extension '{source.extension}' (supported: {supported})."
        )
    return adapter_type()
