"""Documentation scanning into heading-delimited segments and explicit bindings."""

from .bindings import BINDING_KINDS, CodeBinding, extract_bindings, scan_binding_paths
from .godoc import scan_go_doc, scan_go_doc_paths
from .models import DocSegment
from .scanner import discover_doc_files, scan_doc_paths, scan_markdown

__all__ = [
    "BINDING_KINDS",
    "CodeBinding",
    "DocSegment",
    "discover_doc_files",
    "extract_bindings",
    "scan_binding_paths",
    "scan_doc_paths",
    "scan_go_doc",
    "scan_go_doc_paths",
    "scan_markdown",
]
