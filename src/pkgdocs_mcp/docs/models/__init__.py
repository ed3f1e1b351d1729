"""Data models for documentation resolution."""

from pkgdocs_mcp.docs.models.document import (
    ContentFormat,
    DocumentSection,
    Ecosystem,
    RawFetchResult,
    ResolutionKey,
    SectionLabel,
    SourceKind,
    StructuredDocument,
    SymbolRef,
)
from pkgdocs_mcp.docs.models.failure import FailureKind, SourceFailure
from pkgdocs_mcp.docs.models.search_result import SearchResult

__all__ = [
    "ContentFormat",
    "DocumentSection",
    "Ecosystem",
    "FailureKind",
    "RawFetchResult",
    "ResolutionKey",
    "SearchResult",
    "SectionLabel",
    "SourceFailure",
    "SourceKind",
    "StructuredDocument",
    "SymbolRef",
]
