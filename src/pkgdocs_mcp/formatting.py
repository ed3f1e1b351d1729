"""Formatting and error rendering helpers for MCP tool outputs."""

from __future__ import annotations

from typing import Any

from pkgdocs_mcp.contracts import build_error
from pkgdocs_mcp.docs.errors import (
    AllSourcesExhausted,
    DeadlineExceeded,
    DocsResolutionError,
    InvalidRequest,
    UnsupportedEcosystem,
)
from pkgdocs_mcp.docs.models import StructuredDocument

# =============================================================================
# Document formatting
# =============================================================================


def source_info(doc: StructuredDocument) -> dict[str, Any]:
    return {
        "name": doc.source_name,
        "kind": doc.source_kind.value,
        "cached_at": doc.cached_at.isoformat(sep=" ", timespec="seconds"),
        "degraded": doc.degraded,
        "diagnostics": [f.to_dict() for f in doc.diagnostics],
    }


def truncate_body(body: str, max_chars: int) -> tuple[str, bool]:
    """Cut a section body at a line boundary when it exceeds ``max_chars``."""
    if len(body) <= max_chars:
        return body, False
    cut = body.rfind("\n", 0, max_chars)
    if cut <= 0:
        cut = max_chars
    return body[:cut].rstrip() + "\n...", True


# =============================================================================
# Resolution error formatting
# =============================================================================

_ACTIONS = {
    AllSourcesExhausted: "check the package name and version, or install the package locally and pass project_path",
    DeadlineExceeded: "retry shortly; the fetch continues in the background and will be cached",
    UnsupportedEcosystem: "use one of the supported ecosystems",
    InvalidRequest: "fix the request arguments and retry",
}


def build_resolution_error(exc: DocsResolutionError) -> dict[str, Any]:
    """Build a unified error envelope for an engine failure."""
    details = dict(exc.details())
    for exc_type, action in _ACTIONS.items():
        if isinstance(exc, exc_type):
            details["action"] = action
            break
    return build_error(exc.code, str(exc), details or None)


def build_symbol_not_found(doc: StructuredDocument, symbol: str) -> dict[str, Any]:
    """Build the error envelope for a symbol missing from a resolved document."""
    known = [s.name for s in doc.symbols[:20]]
    return build_error(
        "symbol_not_found",
        f"Symbol '{symbol}' not found in {doc.key.describe()}",
        {
            "key": doc.key.to_dict(),
            "known_symbols": known,
            "action": "try search_package_docs with the symbol name as query",
        },
    )
