"""Resolution orchestration."""

from pkgdocs_mcp.docs.query.resolver import (
    DocsRequest,
    DocsResolver,
    SearchOutcome,
    close_resolver,
    find_symbol,
    get_resolver,
    set_resolver,
)

__all__ = [
    "DocsRequest",
    "DocsResolver",
    "SearchOutcome",
    "close_resolver",
    "find_symbol",
    "get_resolver",
    "set_resolver",
]
