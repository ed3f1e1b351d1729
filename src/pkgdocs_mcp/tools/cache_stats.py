"""Documentation cache statistics tool."""

from typing import Any

from fastmcp import FastMCP

from pkgdocs_mcp.contracts import build_ok
from pkgdocs_mcp.docs.query import get_resolver


def register(mcp: FastMCP) -> None:
    """Register docs_cache_stats tool with the MCP server."""

    @mcp.tool()
    def docs_cache_stats() -> dict[str, Any]:
        """Report documentation cache statistics.

        Includes hits, misses, coalesced concurrent requests, evictions,
        expirations, entry counts (positive and negative) and fetches in
        flight.
        """
        resolver = get_resolver()
        stats = resolver.cache.stats().to_dict()
        stats["supported_ecosystems"] = resolver.supported_ecosystems
        return build_ok(stats)
