"""Package docs MCP tool implementations."""

from . import cache_stats, describe_package, search_package_docs

__all__ = [
    "cache_stats",
    "describe_package",
    "search_package_docs",
]
