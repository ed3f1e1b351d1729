"""In-memory document cache."""

from pkgdocs_mcp.docs.cache.document_cache import CacheEntry, CacheStats, DocumentCache, InFlightRequest

__all__ = ["CacheEntry", "CacheStats", "DocumentCache", "InFlightRequest"]
