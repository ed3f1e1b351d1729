"""Resolution orchestrator: request -> cache -> source chain -> normalizer -> search.

State flow for one call, logged at debug level:

    KeyBuilt -> CacheCheck -> HIT
                           -> MISS -> Fetching -> Normalizing -> CacheWrite
             -> [Searching] -> Done

The overall deadline bounds the caller only. When it fires the caller gets
``DeadlineExceeded`` while the shared fetch keeps running and still fills
the cache for later callers.
"""

import asyncio
from dataclasses import dataclass, field, replace
import logging
import time
from typing import Dict, List, Optional, Sequence

from pkgdocs_mcp.config import EngineConfig, get_engine_config
from pkgdocs_mcp.docs.cache import DocumentCache
from pkgdocs_mcp.docs.errors import AllSourcesExhausted, DeadlineExceeded, InvalidRequest, UnsupportedEcosystem
from pkgdocs_mcp.docs.models import Ecosystem, ResolutionKey, SearchResult, StructuredDocument, SymbolRef
from pkgdocs_mcp.docs.parsing import SectionNormalizer
from pkgdocs_mcp.docs.search import SearchRanker, make_snippet
from pkgdocs_mcp.docs.search.ranker import DEFAULT_RESULT_LIMIT, PHRASE_BASE, SYMBOL_EXACT_BOOST
from pkgdocs_mcp.docs.sources import BaseFetcher, SourceChain, build_default_fetchers, close_http_client

logger = logging.getLogger("pkgdocs-mcp.resolver")

FetcherTable = Dict[Ecosystem, Sequence[BaseFetcher]]


@dataclass(frozen=True)
class DocsRequest:
    """One documentation lookup as received from a tool call."""

    ecosystem: str
    package: str
    symbol: Optional[str] = None
    version: Optional[str] = None
    query: Optional[str] = None
    fuzzy: bool = True
    limit: int = DEFAULT_RESULT_LIMIT
    project_path: Optional[str] = None


@dataclass
class SearchOutcome:
    """Results of ``resolve_search`` plus the document they came from.

    ``mode`` is "symbol" when the requested symbol was found directly and
    "search" when the ranker produced the results.
    """

    document: StructuredDocument
    results: List[SearchResult] = field(default_factory=list)
    mode: str = "search"


def find_symbol(doc: StructuredDocument, name: str) -> Optional[SymbolRef]:
    """Look up a symbol by name: exact first, then case-insensitive.

    A dotted name (``http.Get``) also matches on its last component.
    """
    wanted = name.strip()
    if not wanted:
        return None
    candidates = [wanted]
    if "." in wanted:
        candidates.append(wanted.rsplit(".", 1)[-1])

    for candidate in candidates:
        for symbol in doc.symbols:
            if symbol.name == candidate:
                return symbol
    for candidate in candidates:
        lowered = candidate.lower()
        for symbol in doc.symbols:
            if symbol.name.lower() == lowered:
                return symbol
    return None


class DocsResolver:
    """Entry point of the documentation engine.

    All collaborators are injected; ``fetchers`` is the explicit ecosystem
    table and decides which ecosystems are supported.

    Usage:
        >>> resolver = DocsResolver(build_default_fetchers(), get_engine_config())
        >>> doc = await resolver.resolve_docs(DocsRequest("go", "encoding/json"))
        >>> outcome = await resolver.resolve_search(DocsRequest("npm", "axios", query="interceptors"))
    """

    def __init__(
        self,
        fetchers: FetcherTable,
        config: Optional[EngineConfig] = None,
        cache: Optional[DocumentCache] = None,
        normalizer: Optional[SectionNormalizer] = None,
        chain: Optional[SourceChain] = None,
        ranker: Optional[SearchRanker] = None,
    ):
        self.config = config or EngineConfig()
        self.fetchers: FetcherTable = dict(fetchers)
        self.cache = cache or DocumentCache(
            capacity=self.config.cache_capacity,
            max_bytes=self.config.cache_max_bytes,
            default_ttl_s=self.config.document_ttl_s,
            negative_ttl_s=self.config.negative_ttl_s,
        )
        self.normalizer = normalizer or SectionNormalizer()
        self.chain = chain or SourceChain(default_timeout_s=self.config.per_source_timeout_s)
        self.ranker = ranker or SearchRanker(fuzzy_threshold=self.config.fuzzy_threshold)

    @property
    def supported_ecosystems(self) -> List[str]:
        return [e.value for e in Ecosystem if e in self.fetchers]

    def build_key(self, request: DocsRequest) -> ResolutionKey:
        """Validate a request and build its cache key.

        Raises:
            InvalidRequest: If the package name is empty
            UnsupportedEcosystem: If no fetchers exist for the ecosystem
        """
        if not request.package or not request.package.strip():
            raise InvalidRequest("package name must not be empty")
        try:
            key = ResolutionKey.build(request.ecosystem, request.package, request.symbol, request.version)
        except ValueError:
            raise UnsupportedEcosystem(request.ecosystem, self.supported_ecosystems) from None
        if key.ecosystem not in self.fetchers:
            raise UnsupportedEcosystem(request.ecosystem, self.supported_ecosystems)
        return key

    async def resolve_docs(self, request: DocsRequest) -> StructuredDocument:
        """Return the structured document for a request.

        Raises:
            InvalidRequest, UnsupportedEcosystem: Before the cache is touched
            AllSourcesExhausted: Every source failed (possibly cached)
            DeadlineExceeded: The overall deadline passed first
        """
        key = self.build_key(request)
        logger.debug("KeyBuilt %s", key.describe())
        return await self._resolve_key(key, request.project_path)

    async def resolve_search(self, request: DocsRequest) -> SearchOutcome:
        """Resolve the document, then answer the query against it.

        With a symbol, a direct symbol lookup wins; the query (or the symbol
        name when no query is given) is searched only when the symbol is not
        among the document's symbols.
        """
        query = (request.query or "").strip()
        if not query and not (request.symbol or "").strip():
            raise InvalidRequest("a query or a symbol is required for search")

        key = self.build_key(request)
        logger.debug("KeyBuilt %s", key.describe())
        document = await self._resolve_key(key, request.project_path)

        if key.symbol:
            symbol = find_symbol(document, key.symbol)
            if symbol is not None:
                logger.debug("Done %s: symbol %s found", key.describe(), symbol.name)
                return SearchOutcome(document=document, results=[self._symbol_result(document, symbol)], mode="symbol")
            query = query or key.symbol

        logger.debug("Searching %s for %r", key.describe(), query)
        results = self.ranker.search(document, query, fuzzy=request.fuzzy, limit=request.limit)
        logger.debug("Done %s: %d results", key.describe(), len(results))
        return SearchOutcome(document=document, results=results, mode="search")

    async def _resolve_key(self, key: ResolutionKey, project_path: Optional[str]) -> StructuredDocument:
        project_path = project_path or self.config.project_path
        deadline_s = self.config.overall_deadline_s
        started = time.monotonic()

        async def fetch() -> StructuredDocument:
            logger.debug("Fetching %s", key.describe())
            outcome = await self.chain.resolve(key, self.fetchers[key.ecosystem], project_path=project_path)
            if not outcome.succeeded:
                logger.info("All sources exhausted for %s", key.describe())
                raise AllSourcesExhausted(key, outcome.failures)

            logger.debug("Normalizing %s from %s", key.describe(), outcome.result.source_name)
            document = self.normalizer.normalize(outcome.result, key)
            if outcome.failures:
                document = replace(document, diagnostics=tuple(outcome.failures))
            logger.debug("CacheWrite %s (%d sections)", key.describe(), len(document.sections))
            return document

        logger.debug("CacheCheck %s", key.describe())
        try:
            document = await asyncio.wait_for(self.cache.get_or_fetch(key, fetch), timeout=deadline_s)
        except asyncio.TimeoutError:
            logger.warning("Deadline of %.1fs exceeded for %s", deadline_s, key.describe())
            raise DeadlineExceeded(key, deadline_s) from None

        logger.debug("Resolved %s in %.2fs", key.describe(), time.monotonic() - started)
        return document

    @staticmethod
    def _symbol_result(document: StructuredDocument, symbol: SymbolRef) -> SearchResult:
        section = document.sections[symbol.section_index]
        return SearchResult(
            section_label=section.label,
            heading=section.heading,
            snippet=make_snippet(symbol.signature, 0, len(symbol.signature)),
            score=PHRASE_BASE + SYMBOL_EXACT_BOOST + section.label.priority * 0.1,
            section_order=section.order,
            matched_symbol=symbol.name,
            match_type="exact",
        )


_resolver: DocsResolver | None = None


def get_resolver() -> DocsResolver:
    """Return the global resolver instance with lazy initialization."""
    global _resolver
    if _resolver is None:
        _resolver = DocsResolver(build_default_fetchers(), get_engine_config())
    return _resolver


def set_resolver(resolver: Optional[DocsResolver]) -> None:
    """Replace the global resolver (None resets to lazy default)."""
    global _resolver
    _resolver = resolver


async def close_resolver() -> None:
    """Drop the global resolver and close shared HTTP connections."""
    global _resolver
    _resolver = None
    await close_http_client()
