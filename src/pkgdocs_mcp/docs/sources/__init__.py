"""Fetch strategies and the ordered source chain.

``build_default_fetchers`` returns the explicit ecosystem -> strategies
table used by the resolver. Order within each list is priority order.
"""

from typing import Dict, List

from pkgdocs_mcp.docs.models import Ecosystem
from pkgdocs_mcp.docs.sources.base import BaseFetcher
from pkgdocs_mcp.docs.sources.chain import ChainOutcome, SourceChain
from pkgdocs_mcp.docs.sources.go import GoDocFetcher, PkgGoDevFetcher
from pkgdocs_mcp.docs.sources.http_client import close_http_client, get_http_client
from pkgdocs_mcp.docs.sources.npm import NodeModulesFetcher, NpmRegistryFetcher
from pkgdocs_mcp.docs.sources.python import PydocFetcher, PyPIFetcher
from pkgdocs_mcp.docs.sources.rust import CratesIoFetcher, DocsRsFetcher
from pkgdocs_mcp.docs.sources.swift import GitHubReadmeFetcher, SwiftPMCheckoutFetcher


def build_default_fetchers() -> Dict[Ecosystem, List[BaseFetcher]]:
    """Build the default fetcher table, local sources first."""
    return {
        Ecosystem.GO: [GoDocFetcher(), PkgGoDevFetcher()],
        Ecosystem.PYTHON: [PydocFetcher(), PyPIFetcher()],
        Ecosystem.NPM: [NodeModulesFetcher(), NpmRegistryFetcher()],
        Ecosystem.RUST: [CratesIoFetcher(), DocsRsFetcher()],
        Ecosystem.SWIFT: [SwiftPMCheckoutFetcher(), GitHubReadmeFetcher()],
    }


__all__ = [
    "BaseFetcher",
    "ChainOutcome",
    "SourceChain",
    "build_default_fetchers",
    "close_http_client",
    "get_http_client",
    "GoDocFetcher",
    "PkgGoDevFetcher",
    "PydocFetcher",
    "PyPIFetcher",
    "NodeModulesFetcher",
    "NpmRegistryFetcher",
    "CratesIoFetcher",
    "DocsRsFetcher",
    "SwiftPMCheckoutFetcher",
    "GitHubReadmeFetcher",
]
