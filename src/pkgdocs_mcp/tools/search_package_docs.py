"""Package Docs Search Tool - Ranked search inside one package's documentation."""

from typing import Any

from fastmcp import FastMCP

from pkgdocs_mcp.contracts import build_docs_data, build_ok
from pkgdocs_mcp.docs.errors import DocsResolutionError
from pkgdocs_mcp.docs.query import DocsRequest, get_resolver
from pkgdocs_mcp.formatting import build_resolution_error, source_info
from pkgdocs_mcp.utils import (
    EcosystemName,
    FuzzyFlag,
    PackageName,
    ProjectPath,
    SearchLimit,
    SearchQuery,
    SymbolName,
    VersionSpec,
)


def register(mcp: FastMCP) -> None:
    """Register search_package_docs tool with the MCP server."""

    @mcp.tool()
    async def search_package_docs(
        ecosystem: EcosystemName,
        package: PackageName,
        query: SearchQuery,
        fuzzy: FuzzyFlag = True,
        symbol: SymbolName = None,
        version: VersionSpec = None,
        project_path: ProjectPath = None,
        limit: SearchLimit = 10,
    ) -> dict[str, Any]:
        """Search a package's documentation by keywords (like grep).

        Returns ranked sections with a short snippet around each match. API
        sections outrank usage, example, description and other sections on
        equal matches. With `fuzzy`, typos such as "conect" still match.

        When to use:
        - You know what you need ("timeout", "retry") but not where it is
        - You want to locate a function by (approximate) name

        Related tools:
        - describe_package: Full structured documentation
        """
        request = DocsRequest(
            ecosystem=ecosystem,
            package=package,
            symbol=symbol,
            version=version,
            query=query,
            fuzzy=fuzzy,
            limit=limit,
            project_path=project_path,
        )
        try:
            outcome = await get_resolver().resolve_search(request)
        except DocsResolutionError as exc:
            return build_resolution_error(exc)

        doc = outcome.document
        entries = [result.to_dict() for result in outcome.results]
        payload: dict[str, Any] = build_docs_data(
            key=doc.key.to_dict(),
            action="search",
            source=source_info(doc),
            entries=entries,
            summary={
                "count": len(entries),
                "query": query,
                "fuzzy": fuzzy,
                "mode": outcome.mode,
            },
        )

        if not entries:
            payload["summary"]["hints"] = [
                "Try fewer or broader keywords.",
                "Enable fuzzy matching for misspelled names." if not fuzzy else "Try describe_package for the full text.",
            ]

        return build_ok(payload)
