"""Package Describe Tool - Structured documentation for a package or symbol."""

from typing import Any

from fastmcp import FastMCP

from pkgdocs_mcp.contracts import build_docs_data, build_ok
from pkgdocs_mcp.docs.errors import DocsResolutionError
from pkgdocs_mcp.docs.query import DocsRequest, find_symbol, get_resolver
from pkgdocs_mcp.formatting import build_resolution_error, build_symbol_not_found, source_info, truncate_body
from pkgdocs_mcp.utils import (
    EcosystemName,
    MaxSections,
    PackageName,
    ProjectPath,
    SectionFilter,
    SymbolName,
    VersionSpec,
)

# Per-section body limit in describe output
SECTION_BODY_MAX_CHARS = 4000

# Symbols listed in the summary
SUMMARY_SYMBOL_LIMIT = 50


def register(mcp: FastMCP) -> None:
    """Register describe_package tool with the MCP server."""

    @mcp.tool()
    async def describe_package(
        ecosystem: EcosystemName,
        package: PackageName,
        symbol: SymbolName = None,
        version: VersionSpec = None,
        project_path: ProjectPath = None,
        section: SectionFilter = None,
        max_sections: MaxSections = 20,
    ) -> dict[str, Any]:
        """Get structured documentation for a package (like `go doc` / `pydoc`).

        Sources are tried in order (local tool or install first, then the
        registry or docs site); boilerplate such as license, sponsors and
        changelog is removed and the rest is split into labeled sections:
        description, usage, api, example, other.

        When to use:
        - You need an overview or usage notes for a dependency
        - You want the signature of one symbol (pass `symbol`)

        Related tools:
        - search_package_docs: Find where a topic is covered inside the docs
        - docs_cache_stats: Inspect the documentation cache
        """
        request = DocsRequest(
            ecosystem=ecosystem,
            package=package,
            symbol=symbol,
            version=version,
            project_path=project_path,
        )
        try:
            doc = await get_resolver().resolve_docs(request)
        except DocsResolutionError as exc:
            return build_resolution_error(exc)

        matched = None
        if doc.key.symbol:
            ref = find_symbol(doc, doc.key.symbol)
            if ref is not None:
                matched = ref.to_dict()
            elif not doc.degraded and not _mentions(doc, doc.key.symbol):
                return build_symbol_not_found(doc, doc.key.symbol)

        sections = [s for s in doc.sections if section is None or s.label.value == section]
        entries: list[dict[str, Any]] = []
        for item in sections[:max_sections]:
            body, truncated = truncate_body(item.body, SECTION_BODY_MAX_CHARS)
            entries.append(
                {
                    "label": item.label.value,
                    "heading": item.heading,
                    "body": body,
                    "order": item.order,
                    "truncated": truncated,
                }
            )

        label_counts: dict[str, int] = {}
        for item in doc.sections:
            label_counts[item.label.value] = label_counts.get(item.label.value, 0) + 1

        summary: dict[str, Any] = {
            "count": len(entries),
            "total_sections": len(doc.sections),
            "labels": label_counts,
            "symbols": [s.to_dict() for s in doc.symbols[:SUMMARY_SYMBOL_LIMIT]],
            "symbol_count": len(doc.symbols),
        }
        if matched is not None:
            summary["matched_symbol"] = matched
        if len(sections) > max_sections:
            summary["has_more"] = True
            summary["hints"] = [f"Increase max_sections (showing {max_sections} of {len(sections)})."]

        payload = build_docs_data(
            key=doc.key.to_dict(),
            action="describe",
            source=source_info(doc),
            entries=entries,
            summary=summary,
        )
        return build_ok(payload)


def _mentions(doc, symbol: str) -> bool:
    wanted = symbol.lower()
    return any(wanted in s.text.lower() for s in doc.sections)
