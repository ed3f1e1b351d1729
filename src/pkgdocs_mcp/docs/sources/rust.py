"""Rust documentation sources: the crates.io API, then docs.rs."""

from html import escape
import logging
from typing import Optional

import httpx

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import ContentFormat, FailureKind, RawFetchResult, ResolutionKey, SourceKind
from pkgdocs_mcp.docs.sources.base import BaseFetcher
from pkgdocs_mcp.docs.sources.http_client import fetch_json, fetch_text

logger = logging.getLogger("pkgdocs-mcp.sources")


class CratesIoFetcher(BaseFetcher):
    """Reads crate metadata and the rendered README from crates.io.

    The README endpoint serves HTML, so the result is an HTML document with
    the crate name as title and its description as the lead paragraph. A
    missing README is not fatal as long as the crate has a description.
    """

    name = "crates.io"
    source_kind = SourceKind.REGISTRY_API

    def __init__(
        self,
        base_url: str = "https://crates.io/api/v1",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        payload = await fetch_json(f"{self.base_url}/crates/{key.package_name}", client=self.client)
        crate = payload.get("crate") if isinstance(payload, dict) else None
        if not isinstance(crate, dict):
            raise FetchError(FailureKind.PARSE_ERROR, "crates.io response has no 'crate' object")

        version = key.version or crate.get("max_stable_version") or crate.get("max_version")
        readme_html = ""
        if version:
            try:
                readme_html = await fetch_text(
                    f"{self.base_url}/crates/{key.package_name}/{version}/readme",
                    client=self.client,
                )
            except FetchError as exc:
                if exc.kind != FailureKind.NOT_FOUND:
                    raise
                logger.debug("crates.io has no README for %s %s", key.package_name, version)

        description = (crate.get("description") or "").strip()
        if not readme_html.strip() and not description:
            content = ""
        else:
            content = f"<h1>{escape(crate.get('name') or key.package_name)}</h1>\n"
            if description:
                content += f"<p>{escape(description)}</p>\n"
            content += readme_html

        return RawFetchResult(
            content=content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.HTML,
        )


class DocsRsFetcher(BaseFetcher):
    """Scrapes the crate overview page on docs.rs."""

    name = "docs.rs"
    source_kind = SourceKind.WEB_SCRAPE

    def __init__(
        self,
        base_url: str = "https://docs.rs",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_s = timeout_s

    def url_for(self, key: ResolutionKey) -> str:
        return f"{self.base_url}/crate/{key.package_name}/{key.version or 'latest'}"

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        html = await fetch_text(self.url_for(key), client=self.client)
        return RawFetchResult(
            content=html,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.HTML,
        )
