"""npm documentation sources: the local ``node_modules`` install, then the registry."""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import ContentFormat, FailureKind, RawFetchResult, ResolutionKey, SourceKind
from pkgdocs_mcp.docs.sources.base import BaseFetcher, find_readme
from pkgdocs_mcp.docs.sources.http_client import fetch_json
from pkgdocs_mcp.docs.sources.registry import load_registry_config


def _summary_markdown(name: str, description: str) -> str:
    if not description:
        return ""
    return f"# {name}\n\n{description}\n"


class NodeModulesFetcher(BaseFetcher):
    """Reads README and package.json from ``<project>/node_modules/<pkg>``.

    When a version is requested, the installed version must match it exactly;
    otherwise the registry is consulted instead.
    """

    name = "node_modules"
    source_kind = SourceKind.LOCAL_INSTALL

    def __init__(self, timeout_s: Optional[float] = None):
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        package_dir = Path(project_path or ".") / "node_modules" / key.package_name
        manifest_path = package_dir / "package.json"
        if not manifest_path.is_file():
            raise FetchError(FailureKind.NOT_FOUND, f"{key.package_name} is not installed in {package_dir.parent}")

        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise FetchError(FailureKind.PARSE_ERROR, f"unreadable {manifest_path}: {exc}") from exc

        installed = str(manifest.get("version") or "")
        if key.version and installed != key.version:
            raise FetchError(
                FailureKind.NOT_FOUND,
                f"installed version {installed or 'unknown'} does not match {key.version}",
            )

        readme = find_readme(package_dir)
        if readme is not None:
            try:
                content = readme.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise FetchError(FailureKind.PARSE_ERROR, f"unreadable {readme}: {exc}") from exc
        else:
            content = _summary_markdown(key.package_name, str(manifest.get("description") or ""))

        return RawFetchResult(
            content=content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )


def encode_package_name(package_name: str) -> str:
    """Encode a package name for a registry URL (``@scope/name`` -> ``@scope%2fname``)."""
    return quote(package_name, safe="@").replace("%2F", "%2f")


def registry_document_to_markdown(package_name: str, document: Dict[str, Any]) -> str:
    """Pick the README from a registry packument or version manifest."""
    readme = document.get("readme")
    if isinstance(readme, str) and readme.strip() and not readme.startswith("ERROR: No README"):
        return readme
    return _summary_markdown(package_name, str(document.get("description") or ""))


class NpmRegistryFetcher(BaseFetcher):
    """Fetches package documents from the registry configured in ``.npmrc``."""

    name = "npm_registry"
    source_kind = SourceKind.REGISTRY_API

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout_s: Optional[float] = None):
        self.client = client
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        config = load_registry_config(key.package_name, project_path)
        url = config.registry + encode_package_name(key.package_name)
        if key.version:
            url += f"/{key.version}"

        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"

        document = await fetch_json(url, client=self.client, headers=headers)
        if not isinstance(document, dict):
            raise FetchError(FailureKind.PARSE_ERROR, "registry response is not an object")

        return RawFetchResult(
            content=registry_document_to_markdown(key.package_name, document),
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )
