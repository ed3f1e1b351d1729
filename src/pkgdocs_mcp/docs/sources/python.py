"""Python documentation sources: local ``pydoc``, then the PyPI JSON API."""

from typing import Any, Dict, Optional

import httpx

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import ContentFormat, FailureKind, RawFetchResult, ResolutionKey, SourceKind
from pkgdocs_mcp.docs.sources.base import BaseFetcher
from pkgdocs_mcp.docs.sources.commands import run_command
from pkgdocs_mcp.docs.sources.http_client import fetch_json

PYDOC_NOT_FOUND = "No Python documentation found"

INSTALLED_VERSION_SCRIPT = "import sys, importlib.metadata as m; print(m.version(sys.argv[1]))"


class PydocFetcher(BaseFetcher):
    """Runs ``python -m pydoc <pkg>[.<symbol>]`` in the project directory.

    pydoc prints plain text with ALL-CAPS section headings (NAME, CLASSES,
    FUNCTIONS...), which the text splitter understands. A versioned key is
    only served when the installed distribution has exactly that version.
    """

    name = "pydoc"
    source_kind = SourceKind.LOCAL_TOOL

    def __init__(self, executable: str = "python", timeout_s: Optional[float] = None):
        self.executable = executable
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        if key.version:
            await self._check_installed_version(key, project_path)
        output = await run_command([self.executable, "-m", "pydoc", key.identifier], cwd=project_path)
        if output.lstrip().startswith(PYDOC_NOT_FOUND):
            raise FetchError(FailureKind.NOT_FOUND, output.strip().splitlines()[0])
        return RawFetchResult(
            content=output,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.TEXT,
        )

    async def _check_installed_version(self, key: ResolutionKey, project_path: Optional[str]) -> None:
        """Fail with ``not_found`` unless the installed distribution is ``key.version``."""
        try:
            output = await run_command(
                [self.executable, "-c", INSTALLED_VERSION_SCRIPT, key.package_name],
                cwd=project_path,
            )
        except FetchError as exc:
            raise FetchError(FailureKind.NOT_FOUND, f"{key.package_name} version unknown: {exc.message}") from exc

        installed = output.strip()
        if installed != key.version:
            raise FetchError(
                FailureKind.NOT_FOUND,
                f"installed version {installed or 'unknown'} does not match {key.version}",
            )


def pypi_to_markdown(payload: Dict[str, Any]) -> str:
    """Render a PyPI JSON document as markdown: title, summary, long description."""
    info = payload.get("info") or {}
    if not isinstance(info, dict):
        raise FetchError(FailureKind.PARSE_ERROR, "PyPI response has no 'info' object")

    name = info.get("name") or ""
    summary = (info.get("summary") or "").strip()
    description = (info.get("description") or "").strip()
    if not summary and not description:
        return ""

    parts = [f"# {name}".rstrip()]
    if summary:
        parts.append(summary)
    if description:
        parts.append(description)
    return "\n\n".join(parts) + "\n"


class PyPIFetcher(BaseFetcher):
    """Reads package metadata and long description from the PyPI JSON API."""

    name = "pypi"
    source_kind = SourceKind.REGISTRY_API

    def __init__(
        self,
        base_url: str = "https://pypi.org/pypi",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_s = timeout_s

    def url_for(self, key: ResolutionKey) -> str:
        if key.version:
            return f"{self.base_url}/{key.package_name}/{key.version}/json"
        return f"{self.base_url}/{key.package_name}/json"

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        payload = await fetch_json(self.url_for(key), client=self.client)
        if not isinstance(payload, dict):
            raise FetchError(FailureKind.PARSE_ERROR, "PyPI response is not an object")
        return RawFetchResult(
            content=pypi_to_markdown(payload),
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )
