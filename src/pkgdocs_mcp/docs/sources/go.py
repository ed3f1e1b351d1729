"""Go documentation sources: the local ``go doc`` tool, then pkg.go.dev."""

import re
from typing import List, Optional

import httpx

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import ContentFormat, FailureKind, RawFetchResult, ResolutionKey, SourceKind
from pkgdocs_mcp.docs.sources.base import BaseFetcher
from pkgdocs_mcp.docs.sources.commands import run_command
from pkgdocs_mcp.docs.sources.http_client import fetch_text

_DECLARATION = re.compile(r"^(func|type|var|const)\b")
_PACKAGE_CLAUSE = re.compile(r"^package \w+")

MODULE_VERSION_TEMPLATE = "{{with .Module}}{{.Version}}{{end}}"


def godoc_to_markdown(identifier: str, output: str) -> str:
    """Convert ``go doc`` output into markdown with an API section.

    The package clause line is dropped, leading prose becomes the preamble,
    and everything from the first top-level declaration on goes under
    ``## API``.

    Example:
        >>> print(godoc_to_markdown("strings", "package strings\\n\\nPackage strings...\\n\\nfunc Cut(s, sep string)"), end="")
        # strings
        <BLANKLINE>
        Package strings...
        <BLANKLINE>
        ## API
        <BLANKLINE>
        func Cut(s, sep string)
    """
    preamble: List[str] = []
    api: List[str] = []
    for line in output.splitlines():
        if not api and _PACKAGE_CLAUSE.match(line):
            continue
        if api or _DECLARATION.match(line):
            api.append(line)
        else:
            preamble.append(line)

    parts = [f"# {identifier}"]
    prose = "\n".join(preamble).strip()
    if prose:
        parts.append(prose)
    declarations = "\n".join(api).strip()
    if declarations:
        parts.append("## API\n\n" + declarations)
    return "\n\n".join(parts) + "\n"


class GoDocFetcher(BaseFetcher):
    """Runs ``go doc <pkg>[.<symbol>]`` in the project directory.

    A versioned key is only served when ``go list`` reports that module
    version for the package in the project.
    """

    name = "go_doc"
    source_kind = SourceKind.LOCAL_TOOL

    def __init__(self, executable: str = "go", timeout_s: Optional[float] = None):
        self.executable = executable
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        if key.version:
            await self._check_module_version(key, project_path)
        output = await run_command([self.executable, "doc", key.identifier], cwd=project_path)
        content = godoc_to_markdown(key.identifier, output) if output.strip() else ""
        return RawFetchResult(
            content=content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )

    async def _check_module_version(self, key: ResolutionKey, project_path: Optional[str]) -> None:
        try:
            output = await run_command(
                [self.executable, "list", "-f", MODULE_VERSION_TEMPLATE, key.package_name],
                cwd=project_path,
            )
        except FetchError as exc:
            raise FetchError(FailureKind.NOT_FOUND, f"{key.package_name} version unknown: {exc.message}") from exc

        # Module versions carry a "v" prefix that callers often leave out
        installed = output.strip()
        if installed.lstrip("v") != key.version.lstrip("v"):
            raise FetchError(
                FailureKind.NOT_FOUND,
                f"module version {installed or 'unknown'} does not match {key.version}",
            )


class PkgGoDevFetcher(BaseFetcher):
    """Scrapes the package page on pkg.go.dev."""

    name = "pkg.go.dev"
    source_kind = SourceKind.WEB_SCRAPE

    def __init__(
        self,
        base_url: str = "https://pkg.go.dev",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_s = timeout_s

    def url_for(self, key: ResolutionKey) -> str:
        url = f"{self.base_url}/{key.package_name}"
        if key.version:
            url += f"@{key.version}"
        return url

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        html = await fetch_text(self.url_for(key), client=self.client)
        return RawFetchResult(
            content=html,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.HTML,
        )
