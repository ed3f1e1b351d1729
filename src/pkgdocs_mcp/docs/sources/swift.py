"""Swift documentation sources: SwiftPM checkouts, then GitHub READMEs."""

from pathlib import Path
from typing import Optional, Tuple

import httpx

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import ContentFormat, FailureKind, RawFetchResult, ResolutionKey, SourceKind
from pkgdocs_mcp.docs.sources.base import BaseFetcher, find_readme
from pkgdocs_mcp.docs.sources.http_client import fetch_text


def split_repository(package_name: str) -> Tuple[Optional[str], str]:
    """Split ``owner/repo`` (or a github.com URL) into its parts.

    Example:
        >>> split_repository("https://github.com/apple/swift-nio.git")
        ('apple', 'swift-nio')
        >>> split_repository("swift-nio")
        (None, 'swift-nio')
    """
    name = package_name.strip().rstrip("/")
    for prefix in ("https://github.com/", "http://github.com/", "github.com/"):
        if name.startswith(prefix):
            name = name[len(prefix):]
            break
    if name.endswith(".git"):
        name = name[:-4]
    parts = [p for p in name.split("/") if p]
    if len(parts) >= 2:
        return parts[-2], parts[-1]
    return None, parts[-1] if parts else ""


class SwiftPMCheckoutFetcher(BaseFetcher):
    """Reads the README of a dependency checked out under ``.build/checkouts``."""

    name = "swiftpm_checkout"
    source_kind = SourceKind.LOCAL_INSTALL

    def __init__(self, timeout_s: Optional[float] = None):
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        _, repo = split_repository(key.package_name)
        checkouts = Path(project_path or ".") / ".build" / "checkouts"
        if not checkouts.is_dir():
            raise FetchError(FailureKind.NOT_FOUND, f"no SwiftPM checkouts under {checkouts.parent}")

        match = None
        for candidate in sorted(checkouts.iterdir()):
            if candidate.is_dir() and candidate.name.lower() == repo.lower():
                match = candidate
                break
        if match is None:
            raise FetchError(FailureKind.NOT_FOUND, f"{repo} is not checked out in {checkouts}")

        readme = find_readme(match)
        if readme is None:
            raise FetchError(FailureKind.NOT_FOUND, f"{match} has no README")
        try:
            content = readme.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise FetchError(FailureKind.PARSE_ERROR, f"unreadable {readme}: {exc}") from exc

        return RawFetchResult(
            content=content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )


class GitHubReadmeFetcher(BaseFetcher):
    """Downloads ``README.md`` from raw.githubusercontent.com.

    The package must be named ``owner/repo`` (or by its GitHub URL); the
    version, if any, is used as the git ref.
    """

    name = "github_readme"
    source_kind = SourceKind.WEB_SCRAPE

    def __init__(
        self,
        base_url: str = "https://raw.githubusercontent.com",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_s = timeout_s

    async def fetch(self, key: ResolutionKey, project_path: Optional[str] = None) -> RawFetchResult:
        owner, repo = split_repository(key.package_name)
        if owner is None:
            raise FetchError(
                FailureKind.NOT_FOUND,
                f"cannot locate a repository for {key.package_name!r}; use 'owner/repo'",
            )
        ref = key.version or "HEAD"
        content = await fetch_text(f"{self.base_url}/{owner}/{repo}/{ref}/README.md", client=self.client)
        return RawFetchResult(
            content=content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=ContentFormat.MARKDOWN,
        )
