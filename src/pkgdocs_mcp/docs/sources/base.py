"""Abstract fetch strategy interface.

A fetcher knows how to obtain raw documentation for one ecosystem from one
kind of source. Fetchers raise ``FetchError`` on a classified failure and
never retry; ordering, timeouts and failure accounting belong to the
source chain.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pkgdocs_mcp.docs.models import RawFetchResult, ResolutionKey, SourceKind


class BaseFetcher(ABC):
    """Base class for documentation fetch strategies.

    Subclasses set ``name`` and ``source_kind`` and implement ``fetch``.
    ``timeout_s`` overrides the chain's default per-source timeout when set.
    """

    name: str = "fetcher"
    source_kind: SourceKind = SourceKind.REGISTRY_API
    timeout_s: Optional[float] = None

    @abstractmethod
    async def fetch(
        self,
        key: ResolutionKey,
        project_path: Optional[str] = None,
    ) -> RawFetchResult:
        """Fetch raw documentation for ``key``.

        Args:
            key: Resolution key (symbol and version may be None)
            project_path: Project root for local lookups, None for cwd

        Returns:
            Raw content with its source kind and format

        Raises:
            FetchError: On a classified failure (not found, command failed...)
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


README_NAMES = ("README.md", "README.markdown", "README", "README.txt", "readme.md")


def find_readme(directory: Path) -> Optional[Path]:
    """Return the README file in ``directory``, matching names case-insensitively."""
    if not directory.is_dir():
        return None
    wanted = {name.lower() for name in README_NAMES}
    for candidate in sorted(directory.iterdir()):
        if candidate.is_file() and candidate.name.lower() in wanted:
            return candidate
    return None
