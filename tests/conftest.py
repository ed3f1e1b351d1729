"""Shared fixtures: fake fetchers, documents and a controllable clock."""

import asyncio
from typing import Optional

import pytest

from pkgdocs_mcp.docs.models import (
    ContentFormat,
    DocumentSection,
    RawFetchResult,
    ResolutionKey,
    SectionLabel,
    SourceKind,
    StructuredDocument,
    SymbolRef,
)
from pkgdocs_mcp.docs.sources.base import BaseFetcher


MYLIB_README = (
    "# MyLib\n"
    "\n"
    "A short description.\n"
    "\n"
    "## Usage\n"
    "```\n"
    "import mylib\n"
    "```\n"
    "\n"
    "## License\n"
    "MIT"
)


class FakeFetcher(BaseFetcher):
    """Scripted fetcher: returns content, raises, or sleeps first."""

    def __init__(
        self,
        name: str,
        content: str = "",
        *,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        source_kind: SourceKind = SourceKind.REGISTRY_API,
        content_format: ContentFormat = ContentFormat.MARKDOWN,
        timeout_s: Optional[float] = None,
    ):
        self.name = name
        self.content = content
        self.error = error
        self.delay = delay
        self.source_kind = source_kind
        self.content_format = content_format
        self.timeout_s = timeout_s
        self.calls = 0
        self.keys = []
        self.project_paths = []

    async def fetch(self, key, project_path=None):
        self.calls += 1
        self.keys.append(key)
        self.project_paths.append(project_path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return RawFetchResult(
            content=self.content,
            source_kind=self.source_kind,
            source_name=self.name,
            content_format=self.content_format,
        )


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_document(
    key: ResolutionKey,
    sections=(),
    symbols=(),
    degraded: bool = False,
) -> StructuredDocument:
    built = tuple(
        DocumentSection(label=label, heading=heading, body=body, order=i)
        for i, (label, heading, body) in enumerate(sections)
    )
    return StructuredDocument(
        key=key,
        sections=built,
        symbols=tuple(symbols),
        source_kind=SourceKind.REGISTRY_API,
        source_name="fake",
        degraded=degraded,
    )


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def npm_key():
    return ResolutionKey.build("npm", "mylib")


@pytest.fixture
def client_doc():
    """Document with an API section holding one symbol and a description."""
    key = ResolutionKey.build("python", "netclient")
    return make_document(
        key,
        sections=[
            (SectionLabel.DESCRIPTION, "", "A client library"),
            (SectionLabel.API, "API", "connect(host, port)\n    Open a connection to host."),
        ],
        symbols=[SymbolRef(name="connect", signature="connect(host, port)", section_index=1)],
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Keep a developer's ~/.npmrc out of registry lookups."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def make_doc():
    return make_document


@pytest.fixture
def mylib_readme():
    return MYLIB_README
