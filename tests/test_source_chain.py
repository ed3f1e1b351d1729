"""Tests for ordered source chain execution."""

import pytest

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import FailureKind, ResolutionKey
from pkgdocs_mcp.docs.sources import SourceChain


@pytest.fixture
def key():
    return ResolutionKey.build("go", "encoding/json")


@pytest.mark.asyncio
async def test_first_success_stops_the_chain(key, fake_fetcher) -> None:
    first = fake_fetcher("go_doc", "# json\n\nPackage json.")
    second = fake_fetcher("pkg.go.dev", "<p>never</p>")

    outcome = await SourceChain().resolve(key, [first, second])

    assert outcome.succeeded
    assert outcome.result.source_name == "go_doc"
    assert outcome.failures == []
    assert first.calls == 1
    assert second.calls == 0


@pytest.mark.asyncio
async def test_timeout_is_recorded_and_next_source_used(key, fake_fetcher) -> None:
    slow = fake_fetcher("slow", "late", delay=1.0, timeout_s=0.05)
    fast = fake_fetcher("fast", "# ok\n\ncontent")

    outcome = await SourceChain(default_timeout_s=5.0).resolve(key, [slow, fast])

    assert outcome.result.source_name == "fast"
    assert len(outcome.failures) == 1
    assert outcome.failures[0].source == "slow"
    assert outcome.failures[0].kind == FailureKind.TIMEOUT
    assert outcome.failures[0].elapsed_s < 1.0


@pytest.mark.asyncio
async def test_default_timeout_applies_without_override(key, fake_fetcher) -> None:
    slow = fake_fetcher("slow", "late", delay=1.0)

    outcome = await SourceChain(default_timeout_s=0.05).resolve(key, [slow])

    assert not outcome.succeeded
    assert outcome.failures[0].kind == FailureKind.TIMEOUT


@pytest.mark.asyncio
async def test_all_failures_accumulate_in_order(key, fake_fetcher) -> None:
    fetchers = [
        fake_fetcher("missing", error=FetchError(FailureKind.NOT_FOUND, "no such package")),
        fake_fetcher("broken", error=RuntimeError("boom")),
        fake_fetcher("blank", "   \n"),
        fake_fetcher("tool", error=FetchError(FailureKind.COMMAND_FAILED, "go: not found")),
    ]

    outcome = await SourceChain().resolve(key, fetchers)

    assert outcome.result is None
    assert [f.source for f in outcome.failures] == ["missing", "broken", "blank", "tool"]
    assert [f.kind for f in outcome.failures] == [
        FailureKind.NOT_FOUND,
        FailureKind.UNEXPECTED,
        FailureKind.EMPTY,
        FailureKind.COMMAND_FAILED,
    ]
    assert "boom" in outcome.failures[1].message
    # No retries
    assert all(f.calls == 1 for f in fetchers)


@pytest.mark.asyncio
async def test_project_path_is_forwarded(key, fake_fetcher) -> None:
    fetcher = fake_fetcher("local", "# x\n\ny")

    await SourceChain().resolve(key, [fetcher], project_path="/work/project")

    assert fetcher.project_paths == ["/work/project"]
    assert fetcher.keys == [key]


@pytest.mark.asyncio
async def test_empty_chain_fails_without_failures(key) -> None:
    outcome = await SourceChain().resolve(key, [])

    assert not outcome.succeeded
    assert outcome.failures == []
