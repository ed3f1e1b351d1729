"""Tests for environment-driven engine configuration."""

from pkgdocs_mcp.config import EngineConfig, get_engine_config


def test_defaults_without_environment(monkeypatch) -> None:
    for name in (
        "PKGDOCS_MCP_CACHE_CAPACITY",
        "PKGDOCS_MCP_CACHE_MAX_BYTES",
        "PKGDOCS_MCP_DOCUMENT_TTL_S",
        "PKGDOCS_MCP_NEGATIVE_TTL_S",
        "PKGDOCS_MCP_SOURCE_TIMEOUT_S",
        "PKGDOCS_MCP_OVERALL_DEADLINE_S",
        "PKGDOCS_MCP_FUZZY_THRESHOLD",
        "PKGDOCS_MCP_PROJECT_PATH",
    ):
        monkeypatch.delenv(name, raising=False)

    assert get_engine_config() == EngineConfig()


def test_values_are_read_and_clamped(monkeypatch) -> None:
    monkeypatch.setenv("PKGDOCS_MCP_CACHE_CAPACITY", "0")
    monkeypatch.setenv("PKGDOCS_MCP_NEGATIVE_TTL_S", "15")
    monkeypatch.setenv("PKGDOCS_MCP_FUZZY_THRESHOLD", "1.7")
    monkeypatch.setenv("PKGDOCS_MCP_PROJECT_PATH", "/srv/app")

    config = get_engine_config()

    assert config.cache_capacity == 1
    assert config.negative_ttl_s == 15.0
    assert config.fuzzy_threshold == 1.0
    assert config.project_path == "/srv/app"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("PKGDOCS_MCP_SOURCE_TIMEOUT_S", "soon")
    monkeypatch.setenv("PKGDOCS_MCP_CACHE_MAX_BYTES", "lots")

    config = get_engine_config()

    assert config.per_source_timeout_s == 10.0
    assert config.cache_max_bytes == 0
