"""Runtime configuration for the package docs MCP server."""

from dataclasses import dataclass
import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineConfig:
    cache_capacity: int = 256
    cache_max_bytes: int = 0
    document_ttl_s: float = 3600.0
    negative_ttl_s: float = 60.0
    per_source_timeout_s: float = 10.0
    overall_deadline_s: float = 30.0
    fuzzy_threshold: float = 0.75
    project_path: str | None = None


def get_engine_config() -> EngineConfig:
    """Load engine config from environment variables."""
    project_path = os.getenv("PKGDOCS_MCP_PROJECT_PATH")
    return EngineConfig(
        cache_capacity=max(1, _env_int("PKGDOCS_MCP_CACHE_CAPACITY", 256)),
        cache_max_bytes=max(0, _env_int("PKGDOCS_MCP_CACHE_MAX_BYTES", 0)),
        document_ttl_s=max(1.0, _env_float("PKGDOCS_MCP_DOCUMENT_TTL_S", 3600.0)),
        negative_ttl_s=max(0.0, _env_float("PKGDOCS_MCP_NEGATIVE_TTL_S", 60.0)),
        per_source_timeout_s=max(0.1, _env_float("PKGDOCS_MCP_SOURCE_TIMEOUT_S", 10.0)),
        overall_deadline_s=max(1.0, _env_float("PKGDOCS_MCP_OVERALL_DEADLINE_S", 30.0)),
        fuzzy_threshold=min(1.0, max(0.0, _env_float("PKGDOCS_MCP_FUZZY_THRESHOLD", 0.75))),
        project_path=project_path if project_path else None,
    )
