"""Shared HTTP client and response classification for remote sources."""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from pkgdocs_mcp import __version__
from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import FailureKind

logger = logging.getLogger("pkgdocs-mcp.sources")

USER_AGENT = f"package-docs-mcp/{__version__}"

_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Return the global HTTP client instance with lazy initialization."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
    return _client


async def close_http_client() -> None:
    """Close the global HTTP client."""
    global _client
    if _client is None:
        return
    client = _client
    _client = None
    await client.aclose()


async def fetch_text(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    headers: Optional[Dict[str, str]] = None,
) -> str:
    """GET ``url`` and return the body text.

    Raises:
        FetchError: ``not_found`` on 404, ``http_error`` on other error
            statuses and transport failures, ``timeout`` on HTTP timeouts
    """
    http = client or get_http_client()
    try:
        response = await http.get(url, headers=headers)
    except httpx.TimeoutException as exc:
        raise FetchError(FailureKind.TIMEOUT, f"GET {url} timed out") from exc
    except httpx.HTTPError as exc:
        raise FetchError(FailureKind.HTTP_ERROR, f"GET {url} failed: {exc}") from exc

    if response.status_code == 404:
        raise FetchError(FailureKind.NOT_FOUND, f"GET {url} returned 404")
    if response.status_code >= 400:
        raise FetchError(FailureKind.HTTP_ERROR, f"GET {url} returned {response.status_code}")

    logger.debug("GET %s -> %d (%d bytes)", url, response.status_code, len(response.content))
    return response.text


async def fetch_json(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET ``url`` and decode a JSON body.

    Raises:
        FetchError: As ``fetch_text``, plus ``parse_error`` on invalid JSON
    """
    text = await fetch_text(url, client=client, headers=headers)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FetchError(FailureKind.PARSE_ERROR, f"GET {url} returned invalid JSON: {exc}") from exc
