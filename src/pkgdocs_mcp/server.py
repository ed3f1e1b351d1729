"""Package Docs MCP Server - package documentation lookup exposed over MCP."""

import argparse
import asyncio
import logging
import sys

from fastmcp import FastMCP

from pkgdocs_mcp import __version__
from pkgdocs_mcp.docs.query import close_resolver
from pkgdocs_mcp.tools import (
    cache_stats,
    describe_package,
    search_package_docs,
)

mcp = FastMCP(
    "Package Docs MCP Server",
    instructions=(
        "Package documentation MCP server for Go, Python, npm, Rust and Swift. "
        "Provides tools to describe a package or symbol and to search inside its "
        "documentation. Local tools and installs are consulted before registries "
        "and documentation sites; results are cached in memory."
    ),
)

logger = logging.getLogger("pkgdocs-mcp.server")

# Register documentation tools
describe_package.register(mcp)
search_package_docs.register(mcp)

# Register maintenance tools
cache_stats.register(mcp)


def main():
    """Entry point for the package docs MCP server."""
    parser = argparse.ArgumentParser(
        prog="package-docs-mcp",
        description="Package Docs MCP Server - package documentation lookup exposed over MCP",
    )
    parser.add_argument("--version", "-v", action="version", version=f"package-docs-mcp {__version__}")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind when using http/sse transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind when using http/sse transport (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level for stderr logging (default: WARNING)",
    )
    args = parser.parse_args()

    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run_kwargs: dict = {"transport": args.transport, "show_banner": False}
    if args.transport in ("http", "sse"):
        run_kwargs["host"] = args.host
        run_kwargs["port"] = args.port

    # Suppress noisy uvicorn shutdown messages (e.g. "Cancel N running task(s)")
    logging.getLogger("uvicorn.error").setLevel(logging.CRITICAL)

    logger.info("Starting package-docs-mcp %s (%s)", __version__, args.transport)
    try:
        mcp.run(**run_kwargs)
    except KeyboardInterrupt:
        pass
    finally:
        try:
            asyncio.run(close_resolver())
        except Exception as exc:
            logger.debug("HTTP client cleanup skipped: %s", exc)


if __name__ == "__main__":
    main()
