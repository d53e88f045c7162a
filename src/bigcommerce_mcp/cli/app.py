"""Main CLI application.

Starts the BigCommerce MCP server on exactly one transport: stdio
(default), SSE (``--sse``) or streamable HTTP (``--streamable-http``).
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

import click

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.config.loader import load_config
from bigcommerce_mcp.core.errors import ConfigError

if TYPE_CHECKING:
    from bigcommerce_mcp.config.schema import AppConfig, LoggingConfig
    from bigcommerce_mcp.mcp.dispatcher import Dispatcher
    from bigcommerce_mcp.tools.registry import ToolRegistry

logger = logging.getLogger("bigcommerce_mcp")


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> AppConfig:
    """Load config with user-friendly error handling."""
    try:
        return load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


def _configure_logging(config: LoggingConfig) -> None:
    """Send log records to stderr; stdout carries the stdio protocol."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    logging.basicConfig(
        level=config.level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _discover(config: AppConfig, *, networked: bool) -> ToolRegistry:
    """Build the tool registry.

    A networked server keeps running with no tools so that health
    probes still answer; the stdio server exits instead.
    """
    from bigcommerce_mcp.tools.registry import ToolRegistry, discover_tools

    try:
        registry = asyncio.run(discover_tools(config))
    except Exception as e:
        if not networked:
            _error(f"Failed to start server: {e}")
        logger.error("Failed to start server: %s", e)
        logger.warning("Starting with limited functionality due to initialization error")
        return ToolRegistry()

    logger.info("Loaded %d tools successfully", len(registry))
    return registry


# ── CLI ──────────────────────────────────────────────────────────


@click.command()
@click.version_option(version=__version__, prog_name=SERVER_NAME)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.option("--sse", "use_sse", is_flag=True, help="Serve over Server-Sent Events.")
@click.option(
    "--streamable-http",
    "use_http",
    is_flag=True,
    help="Serve over stateless streamable HTTP.",
)
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
def cli(
    config_path: str | None,
    use_sse: bool,
    use_http: bool,
    host: str | None,
    port: int | None,
) -> None:
    """bigcommerce-mcp - BigCommerce products, customers and orders as MCP tools.

    Runs on stdio unless --sse or --streamable-http is given.
    """
    if use_sse and use_http:
        _error("Cannot specify both --streamable-http and --sse")

    config = _load_config(config_path)
    _configure_logging(config.logging)

    from bigcommerce_mcp.mcp.dispatcher import Dispatcher

    networked = use_sse or use_http
    dispatcher = Dispatcher(_discover(config, networked=networked))

    if not networked:
        _serve_stdio(dispatcher)
        return

    if use_http:
        from bigcommerce_mcp.api.app import create_app

        app = create_app(dispatcher, config)
        label = "Streamable HTTP Server"
        paths = ["/mcp", "/health", "/info"]
    else:
        from bigcommerce_mcp.api.sse import create_sse_app

        app = create_sse_app(dispatcher, config)
        label = "SSE Server"
        paths = ["/sse", "/messages", "/health"]

    import uvicorn

    effective_host = host or config.server.host
    effective_port = port or config.server.port
    for path in paths:
        logger.info("[%s] http://%s:%d%s", label, effective_host, effective_port, path)
    uvicorn.run(app, host=effective_host, port=effective_port)


def _serve_stdio(dispatcher: Dispatcher) -> None:
    """Run the stdio server until stdin closes or Ctrl-C."""
    from bigcommerce_mcp.mcp.server import run_server

    try:
        asyncio.run(run_server(dispatcher))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    sys.exit(0)
