"""Health check and server info endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.mcp.dispatcher import timestamp

router = APIRouter(tags=["health"])

SUPPORTED_TRANSPORTS = ["stdio", "sse", "streamable-http"]


@router.get("/health")
async def health() -> dict[str, Any]:
    """Liveness probe -- answers even when no tools were loaded."""
    return {
        "status": "healthy",
        "server": SERVER_NAME,
        "version": __version__,
        "capabilities": ["tools"],
        "timestamp": timestamp(),
    }


@router.get("/info")
async def info() -> dict[str, Any]:
    """Describe the server for discovery by MCP clients."""
    return {
        "name": SERVER_NAME,
        "version": __version__,
        "description": (
            "BigCommerce API MCP server with tools for products, "
            "customers, and orders"
        ),
        "capabilities": {"tools": {}},
        "supportedTransports": SUPPORTED_TRANSPORTS,
    }
