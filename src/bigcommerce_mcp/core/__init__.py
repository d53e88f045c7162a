"""Core types, errors, and shared utilities."""

from bigcommerce_mcp.core.errors import (
    BigCommerceMCPError,
    ConfigError,
    DiscoveryError,
    InvalidParamsError,
    ToolCallError,
    ToolExecutionError,
    UnknownToolError,
    UpstreamError,
)

__all__ = [
    "BigCommerceMCPError",
    "ConfigError",
    "DiscoveryError",
    "InvalidParamsError",
    "ToolCallError",
    "ToolExecutionError",
    "UnknownToolError",
    "UpstreamError",
]
