"""Exception hierarchy for bigcommerce-mcp.

Every module imports from here. The hierarchy is:

    BigCommerceMCPError
    ├── ConfigError
    ├── DiscoveryError
    ├── UpstreamError(status_code)
    └── ToolCallError(code)
        ├── UnknownToolError(name)          -32601
        ├── InvalidParamsError(parameter)   -32602
        └── ToolExecutionError              -32603

``ToolCallError`` and its subclasses are protocol faults: they abort a
single tool call and are reported through the JSON-RPC error envelope.
``UpstreamError`` never leaves a tool; it is turned into a ``Failure``
result and reported as a readable ``isError`` response instead.
"""

from __future__ import annotations

from typing import ClassVar


class BigCommerceMCPError(Exception):
    """Base exception for all bigcommerce-mcp errors."""


# ─── Configuration / Startup ──────────────────────────────────


class ConfigError(BigCommerceMCPError):
    """Invalid configuration."""


class DiscoveryError(BigCommerceMCPError):
    """The tool registry could not be built."""


# ─── Upstream API ─────────────────────────────────────────────


class UpstreamError(BigCommerceMCPError):
    """The BigCommerce API answered with something other than usable JSON."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


# ─── Tool Call Faults ─────────────────────────────────────────


class ToolCallError(BigCommerceMCPError):
    """Base for faults raised while dispatching a tool call."""

    code: ClassVar[int] = -32603


class UnknownToolError(ToolCallError):
    """No tool with the requested name is registered."""

    code: ClassVar[int] = -32601

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidParamsError(ToolCallError):
    """A required parameter is absent from the call arguments."""

    code: ClassVar[int] = -32602

    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(f"Missing required parameter: {parameter}")


class ToolExecutionError(ToolCallError):
    """The tool raised instead of returning a result."""

    code: ClassVar[int] = -32603

    def __init__(self, message: str) -> None:
        super().__init__(f"API error: {message}")
