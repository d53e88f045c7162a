"""MCP server wiring for the tool dispatcher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.core.errors import ToolCallError

if TYPE_CHECKING:
    from bigcommerce_mcp.mcp.dispatcher import Dispatcher, ResponseEnvelope

logger = logging.getLogger(__name__)


def to_call_tool_result(envelope: ResponseEnvelope) -> types.CallToolResult:
    """Convert a dispatcher envelope to the MCP result model."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=envelope.text)],
        isError=envelope.is_error,
        _meta=envelope.meta,
    )


def create_server(dispatcher: Dispatcher) -> Server:
    """Create a protocol server bound to *dispatcher*.

    ``tools/call`` is registered directly in ``request_handlers`` so that
    dispatcher faults reach the client as JSON-RPC errors; the SDK's
    ``call_tool`` decorator would fold them into ``isError`` results.
    """
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
    async def list_tools() -> list[types.Tool]:
        """List available MCP tools."""
        return [
            types.Tool(
                name=t.name,
                description=t.description,
                inputSchema=t.input_schema,
            )
            for t in dispatcher.list_tools()
        ]

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        """Handle tool calls."""
        name = req.params.name
        try:
            envelope = await dispatcher.call_tool(name, req.params.arguments)
        except ToolCallError as e:
            logger.info("Tool call %s rejected: %s", name, e)
            raise McpError(types.ErrorData(code=e.code, message=str(e))) from e
        return types.ServerResult(to_call_tool_result(envelope))

    server.request_handlers[types.CallToolRequest] = call_tool
    return server


async def run_server(dispatcher: Dispatcher) -> None:
    """Start the MCP server on stdio."""
    server = create_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
