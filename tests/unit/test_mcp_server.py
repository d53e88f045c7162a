"""Tests for the MCP server wiring."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from mcp import types
from mcp.shared.exceptions import McpError

from bigcommerce_mcp.mcp.dispatcher import ResponseEnvelope
from bigcommerce_mcp.mcp.server import create_server, run_server, to_call_tool_result
from bigcommerce_mcp.tools.base import Success
from tests.fixtures.tools import FakeTool, failing_tool

# ── Helpers ──────────────────────────────────────────────────────


def _call_request(name: str, arguments: dict[str, Any] | None = None) -> types.CallToolRequest:
    return types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )


async def _list(server: Any) -> list[types.Tool]:
    handler = server.request_handlers[types.ListToolsRequest]
    result = await handler(types.ListToolsRequest(method="tools/list"))
    return result.root.tools


async def _call(server: Any, name: str, arguments: dict[str, Any] | None = None) -> Any:
    handler = server.request_handlers[types.CallToolRequest]
    result = await handler(_call_request(name, arguments))
    return result.root


# ── tools/list ───────────────────────────────────────────────────


class TestListTools:
    async def test_lists_registry(self, make_dispatcher: Any) -> None:
        server = create_server(
            make_dispatcher(FakeTool("first", required=["store_Hash"]), FakeTool("second"))
        )
        tools = await _list(server)
        assert [t.name for t in tools] == ["first", "second"]
        assert tools[0].inputSchema["required"] == ["store_Hash"]
        assert tools[0].description == "Fake tool first"

    async def test_empty_registry(self, make_dispatcher: Any) -> None:
        assert await _list(create_server(make_dispatcher())) == []


# ── tools/call ───────────────────────────────────────────────────


class TestCallTool:
    async def test_success_result(self, make_dispatcher: Any) -> None:
        server = create_server(
            make_dispatcher(FakeTool("t", result=Success([{"id": 1}, {"id": 2}])))
        )
        result = await _call(server, "t", {})
        assert isinstance(result, types.CallToolResult)
        assert result.isError is False
        assert result.content[0].text.startswith("Found 2 items:\n")
        assert result.meta is not None
        assert result.meta["toolName"] == "t"
        assert result.meta["hasData"] is True

    async def test_meta_serialised_with_underscore(self, make_dispatcher: Any) -> None:
        server = create_server(make_dispatcher(FakeTool("t", result=Success({"a": 1}))))
        result = await _call(server, "t", {})
        dumped = json.loads(result.model_dump_json(by_alias=True, exclude_none=True))
        assert dumped["_meta"]["resultType"] == "object"
        assert dumped["_meta"]["hasData"] is False

    async def test_business_failure(self, make_dispatcher: Any) -> None:
        server = create_server(make_dispatcher(failing_tool("t", "HTTP 401: nope")))
        result = await _call(server, "t", {})
        assert result.isError is True
        assert result.content[0].text == "Error: HTTP 401: nope"

    async def test_unknown_tool_is_protocol_error(self, make_dispatcher: Any) -> None:
        server = create_server(make_dispatcher(FakeTool("t")))
        with pytest.raises(McpError) as exc:
            await _call(server, "missing", {})
        assert exc.value.error.code == types.METHOD_NOT_FOUND
        assert exc.value.error.message == "Unknown tool: missing"

    async def test_missing_param_is_protocol_error(self, make_dispatcher: Any) -> None:
        server = create_server(make_dispatcher(FakeTool("t", required=["store_Hash"])))
        with pytest.raises(McpError) as exc:
            await _call(server, "t", {"other": 1})
        assert exc.value.error.code == types.INVALID_PARAMS
        assert "store_Hash" in exc.value.error.message

    async def test_missing_arguments(self, make_dispatcher: Any) -> None:
        server = create_server(make_dispatcher(FakeTool("t", required=["a"])))
        with pytest.raises(McpError) as exc:
            await _call(server, "t", None)
        assert exc.value.error.code == types.INVALID_PARAMS

    async def test_tool_crash_is_internal_error(self, make_dispatcher: Any) -> None:
        server = create_server(
            make_dispatcher(FakeTool("t", raises=ValueError("bad value")))
        )
        with pytest.raises(McpError) as exc:
            await _call(server, "t", {})
        assert exc.value.error.code == types.INTERNAL_ERROR
        assert exc.value.error.message == "API error: bad value"


class TestToCallToolResult:
    def test_without_meta(self) -> None:
        result = to_call_tool_result(ResponseEnvelope(text="x", is_error=True))
        assert result.isError is True
        assert result.meta is None


# ── stdio entry point ────────────────────────────────────────────


class TestRunServer:
    async def test_runs_over_stdio(self, make_dispatcher: Any) -> None:
        streams = (object(), object())

        class _Ctx:
            async def __aenter__(self) -> tuple[object, object]:
                return streams

            async def __aexit__(self, *args: Any) -> None:
                return None

        with (
            patch("bigcommerce_mcp.mcp.server.stdio_server", return_value=_Ctx()),
            patch("mcp.server.Server.run", new_callable=AsyncMock) as run,
        ):
            await run_server(make_dispatcher())

        run.assert_awaited_once()
        assert run.await_args.args[:2] == streams
