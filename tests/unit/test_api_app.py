"""Tests for the streamable HTTP application."""

from __future__ import annotations

import json
import re
from typing import Any

import anyio
import pytest
from fastapi.testclient import TestClient

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.api.app import StatelessMCPEndpoint, create_app
from bigcommerce_mcp.config.schema import AppConfig
from bigcommerce_mcp.tools.base import Success
from tests.fixtures.tools import FakeTool, HangingTool, failing_tool

_MCP_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


def _rpc(method: str, params: dict[str, Any] | None = None, rid: int = 1) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": rid, "method": method}
    if params is not None:
        body["params"] = params
    return body


@pytest.fixture
def client(make_dispatcher: Any) -> TestClient:
    dispatcher = make_dispatcher(
        FakeTool("list_things", required=["store_Hash"], result=Success([{"id": 7}])),
        failing_tool("broken", "HTTP 500: boom"),
    )
    return TestClient(create_app(dispatcher, AppConfig()))


# ── Health / info ───────────────────────────────────────────────


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["server"] == SERVER_NAME
        assert data["version"] == __version__
        assert data["capabilities"] == ["tools"]
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", data["timestamp"])

    def test_health_with_empty_registry(self, make_dispatcher: Any) -> None:
        client = TestClient(create_app(make_dispatcher(), AppConfig()))
        assert client.get("/health").json()["status"] == "healthy"

    def test_info(self, client: TestClient) -> None:
        data = client.get("/info").json()
        assert data["name"] == "bigcommerce-api-mcp"
        assert data["capabilities"] == {"tools": {}}
        assert data["supportedTransports"] == ["stdio", "sse", "streamable-http"]
        assert "products" in data["description"]

    def test_health_not_gated_by_token(self, make_dispatcher: Any) -> None:
        config = AppConfig(server={"auth_token": "s3cret"})  # type: ignore[arg-type]
        client = TestClient(create_app(make_dispatcher(), config))
        assert client.get("/health").status_code == 200


# ── POST /mcp ───────────────────────────────────────────────────


class TestStreamableHTTP:
    def test_tools_list(self, client: TestClient) -> None:
        resp = client.post("/mcp", json=_rpc("tools/list"), headers=_MCP_HEADERS)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == 1
        tools = data["result"]["tools"]
        assert [t["name"] for t in tools] == ["list_things", "broken"]
        assert tools[0]["inputSchema"]["required"] == ["store_Hash"]

    def test_tools_call(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "list_things", "arguments": {"store_Hash": "abc"}}),
            headers=_MCP_HEADERS,
        )
        result = resp.json()["result"]
        assert result["content"][0]["type"] == "text"
        assert result["content"][0]["text"].startswith("Found 1 items:\n")
        assert result["_meta"]["toolName"] == "list_things"
        assert result["_meta"]["hasData"] is True
        assert result.get("isError", False) is False

    def test_business_failure(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "broken", "arguments": {}}),
            headers=_MCP_HEADERS,
        )
        result = resp.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"] == "Error: HTTP 500: boom"

    def test_unknown_tool(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "nope", "arguments": {}}),
            headers=_MCP_HEADERS,
        )
        error = resp.json()["error"]
        assert error["code"] == -32601
        assert error["message"] == "Unknown tool: nope"

    def test_missing_parameter(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "list_things", "arguments": {}}),
            headers=_MCP_HEADERS,
        )
        error = resp.json()["error"]
        assert error["code"] == -32602
        assert error["message"] == "Missing required parameter: store_Hash"

    def test_requests_are_independent(self, client: TestClient) -> None:
        for rid in (1, 2, 3):
            resp = client.post("/mcp", json=_rpc("tools/list", rid=rid), headers=_MCP_HEADERS)
            assert resp.json()["id"] == rid

    def test_requires_token_when_configured(self, make_dispatcher: Any) -> None:
        config = AppConfig(server={"auth_token": "s3cret"})  # type: ignore[arg-type]
        client = TestClient(create_app(make_dispatcher(FakeTool("t")), config))
        resp = client.post("/mcp", json=_rpc("tools/list"), headers=_MCP_HEADERS)
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == -32001

        resp = client.post(
            "/mcp",
            json=_rpc("tools/list"),
            headers={**_MCP_HEADERS, "Authorization": "Bearer s3cret"},
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["tools"][0]["name"] == "t"

    def test_get_not_allowed(self, client: TestClient) -> None:
        assert client.get("/mcp").status_code == 405

    def test_server_fault_before_response(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _boom(*args: Any, **kwargs: Any) -> Any:
            raise RuntimeError("transport exploded")

        monkeypatch.setattr("bigcommerce_mcp.api.app.StreamableHTTPServerTransport", _boom)
        resp = client.post("/mcp", json=_rpc("tools/list"), headers=_MCP_HEADERS)
        assert resp.status_code == 500
        assert resp.json() == {
            "jsonrpc": "2.0",
            "error": {"code": -32603, "message": "Internal server error"},
            "id": None,
        }


# ── Client disconnect ───────────────────────────────────────────


def _mcp_scope() -> dict[str, Any]:
    return {
        "type": "http",
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/mcp",
        "root_path": "",
        "query_string": b"",
        "server": ("testserver", 80),
        "client": ("testclient", 50000),
        "headers": [
            (k.lower().encode(), v.encode()) for k, v in _MCP_HEADERS.items()
        ],
    }


class TestClientDisconnect:
    async def test_disconnect_cancels_in_flight_call(self, make_dispatcher: Any) -> None:
        tool = HangingTool()
        endpoint = StatelessMCPEndpoint(make_dispatcher(tool))
        body = json.dumps(
            _rpc("tools/call", {"name": "hanging_tool", "arguments": {}})
        ).encode()
        sent: list[dict[str, Any]] = []
        body_delivered = False

        async def receive() -> dict[str, Any]:
            nonlocal body_delivered
            if not body_delivered:
                body_delivered = True
                return {"type": "http.request", "body": body, "more_body": False}
            await tool.started.wait()
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        with anyio.fail_after(5):
            await endpoint(_mcp_scope(), receive, send)

        assert tool.calls == [{}]
        assert tool.cancelled is True
        assert not any(m["type"] == "http.response.start" for m in sent)

    async def test_disconnect_before_body(self, make_dispatcher: Any) -> None:
        tool = FakeTool("t")
        endpoint = StatelessMCPEndpoint(make_dispatcher(tool))
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await endpoint(_mcp_scope(), receive, send)
        assert sent == []
        assert tool.calls == []
