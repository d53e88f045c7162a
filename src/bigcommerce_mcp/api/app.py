"""FastAPI application for the streamable HTTP transport.

Every ``POST /mcp`` gets its own protocol server and transport, which
are torn down when the request finishes or the client goes away.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import anyio
from fastapi import FastAPI
from mcp.server.streamable_http import StreamableHTTPServerTransport

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.api.middleware import (
    BearerTokenMiddleware,
    PermissiveCORSMiddleware,
    jsonrpc_error,
)
from bigcommerce_mcp.mcp.server import create_server

if TYPE_CHECKING:
    from anyio.abc import TaskStatus
    from mcp.server import Server
    from starlette.types import Message, Receive, Scope, Send

    from bigcommerce_mcp.config.schema import AppConfig
    from bigcommerce_mcp.mcp.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = -32603


class StatelessMCPEndpoint:
    """ASGI endpoint serving one MCP exchange per HTTP request."""

    def __init__(self, dispatcher: Dispatcher, *, json_response: bool = True) -> None:
        self.dispatcher = dispatcher
        self.json_response = json_response

    async def _run_server(
        self,
        server: Server,
        transport: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        async with transport.connect() as (read_stream, write_stream):
            task_status.started()
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
                stateless=True,
            )

    async def _watch_disconnect(
        self,
        receive: Receive,
        client_gone: anyio.Event,
        cancel_scope: anyio.CancelScope,
    ) -> None:
        while (await receive())["type"] != "http.disconnect":
            pass
        client_gone.set()
        cancel_scope.cancel()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        body = await _read_body(receive)
        if body is None:
            return

        # The transport sees the buffered body, then a disconnect once
        # the watcher has seen the real one.
        body_replayed = False
        client_gone = anyio.Event()

        async def replay_receive() -> Message:
            nonlocal body_replayed
            if not body_replayed:
                body_replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            await client_gone.wait()
            return {"type": "http.disconnect"}

        try:
            server = create_server(self.dispatcher)
            transport = StreamableHTTPServerTransport(
                mcp_session_id=None,
                is_json_response_enabled=self.json_response,
            )
            async with anyio.create_task_group() as tg:
                await tg.start(self._run_server, server, transport)
                tg.start_soon(
                    self._watch_disconnect, receive, client_gone, tg.cancel_scope
                )
                try:
                    await transport.handle_request(scope, replay_receive, tracking_send)
                finally:
                    with anyio.CancelScope(shield=True):
                        await transport.terminate()
                    tg.cancel_scope.cancel()
        except Exception:
            logger.exception("Error handling MCP request")
            if not started:
                response = jsonrpc_error(
                    500, INTERNAL_ERROR_CODE, "Internal server error"
                )
                await response(scope, receive, send)
        if client_gone.is_set() and not started:
            logger.info("Client disconnected before the MCP response was sent")


async def _read_body(receive: Receive) -> bytes | None:
    """Drain the request body; ``None`` if the client left first."""
    chunks: list[bytes] = []
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] == "http.disconnect":
            return None
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)


def create_app(dispatcher: Dispatcher, config: AppConfig) -> FastAPI:
    """Create the streamable HTTP application."""
    app = FastAPI(
        title=SERVER_NAME,
        description="BigCommerce API MCP server (streamable HTTP transport)",
        version=__version__,
    )
    app.state.config = config
    app.state.dispatcher = dispatcher

    # ── Middleware (last added runs first) ──
    app.add_middleware(BearerTokenMiddleware, token=config.server.auth_token)
    app.add_middleware(PermissiveCORSMiddleware, allow_headers=["Mcp-Session-Id"])

    from bigcommerce_mcp.api.health import router as health_router

    app.include_router(health_router)
    app.add_route(
        "/mcp",
        StatelessMCPEndpoint(dispatcher, json_response=config.server.json_response),
        methods=["POST"],
        include_in_schema=False,
    )

    return app
