"""FastAPI application for the SSE transport.

``GET /sse`` opens an event stream and allocates a session; the first
event (``endpoint``) tells the client where to ``POST`` its messages.
``POST /messages?sessionId=<id>`` feeds one JSON-RPC message into the
matching session.  Sessions are kept in a :class:`SessionStore` that
lives on ``app.state`` for the lifetime of the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import anyio
from fastapi import APIRouter, FastAPI, Request
from mcp import types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.background import BackgroundTask
from starlette.responses import PlainTextResponse, Response

from bigcommerce_mcp import SERVER_NAME, __version__
from bigcommerce_mcp.api.middleware import PermissiveCORSMiddleware
from bigcommerce_mcp.mcp.dispatcher import timestamp
from bigcommerce_mcp.mcp.server import create_server

if TYPE_CHECKING:
    from anyio.streams.memory import MemoryObjectSendStream
    from mcp.server import Server
    from starlette.types import Receive, Scope, Send

    from bigcommerce_mcp.config.schema import AppConfig
    from bigcommerce_mcp.mcp.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"


@dataclass(frozen=True, slots=True)
class SseSession:
    """One live event stream and the protocol server attached to it."""

    session_id: str
    server: Server
    writer: MemoryObjectSendStream[SessionMessage | Exception]


class SessionStore:
    """Live SSE sessions keyed by session id.

    Only touched from the event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SseSession] = {}

    def create(
        self,
        server: Server,
        writer: MemoryObjectSendStream[SessionMessage | Exception],
    ) -> SseSession:
        session = SseSession(session_id=uuid4().hex, server=server, writer=writer)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> SseSession | None:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions


class SseEndpoint:
    """ASGI endpoint for ``GET /sse``."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        sessions: SessionStore,
        messages_path: str = MESSAGES_PATH,
    ) -> None:
        self.dispatcher = dispatcher
        self.sessions = sessions
        self.messages_path = messages_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        server = create_server(self.dispatcher)

        read_writer, read_stream = anyio.create_memory_object_stream[
            SessionMessage | Exception
        ](0)
        write_stream, write_reader = anyio.create_memory_object_stream[
            SessionMessage
        ](0)
        sse_writer, sse_reader = anyio.create_memory_object_stream[dict[str, Any]](0)

        session = self.sessions.create(server, read_writer)
        root_path = scope.get("root_path", "").rstrip("/")
        endpoint_uri = (
            f"{root_path}{self.messages_path}?sessionId={session.session_id}"
        )
        logger.info("SSE session %s opened", session.session_id)

        async def forward_messages() -> None:
            async with sse_writer, write_reader:
                await sse_writer.send({"event": "endpoint", "data": endpoint_uri})
                async for message in write_reader:
                    await sse_writer.send(
                        {
                            "event": "message",
                            "data": message.message.model_dump_json(
                                by_alias=True, exclude_none=True
                            ),
                        }
                    )

        async with anyio.create_task_group() as tg:
            tg.start_soon(
                server.run,
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
            try:
                response = EventSourceResponse(
                    content=sse_reader, data_sender_callable=forward_messages
                )
                await response(scope, receive, send)
            finally:
                self.sessions.delete(session.session_id)
                with anyio.CancelScope(shield=True):
                    await read_writer.aclose()
                tg.cancel_scope.cancel()
                logger.info("SSE session %s closed", session.session_id)


async def _deliver(session: SseSession, message: SessionMessage) -> None:
    try:
        await session.writer.send(message)
    except (anyio.ClosedResourceError, anyio.BrokenResourceError):
        logger.warning("SSE session %s closed before delivery", session.session_id)


router = APIRouter(tags=["sse"])


@router.post(MESSAGES_PATH)
async def post_message(request: Request) -> Response:
    """Route one client message to its live session."""
    sessions: SessionStore = request.app.state.sessions
    session_id = request.query_params.get("sessionId")
    session = sessions.get(session_id) if session_id else None
    if session is None:
        return PlainTextResponse(
            "No transport/server found for sessionId", status_code=400
        )

    body = await request.body()
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except ValidationError:
        logger.warning("Unparseable message for session %s", session_id)
        return PlainTextResponse("Could not parse message", status_code=400)

    return PlainTextResponse(
        "Accepted",
        status_code=202,
        background=BackgroundTask(_deliver, session, SessionMessage(message)),
    )


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Liveness probe reporting the number of open sessions."""
    sessions: SessionStore = request.app.state.sessions
    return {
        "status": "healthy",
        "server": SERVER_NAME,
        "version": __version__,
        "transport": "sse",
        "activeSessions": len(sessions),
        "timestamp": timestamp(),
    }


def create_sse_app(
    dispatcher: Dispatcher,
    config: AppConfig,
    sessions: SessionStore | None = None,
) -> FastAPI:
    """Create the SSE application."""
    sessions = sessions if sessions is not None else SessionStore()

    app = FastAPI(
        title=SERVER_NAME,
        description="BigCommerce API MCP server (SSE transport)",
        version=__version__,
    )
    app.state.config = config
    app.state.dispatcher = dispatcher
    app.state.sessions = sessions

    app.add_middleware(PermissiveCORSMiddleware, allow_headers=["Cache-Control"])

    app.include_router(router)
    app.add_route(
        "/sse",
        SseEndpoint(dispatcher, sessions),
        methods=["GET"],
        include_in_schema=False,
    )

    return app
