"""API middleware: bearer-token gate and permissive CORS."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Collection

    from fastapi import Request, Response
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

UNAUTHORIZED_CODE = -32001


def jsonrpc_error(status_code: int, code: int, message: str) -> JSONResponse:
    """Build a JSON-RPC error response that is not tied to a request id."""
    return JSONResponse(
        status_code=status_code,
        content={
            "jsonrpc": "2.0",
            "error": {"code": code, "message": message},
            "id": None,
        },
    )


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <token>`` on protected paths.

    Does nothing when no token is configured.
    """

    def __init__(
        self,
        app: ASGIApp,
        token: str | None = None,
        protected_paths: Collection[str] = ("/mcp",),
    ) -> None:
        super().__init__(app)
        self.token = token
        self.protected_paths = frozenset(protected_paths)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if not self.token or request.url.path not in self.protected_paths:
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonrpc_error(
                401,
                UNAUTHORIZED_CODE,
                "Unauthorized: Missing or invalid authorization header",
            )

        token = auth_header[len("Bearer ") :]
        if not hmac.compare_digest(token.encode(), self.token.encode()):
            return jsonrpc_error(401, UNAUTHORIZED_CODE, "Unauthorized: Invalid token")

        return await call_next(request)


class PermissiveCORSMiddleware:
    """Allow every origin, method and header; answer ``OPTIONS`` with 200.

    Pure ASGI so that long-lived event streams pass through unbuffered.
    """

    ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"

    def __init__(self, app: ASGIApp, allow_headers: Collection[str] = ()) -> None:
        self.app = app
        self.allow_headers = ", ".join(
            [
                "Origin",
                "X-Requested-With",
                "Content-Type",
                "Accept",
                "Authorization",
                *allow_headers,
            ]
        )

    def _cors_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": self.ALLOW_METHODS,
            "Access-Control-Allow-Headers": self.allow_headers,
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            response = PlainTextResponse("OK", headers=self._cors_headers())
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for key, value in self._cors_headers().items():
                    if key not in headers:
                        headers[key] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)
