# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Legacy HTTP+SSE transport adapter.

``GET /sse`` opens a long-lived event stream whose first event names the
message endpoint (``/messages?session_id=...``); the client then POSTs
JSON-RPC messages there and reads every reply from the stream. Framing is
delegated to the SDK's ``SseServerTransport``; each stream pair is served by
the same loop as stdio, so closing the stream closes the session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from mcp.server.sse import SseServerTransport
from starlette.requests import Request
from starlette.routing import Route

from ...utils import get_logger
from ._asgi import ASGITransportBase, SessionManagerHandler, client_identity
from ._stream import run_stream_session


if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from ..core import GatewayServer


SSE_PATH = "/sse"
MESSAGES_PATH = "/messages"


class SSESessionManager:
    def __init__(self, server: GatewayServer, *, messages_path: str = MESSAGES_PATH) -> None:
        self._server = server
        self._sse = SseServerTransport(messages_path)
        self._logger = get_logger("ogmcp.transport.sse")
        self.active_sessions = 0

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        # Each stream owns its session; there is nothing shared to start.
        yield

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        if request.method == "POST":
            await self._sse.handle_post_message(scope, receive, send)
            return

        session = self._server.create_session(client_identity(request))
        self._logger.info("Opened SSE session %s", session.id)
        self.active_sessions += 1
        try:
            async with self._sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
                await run_stream_session(session, read_stream, write_stream)
        finally:
            self.active_sessions -= 1
            session.close("stream closed")


class SSETransport(ASGITransportBase):
    """Serve a :class:`ogmcp.server.GatewayServer` over HTTP+SSE."""

    TRANSPORT = ("sse", "SSE")

    def _build_session_manager(self) -> SSESessionManager:
        return SSESessionManager(self.server)

    def _build_routes(self, *, path: str, handler: SessionManagerHandler) -> Iterable[Route]:
        return [
            Route(SSE_PATH, handler, methods=["GET"]),
            Route(MESSAGES_PATH, handler, methods=["POST"]),
        ]


__all__ = ["MESSAGES_PATH", "SSE_PATH", "SSESessionManager", "SSETransport"]
