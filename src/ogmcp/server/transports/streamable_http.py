# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Streamable HTTP transport adapter.

A single endpoint (``/mcp`` by default) carries the whole session:

* ``POST`` delivers one JSON-RPC message. Without an ``Mcp-Session-Id``
  header it must be ``initialize``, which opens a session and returns its id
  in the response header. Requests are answered with a JSON body;
  notifications and client responses with ``202``.
* ``GET`` opens the session's server→client event stream (SSE). At most one
  stream per session is open at a time.
* ``DELETE`` closes the session.

Each session is paired with an SDK :class:`StreamableHTTPServerTransport`,
which does the HTTP framing and hands the session a read/write stream pair.
From there the session runs exactly as it does over stdio or SSE. This
manager keeps the id → session map, so unknown and missing ids are answered
here before any transport sees the request.

The app id for a new session comes from the ``app_id`` query parameter,
then the ``X-App-Id`` header, then the server default.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from ... import types
from ...errors import SessionNotFound
from ...utils import get_logger
from ..protocol import error_body
from ..session import GatewaySession, SessionState
from ._asgi import ASGITransportBase, SessionManagerHandler, client_identity, json_response
from ._stream import run_stream_session


if TYPE_CHECKING:
    from starlette.types import Message, Receive, Scope, Send

    from ..core import GatewayServer


SESSION_HEADER = MCP_SESSION_ID_HEADER


@dataclass(slots=True)
class _HTTPSession:
    session: GatewaySession
    transport: StreamableHTTPServerTransport


class HTTPSessionManager:
    """Owns the live HTTP sessions and the task group their stream loops run in."""

    def __init__(self, server: GatewayServer) -> None:
        self._server = server
        self._sessions: dict[str, _HTTPSession] = {}
        self._task_group: TaskGroup | None = None
        self._logger = get_logger("ogmcp.transport.http")

    @property
    def sessions(self) -> dict[str, GatewaySession]:
        return {session_id: entry.session for session_id, entry in self._sessions.items()}

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        if self._task_group is not None:
            raise RuntimeError("HTTPSessionManager is already running")
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            try:
                yield
            finally:
                for entry in list(self._sessions.values()):
                    await self._discard(entry, "server shutdown")
                self._task_group = None
                tg.cancel_scope.cancel()

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._task_group is None:
            raise RuntimeError("HTTPSessionManager.run() must be active to accept sessions")
        request = Request(scope, receive)
        session_id = request.headers.get(SESSION_HEADER)

        if session_id is None and request.method == "POST":
            await self._open_session(request, scope, receive, send)
            return

        try:
            entry = self._lookup(session_id)
        except SessionNotFound as exc:
            await self._session_error(exc)(scope, receive, send)
            return

        if request.method == "DELETE":
            await self._discard(entry, "client requested")
            await Response(status_code=200)(scope, receive, send)
            return
        guarded = self._answer_if_closed(entry.session, scope, receive, send)
        await entry.transport.handle_request(scope, receive, guarded)

    # //////////////////////////////////////////////////////////////////
    # Session bookkeeping
    # //////////////////////////////////////////////////////////////////

    async def _open_session(self, request: Request, scope: Scope, receive: Receive, send: Send) -> None:
        assert self._task_group is not None
        session = self._server.create_session(client_identity(request))
        entry = _HTTPSession(session, StreamableHTTPServerTransport(session.id, is_json_response_enabled=True))
        self._sessions[session.id] = entry
        await self._task_group.start(self._run_session, entry)

        # The transport answers 400 for anything but initialize without an id.
        await entry.transport.handle_request(scope, receive, send)
        if session.state is not SessionState.ACTIVE:
            await self._discard(entry, "initialize failed")
            return
        self._logger.info("Opened session %s", session.id)

    async def _run_session(
        self, entry: _HTTPSession, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED
    ) -> None:
        async with entry.transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await run_stream_session(entry.session, read_stream, write_stream)
            finally:
                if self._sessions.get(entry.session.id) is entry:
                    del self._sessions[entry.session.id]

    def _lookup(self, session_id: str | None) -> _HTTPSession:
        entry = self._sessions.get(session_id) if session_id else None
        if entry is None:
            raise SessionNotFound(session_id)
        return entry

    async def _discard(self, entry: _HTTPSession, reason: str) -> None:
        self._sessions.pop(entry.session.id, None)
        # Close first so replies still in flight are answered as 404 by _answer_if_closed.
        entry.session.close(reason)
        await entry.transport.terminate()

    def _answer_if_closed(self, session: GatewaySession, scope: Scope, receive: Receive, send: Send) -> Send:
        """Wrap *send* so a response started after the session closed becomes a 404."""
        replaced = False

        async def _send(message: Message) -> None:
            nonlocal replaced
            if replaced:
                return
            if message["type"] == "http.response.start" and session.closed:
                replaced = True
                response = self._session_error(SessionNotFound(session.id))
                await response(scope, receive, send)
                return
            await send(message)

        return _send

    @staticmethod
    def _session_error(exc: SessionNotFound) -> Response:
        status = 400 if not exc.session_id else 404
        message = f"Bad Request: {exc}" if status == 400 else str(exc)
        error = types.ErrorData(code=types.INVALID_REQUEST, message=message)
        return json_response(error_body(error), status_code=status)


class StreamableHTTPTransport(ASGITransportBase):
    """Serve a :class:`ogmcp.server.GatewayServer` over Streamable HTTP."""

    TRANSPORT = ("streamable-http", "Streamable HTTP", "streamable_http", "shttp", "http")

    def _build_session_manager(self) -> HTTPSessionManager:
        return HTTPSessionManager(self.server)

    def _build_routes(self, *, path: str, handler: SessionManagerHandler) -> Iterable[Route]:
        return [Route(path, handler, methods=["GET", "POST", "DELETE"])]


__all__ = ["SESSION_HEADER", "HTTPSessionManager", "StreamableHTTPTransport"]
