# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared ASGI transport primitives.

Concrete HTTP transports supply a session manager and their routes; this
base wires them into a Starlette app with a ``GET /health`` route and runs
the manager inside the app lifespan. The app is served with uvicorn. Both
transports take the client's app id from the same two places, see
:func:`client_identity`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from starlette.applications import Starlette
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response
from starlette.routing import Route
from uvicorn import Config, Server

from ...utils import to_json
from ..credentials import resolve_identity
from .base import BaseTransport


if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from ..core import GatewayServer


class SessionManagerProtocol(Protocol):
    """What an HTTP transport's session manager must provide."""

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None: ...

    def run(self) -> AbstractAsyncContextManager[None]: ...


@dataclass(slots=True)
class SessionManagerHandler:
    """ASGI adapter that connects a session manager to the runtime."""

    session_manager: SessionManagerProtocol
    transport_label: str
    allowed_scopes: tuple[str, ...]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        scope_type = scope.get("type")
        if scope_type not in self.allowed_scopes:
            allowed = ", ".join(self.allowed_scopes)
            raise TypeError(f"{self.transport_label} only handles ASGI scopes: {allowed} (got {scope_type!r}).")

        await self.session_manager.handle_request(scope, receive, send)

    def lifespan(self) -> Callable[[Starlette], AbstractAsyncContextManager[None]]:
        """Return an ASGI lifespan hook bound to the session manager."""

        @asynccontextmanager
        async def _lifespan(_app: Starlette) -> AsyncIterator[None]:
            async with self.session_manager.run():
                yield

        return _lifespan


APP_ID_PARAM = "app_id"
APP_ID_HEADER = "x-app-id"


def client_identity(request: HTTPConnection) -> str | None:
    """App id offered by an HTTP client: query parameter first, then header."""
    return resolve_identity(request.query_params.get(APP_ID_PARAM), request.headers.get(APP_ID_HEADER))


def json_response(payload: Any, *, status_code: int = 200, headers: dict[str, str] | None = None) -> Response:
    return Response(to_json(payload), status_code=status_code, headers=headers, media_type="application/json")


async def health(_request: Request) -> Response:
    return json_response({"status": "ok"})


class ASGITransportBase(BaseTransport, ABC):
    """Template for transports that present a :class:`GatewayServer` via ASGI."""

    ALLOWED_SCOPES: tuple[str, ...] = ("http",)
    DEFAULT_LOG_LEVEL: str = "info"

    def __init__(self, server: GatewayServer) -> None:
        super().__init__(server)
        self.session_manager: SessionManagerProtocol | None = None

    def build_app(self, *, path: str | None = None) -> Starlette:
        """Assemble the Starlette app without serving it."""
        manager = self._build_session_manager()
        self.session_manager = manager
        handler = self._build_handler(manager)
        routes = [
            Route("/health", health, methods=["GET"]),
            *self._build_routes(path=path or self.server.settings.path, handler=handler),
        ]
        return self._to_asgi(Starlette(routes=routes, lifespan=handler.lifespan()))

    async def run(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        path: str | None = None,
        log_level: str | None = None,
        **uvicorn_options: Any,
    ) -> None:
        settings = self.server.settings
        app = self.build_app(path=path)
        config = Config(
            app=app,
            host=host or settings.host,
            port=port or settings.port,
            log_level=log_level or self.DEFAULT_LOG_LEVEL,
            **uvicorn_options,
        )
        await Server(config).serve()

    def _build_handler(self, manager: SessionManagerProtocol) -> SessionManagerHandler:
        return SessionManagerHandler(
            session_manager=manager,
            transport_label=self.transport_display_name,
            allowed_scopes=self.ALLOWED_SCOPES,
        )

    def _to_asgi(self, app: Starlette) -> Starlette:
        """Hook for subclasses to wrap the app (middleware, instrumentation)."""
        return app

    @abstractmethod
    def _build_session_manager(self) -> SessionManagerProtocol: ...

    @abstractmethod
    def _build_routes(self, *, path: str, handler: SessionManagerHandler) -> Iterable[Route]: ...


__all__ = [
    "APP_ID_HEADER",
    "APP_ID_PARAM",
    "ASGITransportBase",
    "SessionManagerHandler",
    "SessionManagerProtocol",
    "client_identity",
    "health",
    "json_response",
]
