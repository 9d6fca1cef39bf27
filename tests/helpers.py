# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared test helpers: a fake downstream API and session shortcuts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import anyio
import httpx

from ogmcp import types
from ogmcp.config import Settings
from ogmcp.server import GatewayServer, GatewaySession
from ogmcp.versioning import LATEST_PROTOCOL_VERSION


OG_BASE = "https://og.test"
APP_ID = "test-app-id"
SESSION_UUID = "11111111-1111-4111-8111-111111111111"
ASSET_UUID = "22222222-2222-4222-8222-222222222222"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeDownstream:
    """Routes requests by method and longest matching path prefix."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def route(
        self,
        method: str,
        prefix: str,
        *,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def _respond(_request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status, content=content, headers=headers)
            return httpx.Response(status, json=json, headers=headers)

        self.routes[(method.upper(), prefix)] = _respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        candidates = [
            (prefix, responder)
            for (method, prefix), responder in self.routes.items()
            if method == request.method and request.url.path.startswith(prefix)
        ]
        if not candidates:
            return httpx.Response(404, json={"error": "not found"})
        _, responder = max(candidates, key=lambda item: len(item[0]))
        return responder(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def last(self, method: str, prefix: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path.startswith(prefix):
                return request
        raise AssertionError(f"No {method} request to {prefix}")


def make_settings(**overrides: Any) -> Settings:
    base: dict[str, Any] = {
        "og_base_url": OG_BASE,
        "resource_update_interval": 0,
        "log_sample_interval": 0,
        "stderr_interval": 0,
        "sampling_timeout": 1.0,
    }
    base.update(overrides)
    return Settings(**base)


def make_server(downstream: FakeDownstream | None = None, **kwargs: Any) -> GatewayServer:
    settings = kwargs.pop("settings", None) or make_settings()
    http_client = (downstream or FakeDownstream()).client()
    return GatewayServer(settings=settings, http_client=http_client, **kwargs)


def initialize_request(
    *, version: str = LATEST_PROTOCOL_VERSION, sampling: bool = False
) -> types.InitializeRequest:
    capabilities = types.ClientCapabilities(sampling=types.SamplingCapability() if sampling else None)
    return types.InitializeRequest(
        method="initialize",
        params=types.InitializeRequestParams(
            protocolVersion=version,
            capabilities=capabilities,
            clientInfo=types.Implementation(name="test-client", version="0.0.1"),
        ),
    )


async def initialize(session: GatewaySession, **kwargs: Any) -> types.InitializeResult:
    return await session.dispatch(initialize_request(**kwargs))  # type: ignore[return-value]


def rpc(method: str, params: dict[str, Any] | None = None, request_id: int = 1) -> types.JSONRPCMessage:
    payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return types.JSONRPCMessage.model_validate(payload)


def drain(session: GatewaySession) -> list[dict[str, Any]]:
    """Everything queued in the session outbox, as plain dicts."""
    outbox = session.claim_outbox()
    messages = []
    while True:
        try:
            message = outbox.receive_nowait()
        except (anyio.WouldBlock, anyio.EndOfStream, anyio.ClosedResourceError):
            break
        messages.append(message.model_dump(by_alias=True, mode="json", exclude_none=True))
    session.release_outbox()
    return messages
