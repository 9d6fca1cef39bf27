# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import anyio
from mcp.shared.exceptions import McpError
from pydantic import BaseModel
import pytest

from ogmcp import types
from ogmcp.errors import SessionClosedError, SessionNotInitializedError
from ogmcp.prompt import prompt
from ogmcp.server import GatewayServer, GatewaySession, SessionState
from ogmcp.server.session import SUPPORTED_METHODS
from ogmcp.tool import tool
from ogmcp.versioning import LATEST_PROTOCOL_VERSION
from tests.helpers import APP_ID, drain, initialize, initialize_request, make_server, make_settings, rpc


@pytest.mark.anyio
async def test_initialize_activates_session(session: GatewaySession):
    assert session.state is SessionState.UNINITIALIZED

    result = await initialize(session)

    assert session.state is SessionState.ACTIVE
    assert result.serverInfo.name == "og-mcp-server"
    assert result.protocolVersion == LATEST_PROTOCOL_VERSION
    capabilities = result.capabilities
    assert capabilities.resources is not None and capabilities.resources.subscribe is True
    assert capabilities.tools is not None
    assert capabilities.prompts is not None
    assert capabilities.logging is not None
    assert capabilities.completions is not None


@pytest.mark.anyio
async def test_unknown_protocol_version_negotiates_latest(session: GatewaySession):
    result = await initialize(session, version="1999-01-01")
    assert result.protocolVersion == LATEST_PROTOCOL_VERSION
    assert session.protocol_version == LATEST_PROTOCOL_VERSION


@pytest.mark.anyio
async def test_older_supported_version_is_kept(session: GatewaySession):
    result = await initialize(session, version="2025-03-26")
    assert result.protocolVersion == "2025-03-26"
    assert session.features.resource_links is False


@pytest.mark.anyio
async def test_requests_before_initialize_are_rejected(session: GatewaySession):
    with pytest.raises(SessionNotInitializedError):
        await session.dispatch(types.ListToolsRequest(method="tools/list"))

    reply = await session.handle_message(rpc("tools/list"))
    assert isinstance(reply.root, types.JSONRPCError)
    assert reply.root.error.code == types.INVALID_REQUEST


@pytest.mark.anyio
async def test_ping_is_allowed_before_initialize(session: GatewaySession):
    reply = await session.handle_message(rpc("ping", request_id=7))
    assert isinstance(reply.root, types.JSONRPCResponse)
    assert reply.root.id == 7
    assert reply.root.result == {}


@pytest.mark.anyio
async def test_second_initialize_is_rejected(session: GatewaySession):
    await initialize(session)
    with pytest.raises(McpError) as excinfo:
        await session.dispatch(initialize_request())
    assert excinfo.value.error.code == types.INVALID_REQUEST
    assert session.state is SessionState.ACTIVE


@pytest.mark.anyio
async def test_unknown_method_is_method_not_found(session: GatewaySession):
    await initialize(session)
    reply = await session.handle_message(rpc("roots/list"))
    assert reply.root.error.code == types.METHOD_NOT_FOUND

    reply = await session.handle_message(rpc("does/not/exist"))
    assert reply.root.error.code == types.METHOD_NOT_FOUND


def test_supported_methods_cover_the_surface():
    assert SUPPORTED_METHODS == {
        "initialize",
        "ping",
        "tools/list",
        "tools/call",
        "resources/list",
        "resources/templates/list",
        "resources/read",
        "resources/subscribe",
        "resources/unsubscribe",
        "prompts/list",
        "prompts/get",
        "logging/setLevel",
        "completion/complete",
    }


@pytest.mark.anyio
async def test_malformed_params_are_invalid_params(session: GatewaySession):
    await initialize(session)
    reply = await session.handle_message(rpc("tools/call", {"arguments": {}}))
    assert reply.root.error.code == types.INVALID_PARAMS
    assert "tools/call" in reply.root.error.message


@pytest.mark.anyio
async def test_unexpected_handler_errors_become_internal_errors():
    @prompt("boom")
    def boom(arguments):
        raise RuntimeError("kaboom")

    server = make_server(prompts=[boom], completions=[])
    session = server.create_session(APP_ID)
    await initialize(session)

    reply = await session.handle_message(rpc("prompts/get", {"name": "boom"}))

    assert reply.root.error.code == types.INTERNAL_ERROR
    assert reply.root.error.message == "Internal error"
    assert "kaboom" not in reply.root.error.message
    assert session.state is SessionState.ACTIVE


@pytest.mark.anyio
async def test_client_notifications_get_no_reply(session: GatewaySession):
    await initialize(session)
    message = types.JSONRPCMessage(
        types.JSONRPCNotification(jsonrpc="2.0", method="notifications/initialized")
    )
    assert await session.handle_message(message) is None


@pytest.mark.anyio
async def test_close_is_idempotent_and_final(session: GatewaySession):
    await initialize(session)

    assert session.close("first") is True
    assert session.close("second") is False
    assert session.state is SessionState.CLOSED
    assert session.subscriptions == ()

    with pytest.raises(SessionClosedError):
        await session.dispatch(types.PingRequest(method="ping"))
    assert await session.handle_message(rpc("ping")) is None
    assert session.post(types.JSONRPCMessage(types.JSONRPCNotification(jsonrpc="2.0", method="x"))) is False


@pytest.mark.anyio
async def test_close_clears_subscriptions_and_cancels_timers():
    server = make_server(settings=make_settings(resource_update_interval=5, log_sample_interval=5))
    session = server.create_session(APP_ID)
    await initialize(session)
    await session.dispatch(
        types.SubscribeRequest(method="resources/subscribe", params=types.SubscribeRequestParams(uri="asset://a/b"))
    )
    assert session.subscriptions == ("asset://a/b",)

    session.close()

    assert session.subscriptions == ()
    assert all(task.cancelled for task in session.scheduler.tasks)
    assert len(session.scheduler.tasks) == 2


@pytest.mark.anyio
async def test_full_outbox_drops_instead_of_blocking():
    server = make_server(settings=make_settings(outbox_size=1))
    session = server.create_session(APP_ID)
    await initialize(session)

    assert await session.log("error", "first") is True
    assert await session.log("error", "second") is False

    messages = drain(session)
    assert [message["params"]["data"] for message in messages] == ["first"]


@pytest.mark.anyio
async def test_outbox_has_a_single_reader(session: GatewaySession):
    session.claim_outbox()
    with pytest.raises(RuntimeError):
        session.claim_outbox()
    session.release_outbox()
    session.claim_outbox()


@pytest.mark.anyio
async def test_subscription_order_and_idempotence(session: GatewaySession):
    await initialize(session)

    async def subscribe(uri: str) -> None:
        await session.dispatch(
            types.SubscribeRequest(method="resources/subscribe", params=types.SubscribeRequestParams(uri=uri))
        )

    async def unsubscribe(uri: str) -> None:
        await session.dispatch(
            types.UnsubscribeRequest(
                method="resources/unsubscribe", params=types.UnsubscribeRequestParams(uri=uri)
            )
        )

    await subscribe("asset://s/1")
    await subscribe("asset://s/2")
    await subscribe("asset://s/1")
    assert session.subscriptions == ("asset://s/1", "asset://s/2")

    await unsubscribe("asset://s/1")
    await unsubscribe("asset://never")
    assert session.subscriptions == ("asset://s/2",)


class _Empty(BaseModel):
    pass


def _gated_server() -> tuple[GatewayServer, anyio.Event, anyio.Event]:
    """A server whose ``slow`` tool blocks until the returned release event is set."""
    started, release = anyio.Event(), anyio.Event()

    @tool("slow", input_model=_Empty)
    async def slow(args, ctx):
        started.set()
        await release.wait()
        return "done"

    return make_server(tools=[slow]), started, release


def _set_level(level: str, request_id: int) -> types.JSONRPCMessage:
    return rpc("logging/setLevel", {"level": level}, request_id=request_id)


@pytest.mark.anyio
async def test_requests_complete_in_arrival_order():
    server, started, release = _gated_server()
    session = server.create_session(APP_ID)
    await initialize(session)
    completed: list[types.RequestId] = []

    async def send(message: types.JSONRPCMessage) -> None:
        reply = await session.handle_message(message)
        completed.append(reply.root.id)

    async with anyio.create_task_group() as tg:
        tg.start_soon(send, rpc("tools/call", {"name": "slow", "arguments": {}}, request_id=1))
        await started.wait()
        tg.start_soon(send, _set_level("error", 2))
        await anyio.wait_all_tasks_blocked()
        tg.start_soon(send, _set_level("warning", 3))
        await anyio.wait_all_tasks_blocked()

        assert completed == []
        assert session.log_level == "debug"
        release.set()

    assert completed == [1, 2, 3]
    assert session.log_level == "warning"
    messages = drain(session)
    confirmations = [m["params"]["data"] for m in messages if m["method"] == "notifications/message"]
    assert confirmations == ["Logging level set to: error", "Logging level set to: warning"]
    session.close()


@pytest.mark.anyio
async def test_close_during_invocation_discards_reply_and_queued_requests():
    server, started, release = _gated_server()
    session = server.create_session(APP_ID)
    await initialize(session)
    replies: dict[types.RequestId, types.JSONRPCMessage | None] = {}

    async def send(request_id: int, message: types.JSONRPCMessage) -> None:
        replies[request_id] = await session.handle_message(message)

    async with anyio.create_task_group() as tg:
        tg.start_soon(send, 1, rpc("tools/call", {"name": "slow", "arguments": {}}, request_id=1))
        await started.wait()
        tg.start_soon(send, 2, _set_level("error", 2))
        await anyio.wait_all_tasks_blocked()

        assert session.close("client went away") is True
        assert session.credential is None
        release.set()

    assert replies == {1: None, 2: None}
    assert session.log_level == "debug"
    assert server.credentials.get(session.id) is None
    assert session.post(types.JSONRPCMessage(types.JSONRPCNotification(jsonrpc="2.0", method="x"))) is False
