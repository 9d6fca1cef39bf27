# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Per-connection protocol session.

A :class:`GatewaySession` is created by a transport when a client connects
and lives until the transport closes it. It moves through four states::

    UNINITIALIZED --initialize--> ACTIVE --close()--> CLOSING --> CLOSED

Client requests are dispatched one at a time under a FIFO lock, so handlers
observe a consistent view of the session's subscriptions and log level.
Responses to server-initiated requests (sampling) bypass that lock; otherwise
a handler awaiting the client's answer would deadlock.

Everything the server pushes to the client (notifications and server
requests) goes through a bounded outbox. Transports claim the outbox's
receive side and forward it to the wire; if the outbox is full the message is
dropped with a warning rather than blocking the producer.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
import enum
import itertools
from typing import TYPE_CHECKING, Any
import uuid

import anyio
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp.shared.exceptions import McpError
from pydantic import BaseModel, ValidationError

from .. import types
from ..errors import ProtocolFault, SessionClosedError, SessionNotInitializedError
from ..tool import HandlerContext
from ..utils import get_logger
from ..versioning import LATEST_PROTOCOL_VERSION, VersionFeatures, features_for, negotiate_version
from .protocol import (
    REQUEST_TYPES,
    error_message,
    notification_message,
    parse_client_request,
    request_message,
    response_message,
)
from .scheduler import NotificationScheduler


if TYPE_CHECKING:
    from .core import GatewayServer


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


_PendingReply = types.JSONRPCResponse | types.JSONRPCError


class GatewaySession:
    def __init__(self, server: GatewayServer, session_id: str | None = None) -> None:
        settings = server.settings
        self.id = session_id or uuid.uuid4().hex
        self.created_at = datetime.now(UTC)
        self.state = SessionState.UNINITIALIZED
        self.client_params: types.InitializeRequestParams | None = None
        self.protocol_version: str | None = None

        self._server = server
        self._logger = get_logger("ogmcp.session")
        self._lock = anyio.Lock()
        self._subscriptions: dict[str, None] = {}
        self._log_level: types.LoggingLevel = settings.default_log_level

        self._outbox_send, self._outbox_receive = anyio.create_memory_object_stream[types.JSONRPCMessage](
            settings.outbox_size
        )
        self._outbox_claimed = False
        self._pending: dict[types.RequestId, MemoryObjectSendStream[_PendingReply]] = {}
        self._request_ids = itertools.count(1)

        self._scheduler = NotificationScheduler(
            self,
            resource_interval=settings.resource_update_interval,
            log_interval=settings.log_sample_interval,
            stderr_interval=settings.stderr_interval,
        )

    def __repr__(self) -> str:
        return f"<GatewaySession id={self.id} state={self.state.value}>"

    # //////////////////////////////////////////////////////////////////
    # State
    # //////////////////////////////////////////////////////////////////

    @property
    def closed(self) -> bool:
        return self.state in (SessionState.CLOSING, SessionState.CLOSED)

    @property
    def credential(self) -> str | None:
        return self._server.credentials.get(self.id)

    def bind_credential(self, token: str | None) -> bool:
        self._ensure_open()
        return self._server.credentials.bind(self.id, token)

    @property
    def subscriptions(self) -> tuple[str, ...]:
        """Subscribed URIs in subscription order."""
        return tuple(self._subscriptions)

    @property
    def log_level(self) -> types.LoggingLevel:
        return self._log_level

    @property
    def features(self) -> VersionFeatures:
        return features_for(self.protocol_version or LATEST_PROTOCOL_VERSION)

    @property
    def scheduler(self) -> NotificationScheduler:
        return self._scheduler

    def client_supports_sampling(self) -> bool:
        return bool(self.client_params and self.client_params.capabilities.sampling is not None)

    def attach(self, task_group: TaskGroup) -> None:
        """Start the periodic notification jobs inside *task_group*."""
        if self.closed:
            return
        self._scheduler.start(task_group)

    def close(self, reason: str = "closed") -> bool:
        """Tear the session down. Returns ``False`` if it was already closing.

        Does not wait for in-flight requests. Their replies are discarded
        and they can no longer mutate the session.
        """
        if self.closed:
            return False
        self.state = SessionState.CLOSING
        cancelled = self._scheduler.cancel()
        self._subscriptions.clear()
        self._server.credentials.unbind(self.id)

        self._outbox_send.close()
        if not self._outbox_claimed:
            self._outbox_receive.close()
        for stream in self._pending.values():
            stream.close()
        self._pending.clear()

        self.state = SessionState.CLOSED
        self._logger.info("Session %s closed (%s, %d periodic task(s) cancelled)", self.id, reason, cancelled)
        return True

    def _ensure_open(self) -> None:
        if self.closed:
            raise SessionClosedError()

    def _ensure_accepting(self, request: BaseModel) -> None:
        self._ensure_open()
        if isinstance(request, types.InitializeRequest):
            if self.state is not SessionState.UNINITIALIZED:
                raise ProtocolFault("Session already initialized", code=types.INVALID_REQUEST)
        elif self.state is SessionState.UNINITIALIZED and not isinstance(request, types.PingRequest):
            raise SessionNotInitializedError()

    # //////////////////////////////////////////////////////////////////
    # Inbound
    # //////////////////////////////////////////////////////////////////

    async def handle_message(self, message: types.JSONRPCMessage) -> types.JSONRPCMessage | None:
        """Process one inbound message and return the reply, if any."""
        root = message.root
        if isinstance(root, types.JSONRPCRequest):
            return await self._handle_request(root)
        if isinstance(root, types.JSONRPCNotification):
            self._handle_notification(root)
            return None
        self._resolve_pending(root)
        return None

    async def dispatch(self, request: BaseModel) -> BaseModel:
        """Run the handler for a typed client request under the session lock."""
        handler = _HANDLERS.get(type(request))
        if handler is None:
            raise ProtocolFault(f"Method not found: {getattr(request, 'method', '?')}", code=types.METHOD_NOT_FOUND)
        async with self._lock:
            self._ensure_accepting(request)
            return await handler(self, request)

    async def _handle_request(self, root: types.JSONRPCRequest) -> types.JSONRPCMessage | None:
        try:
            request = parse_client_request(root)
            result = await self.dispatch(request)
        except McpError as exc:
            reply = error_message(root.id, exc.error)
        except Exception:
            self._logger.exception("Unhandled error while handling %s", root.method)
            reply = error_message(root.id, types.ErrorData(code=types.INTERNAL_ERROR, message="Internal error"))
        else:
            reply = response_message(root.id, result)

        if self.closed:
            self._logger.debug("Discarding reply to %s for closed session %s", root.method, self.id)
            return None
        return reply

    def _handle_notification(self, root: types.JSONRPCNotification) -> None:
        if root.method == "notifications/initialized":
            self._logger.debug("Client confirmed initialization for session %s", self.id)
        elif root.method == "notifications/cancelled":
            self._logger.debug("Client cancelled request %s", (root.params or {}).get("requestId"))
        else:
            self._logger.debug("Ignoring client notification %s", root.method)

    def _resolve_pending(self, root: _PendingReply) -> None:
        stream = self._pending.pop(root.id, None)
        if stream is None:
            self._logger.debug("Dropping reply for unknown request id %r", root.id)
            return
        try:
            stream.send_nowait(root)
        except (anyio.WouldBlock, anyio.BrokenResourceError, anyio.ClosedResourceError):
            self._logger.debug("Requester for %r is gone", root.id)
        finally:
            stream.close()

    # //////////////////////////////////////////////////////////////////
    # Outbound
    # //////////////////////////////////////////////////////////////////

    def claim_outbox(self) -> MemoryObjectReceiveStream[types.JSONRPCMessage]:
        """Hand the outbox to a transport writer. Only one writer at a time."""
        if self._outbox_claimed:
            raise RuntimeError(f"Outbox for session {self.id} already has a reader")
        self._outbox_claimed = True
        return self._outbox_receive

    def release_outbox(self) -> None:
        self._outbox_claimed = False
        if self.closed:
            self._outbox_receive.close()

    def post(self, message: types.JSONRPCMessage) -> bool:
        """Queue *message* for the client without blocking."""
        if self.closed:
            return False
        try:
            self._outbox_send.send_nowait(message)
        except anyio.WouldBlock:
            self._logger.warning("Outbox full for session %s; dropping message", self.id)
            return False
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            return False
        return True

    async def send_notification(self, notification: BaseModel) -> bool:
        return self.post(notification_message(notification))

    async def notify_resource_updated(self, uri: str) -> None:
        await self.send_notification(
            types.ResourceUpdatedNotification(
                method="notifications/resources/updated",
                params=types.ResourceUpdatedNotificationParams(uri=uri),
            )
        )

    async def log(self, level: types.LoggingLevel, data: Any, *, logger: str | None = None) -> bool:
        """Send ``notifications/message`` if *level* meets the session threshold."""
        if not self._server.logging.is_enabled(level, self._log_level):
            return False
        return await self.send_notification(self._server.logging.message(level, data, logger=logger))

    async def notify_stderr(self, content: str) -> None:
        self.post(
            types.JSONRPCMessage(
                types.JSONRPCNotification(jsonrpc="2.0", method="notifications/stderr", params={"content": content})
            )
        )

    async def request_client(self, request: BaseModel, result_type: type[BaseModel], *, timeout: float) -> Any:
        """Send a server request and wait for the client's answer.

        Raises:
            McpError: the client answered with an error, or the request could
                not be delivered.
            TimeoutError: no answer within *timeout* seconds.
        """
        self._ensure_open()
        request_id = next(self._request_ids)
        send, receive = anyio.create_memory_object_stream[_PendingReply](1)
        self._pending[request_id] = send
        try:
            if not self.post(request_message(request_id, request)):
                raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message="Could not deliver request"))
            with anyio.fail_after(timeout):
                try:
                    reply = await receive.receive()
                except anyio.EndOfStream:
                    raise SessionClosedError() from None
        finally:
            self._pending.pop(request_id, None)
            send.close()
            receive.close()

        if isinstance(reply, types.JSONRPCError):
            raise McpError(reply.error)
        try:
            return result_type.model_validate(reply.result)
        except ValidationError as exc:
            raise McpError(
                types.ErrorData(code=types.INVALID_PARAMS, message=f"Malformed reply to {request_id}: {exc}")
            ) from exc

    # //////////////////////////////////////////////////////////////////
    # Request handlers
    # //////////////////////////////////////////////////////////////////

    def handler_context(self) -> HandlerContext:
        return HandlerContext(
            session_id=self.id,
            credential=self.credential,
            opengraph=self._server.opengraph,
            image_agent=self._server.image_agent,
            logger=self._logger,
        )

    async def _on_initialize(self, request: types.InitializeRequest) -> types.InitializeResult:
        params = request.params
        self.client_params = params
        self.protocol_version = negotiate_version(params.protocolVersion)
        self.state = SessionState.ACTIVE
        self._logger.info(
            "Session %s initialized by %s %s (protocol %s)",
            self.id,
            params.clientInfo.name,
            params.clientInfo.version,
            self.protocol_version,
        )
        return self._server.initialize_result(self.protocol_version)

    async def _on_ping(self, _request: types.PingRequest) -> types.EmptyResult:
        return types.EmptyResult()

    async def _on_list_tools(self, _request: types.ListToolsRequest) -> types.ListToolsResult:
        return self._server.tools.list_tools()

    async def _on_call_tool(self, request: types.CallToolRequest) -> types.CallToolResult:
        params = request.params
        return await self._server.tools.call_tool(params.name, params.arguments, self.handler_context())

    async def _on_list_resources(self, _request: types.ListResourcesRequest) -> types.ListResourcesResult:
        return self._server.resources.list_resources()

    async def _on_list_templates(
        self, _request: types.ListResourceTemplatesRequest
    ) -> types.ListResourceTemplatesResult:
        return self._server.resources.list_templates()

    async def _on_read_resource(self, request: types.ReadResourceRequest) -> types.ReadResourceResult:
        return await self._server.resources.read(str(request.params.uri), self.handler_context())

    async def _on_subscribe(self, request: types.SubscribeRequest) -> types.EmptyResult:
        uri = str(request.params.uri)
        if uri in self._subscriptions:
            return types.EmptyResult()
        self._subscriptions[uri] = None
        self._logger.debug("Session %s subscribed to %s", self.id, uri)
        await self._server.sampling.request_subscription_context(self, uri)
        return types.EmptyResult()

    async def _on_unsubscribe(self, request: types.UnsubscribeRequest) -> types.EmptyResult:
        uri = str(request.params.uri)
        if uri in self._subscriptions:
            del self._subscriptions[uri]
            self._logger.debug("Session %s unsubscribed from %s", self.id, uri)
        return types.EmptyResult()

    async def _on_list_prompts(self, _request: types.ListPromptsRequest) -> types.ListPromptsResult:
        return self._server.prompts.list_prompts()

    async def _on_get_prompt(self, request: types.GetPromptRequest) -> types.GetPromptResult:
        params = request.params
        return await self._server.prompts.get_prompt(params.name, params.arguments, self.features)

    async def _on_set_level(self, request: types.SetLevelRequest) -> types.EmptyResult:
        level = request.params.level
        self._log_level = level
        # The confirmation is sent even when it falls below the new threshold.
        await self.send_notification(self._server.logging.confirmation(level))
        return types.EmptyResult()

    async def _on_complete(self, request: types.CompleteRequest) -> types.CompleteResult:
        params = request.params
        return await self._server.completions.complete(params.ref, params.argument, getattr(params, "context", None))


_Handler = Callable[[GatewaySession, Any], Coroutine[Any, Any, BaseModel]]

_HANDLERS: dict[type[BaseModel], _Handler] = {
    types.InitializeRequest: GatewaySession._on_initialize,
    types.PingRequest: GatewaySession._on_ping,
    types.ListToolsRequest: GatewaySession._on_list_tools,
    types.CallToolRequest: GatewaySession._on_call_tool,
    types.ListResourcesRequest: GatewaySession._on_list_resources,
    types.ListResourceTemplatesRequest: GatewaySession._on_list_templates,
    types.ReadResourceRequest: GatewaySession._on_read_resource,
    types.SubscribeRequest: GatewaySession._on_subscribe,
    types.UnsubscribeRequest: GatewaySession._on_unsubscribe,
    types.ListPromptsRequest: GatewaySession._on_list_prompts,
    types.GetPromptRequest: GatewaySession._on_get_prompt,
    types.SetLevelRequest: GatewaySession._on_set_level,
    types.CompleteRequest: GatewaySession._on_complete,
}

SUPPORTED_METHODS: frozenset[str] = frozenset(method for method, model in REQUEST_TYPES.items() if model in _HANDLERS)


__all__ = ["SUPPORTED_METHODS", "GatewaySession", "SessionState"]
