# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""JSON-RPC framing helpers.

Transports hand over parsed ``types.JSONRPCMessage`` envelopes;
:func:`parse_client_request` resolves a request envelope to the typed MCP
request model for its method.
Outbound helpers build envelopes from typed results and notifications.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, get_args, get_origin

from pydantic import BaseModel, ValidationError

from .. import types
from ..errors import InvalidArgumentsError, ProtocolFault


def _request_models() -> tuple[type[BaseModel], ...]:
    annotation = types.ClientRequest.model_fields["root"].annotation
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return get_args(annotation)


def _method_of(model: type[BaseModel]) -> str | None:
    literal = get_args(model.model_fields["method"].annotation)
    return literal[0] if len(literal) == 1 and isinstance(literal[0], str) else None


REQUEST_TYPES: Mapping[str, type[BaseModel]] = {
    method: model for model in _request_models() if (method := _method_of(model)) is not None
}


def parse_client_request(request: types.JSONRPCRequest) -> BaseModel:
    """Resolve *request* to its typed MCP request model."""
    model = REQUEST_TYPES.get(request.method)
    if model is None:
        raise ProtocolFault(f"Method not found: {request.method}", code=types.METHOD_NOT_FOUND)
    try:
        return model.model_validate({"method": request.method, "params": request.params})
    except ValidationError as exc:
        raise InvalidArgumentsError(
            f"Invalid params for {request.method}",
            data=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json", exclude_none=True)


def response_message(request_id: types.RequestId, result: BaseModel) -> types.JSONRPCMessage:
    return types.JSONRPCMessage(types.JSONRPCResponse(jsonrpc="2.0", id=request_id, result=dump(result)))


def error_message(request_id: types.RequestId, error: types.ErrorData) -> types.JSONRPCMessage:
    return types.JSONRPCMessage(types.JSONRPCError(jsonrpc="2.0", id=request_id, error=error))


def error_body(error: types.ErrorData, request_id: types.RequestId | None = None) -> dict[str, Any]:
    """Error envelope as a plain dict; ``id`` may be ``null`` for unparseable input."""
    return {"jsonrpc": "2.0", "id": request_id, "error": dump(error)}


def notification_message(notification: BaseModel) -> types.JSONRPCMessage:
    if isinstance(notification, types.ServerNotification):
        notification = notification.root
    return types.JSONRPCMessage(types.JSONRPCNotification(jsonrpc="2.0", **dump(notification)))


def request_message(request_id: types.RequestId, request: BaseModel) -> types.JSONRPCMessage:
    if isinstance(request, types.ServerRequest):
        request = request.root
    return types.JSONRPCMessage(types.JSONRPCRequest(jsonrpc="2.0", id=request_id, **dump(request)))


__all__ = [
    "REQUEST_TYPES",
    "dump",
    "error_body",
    "error_message",
    "notification_message",
    "parse_client_request",
    "request_message",
    "response_message",
]
