# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

from mcp.shared.exceptions import McpError
import pytest

from ogmcp import types
from ogmcp.errors import InvalidArgumentsError
from ogmcp.server.protocol import (
    REQUEST_TYPES,
    error_body,
    notification_message,
    parse_client_request,
    request_message,
    response_message,
)
from ogmcp.versioning import LATEST_PROTOCOL_VERSION, SUPPORTED_PROTOCOL_VERSIONS, features_for, negotiate_version


def test_request_types_cover_core_methods():
    for method in ("initialize", "ping", "tools/call", "resources/read", "prompts/get", "completion/complete"):
        assert method in REQUEST_TYPES
    assert REQUEST_TYPES["tools/call"] is types.CallToolRequest


def test_parse_client_request_unknown_method():
    request = types.JSONRPCRequest(jsonrpc="2.0", id=1, method="tools/teleport")

    with pytest.raises(McpError) as excinfo:
        parse_client_request(request)
    assert excinfo.value.error.code == types.METHOD_NOT_FOUND
    assert excinfo.value.error.message == "Method not found: tools/teleport"


def test_parse_client_request_bad_params():
    request = types.JSONRPCRequest(jsonrpc="2.0", id=1, method="tools/call", params={"arguments": {}})

    with pytest.raises(InvalidArgumentsError) as excinfo:
        parse_client_request(request)
    assert excinfo.value.error.code == types.INVALID_PARAMS
    assert excinfo.value.error.data


def test_parse_client_request_typed():
    request = types.JSONRPCRequest(
        jsonrpc="2.0", id=1, method="resources/subscribe", params={"uri": "asset://a/b"}
    )

    parsed = parse_client_request(request)
    assert isinstance(parsed, types.SubscribeRequest)
    assert str(parsed.params.uri) == "asset://a/b"


def test_outbound_message_builders():
    reply = response_message(7, types.EmptyResult())
    assert reply.root.id == 7
    assert reply.root.result == {}

    notification = notification_message(
        types.ServerNotification(
            types.ResourceUpdatedNotification(
                method="notifications/resources/updated",
                params=types.ResourceUpdatedNotificationParams(uri="asset://a/b"),
            )
        )
    )
    assert notification.root.method == "notifications/resources/updated"
    assert notification.root.params == {"uri": "asset://a/b"}

    request = request_message(
        "s-1", types.ServerRequest(types.PingRequest(method="ping"))
    )
    assert request.root.id == "s-1"
    assert request.root.method == "ping"


def test_error_body_allows_null_id():
    body = error_body(types.ErrorData(code=types.PARSE_ERROR, message="Parse error"))
    assert body == {"jsonrpc": "2.0", "id": None, "error": {"code": types.PARSE_ERROR, "message": "Parse error"}}


def test_negotiate_version():
    oldest = SUPPORTED_PROTOCOL_VERSIONS[0]
    assert negotiate_version(oldest) == oldest
    assert negotiate_version("1999-01-01") == LATEST_PROTOCOL_VERSION
    assert negotiate_version(None) == LATEST_PROTOCOL_VERSION


def test_features_follow_release_order():
    legacy = features_for("2024-11-05")
    assert not legacy.completions
    assert not legacy.resource_links

    middle = features_for("2025-03-26")
    assert middle.completions
    assert not middle.resource_links

    assert features_for("2025-06-18").resource_links
