# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import base64

from mcp.shared.exceptions import McpError
import pytest

from ogmcp import types
from ogmcp.catalog import ASSET_URI_TEMPLATE, read_asset
from ogmcp.errors import DuplicateCapabilityError, InvalidArgumentsError, NotFoundError, ResourceNotFoundError
from ogmcp.resource_template import UUID_PATTERN, ResourcePayload, resource_template
from ogmcp.server import GatewayServer, GatewaySession
from tests.helpers import ASSET_UUID, PNG_BYTES, SESSION_UUID, FakeDownstream, initialize, make_server, rpc


ASSET_URI = f"asset://{SESSION_UUID}/{ASSET_UUID}"


async def _read(session: GatewaySession, server: GatewayServer, uri: str) -> types.ReadResourceResult:
    return await server.resources.read(uri, session.handler_context())


def test_templates_are_listed_and_resources_are_empty(server: GatewayServer):
    assert server.resources.list_resources().resources == []
    (template,) = server.resources.list_templates().resourceTemplates
    assert template.uriTemplate == ASSET_URI_TEMPLATE
    assert template.name == "Generated Image Asset"
    assert template.mimeType == "image/png"


@pytest.mark.anyio
async def test_read_asset_returns_base64_blob(
    session: GatewaySession, server: GatewayServer, downstream: FakeDownstream
):
    downstream.route(
        "GET", f"/image-agent/assets/{ASSET_UUID}/file", content=PNG_BYTES, headers={"content-type": "image/png"}
    )

    result = await _read(session, server, ASSET_URI)

    (contents,) = result.contents
    assert isinstance(contents, types.BlobResourceContents)
    assert str(contents.uri) == ASSET_URI
    assert contents.mimeType == "image/png"
    assert base64.b64decode(contents.blob) == PNG_BYTES


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("uri", "message"),
    [
        (f"asset://{SESSION_UUID}", "Invalid asset URI format"),
        (f"asset://{SESSION_UUID}/{ASSET_UUID}/extra", "Invalid asset URI format"),
        (f"asset://{SESSION_UUID}/", "Invalid asset URI format"),
        (f"asset://not-a-uuid/{ASSET_UUID}", "must be valid UUIDs"),
        (f"asset://{SESSION_UUID}/1234", "must be valid UUIDs"),
        (f"asset://{SESSION_UUID}/{ASSET_UUID}\n", "must be valid UUIDs"),
    ],
)
async def test_malformed_asset_uris_never_reach_downstream(
    session: GatewaySession, server: GatewayServer, downstream: FakeDownstream, uri: str, message: str
):
    with pytest.raises(InvalidArgumentsError) as excinfo:
        await _read(session, server, uri)
    assert message in excinfo.value.message
    assert excinfo.value.error.code == types.INVALID_PARAMS
    assert downstream.requests == []


@pytest.mark.anyio
async def test_unknown_scheme(session: GatewaySession, server: GatewayServer):
    with pytest.raises(NotFoundError, match="Unknown resource URI scheme"):
        await _read(session, server, "file:///etc/passwd")


@pytest.mark.anyio
@pytest.mark.parametrize("uri", ["asset", "asset:/x", f"asset:{SESSION_UUID}/{ASSET_UUID}"])
async def test_scheme_without_separator_is_unknown(
    session: GatewaySession, server: GatewayServer, downstream: FakeDownstream, uri: str
):
    with pytest.raises(NotFoundError, match="Unknown resource URI scheme"):
        await _read(session, server, uri)
    assert downstream.requests == []


@pytest.mark.anyio
async def test_missing_asset_maps_to_resource_not_found(session: GatewaySession, server: GatewayServer):
    with pytest.raises(ResourceNotFoundError) as excinfo:
        await _read(session, server, ASSET_URI)
    assert excinfo.value.error.code == types.RESOURCE_NOT_FOUND


@pytest.mark.anyio
async def test_downstream_error_maps_to_internal_error(
    session: GatewaySession, server: GatewayServer, downstream: FakeDownstream
):
    downstream.route("GET", f"/image-agent/assets/{ASSET_UUID}/file", status=502, json={"message": "bad gateway"})

    with pytest.raises(McpError) as excinfo:
        await _read(session, server, ASSET_URI)

    assert excinfo.value.error.code == types.INTERNAL_ERROR
    assert excinfo.value.error.message == "Failed to fetch asset: Failed to get asset file: bad gateway"


@pytest.mark.anyio
async def test_read_over_session(session: GatewaySession, downstream: FakeDownstream):
    downstream.route(
        "GET", f"/image-agent/assets/{ASSET_UUID}/file", content=PNG_BYTES, headers={"content-type": "image/png"}
    )
    await initialize(session)

    reply = await session.handle_message(rpc("resources/read", {"uri": ASSET_URI}))

    (contents,) = reply.root.result["contents"]
    assert contents["mimeType"] == "image/png"
    assert base64.b64decode(contents["blob"]) == PNG_BYTES


def test_duplicate_scheme_is_rejected():
    @resource_template("asset://{id}", name="Other asset reader")
    async def other(params, ctx):
        return ResourcePayload(b"", "text/plain")

    with pytest.raises(DuplicateCapabilityError):
        make_server(resource_templates=[read_asset, other])


def test_template_shape_is_checked():
    with pytest.raises(ValueError):

        @resource_template("asset://{sessionId}/static", name="broken")
        async def broken(params, ctx):
            return ResourcePayload(b"", "text/plain")

    with pytest.raises(ValueError):

        @resource_template("asset://{id}", name="broken", patterns={"other": UUID_PATTERN})
        async def also_broken(params, ctx):
            return ResourcePayload(b"", "text/plain")
