# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import base64

import orjson
from pydantic import BaseModel

from ogmcp import types
from ogmcp.resource_template import ResourcePayload
from ogmcp.server.adapters import error_result, normalize_resource_payload, normalize_tool_result


class _Payload(BaseModel):
    title: str
    note: str | None = None


def test_call_tool_result_passes_through():
    result = types.CallToolResult(content=[], isError=True)
    assert normalize_tool_result(result) is result


def test_none_becomes_empty_content():
    assert normalize_tool_result(None).content == []


def test_strings_and_models():
    assert normalize_tool_result("plain").content[0].text == "plain"
    assert normalize_tool_result(_Payload(title="x")).content[0].text == '{"title":"x"}'


def test_mapping_that_looks_like_a_block():
    image = normalize_tool_result({"type": "image", "data": "AAAA", "mimeType": "image/png"})
    assert isinstance(image.content[0], types.ImageContent)

    # A "type" key alone does not make a content block.
    loose = normalize_tool_result({"type": "image", "caption": "no data"})
    assert isinstance(loose.content[0], types.TextContent)
    assert orjson.loads(loose.content[0].text) == {"type": "image", "caption": "no data"}


def test_lists_with_blocks_are_flattened():
    result = normalize_tool_result(
        [types.TextContent(type="text", text="one"), {"type": "text", "text": "two"}, "three"]
    )
    assert [block.text for block in result.content] == ["one", "two", "three"]


def test_plain_lists_stay_one_payload():
    result = normalize_tool_result([1, 2, 3])
    assert len(result.content) == 1
    assert result.content[0].text == "[1,2,3]"


def test_error_result_shape():
    result = error_result("Failed to fetch OG data: boom", hint="retry")

    assert result.isError
    assert orjson.loads(result.content[0].text) == {"error": "Failed to fetch OG data: boom", "hint": "retry"}


def test_resource_payload_becomes_blob():
    result = normalize_resource_payload("asset://a/b", ResourcePayload(b"\x00\x01", mime_type="image/png"))

    (contents,) = result.contents
    assert isinstance(contents, types.BlobResourceContents)
    assert contents.mimeType == "image/png"
    assert base64.b64decode(contents.blob) == b"\x00\x01"
