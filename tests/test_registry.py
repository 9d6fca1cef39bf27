# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

from pydantic import BaseModel
import pytest

from ogmcp.errors import DuplicateCapabilityError, ServerValidationError
from ogmcp.server import CapabilityRegistry
from ogmcp.tool import extract_tool_spec, tool
from ogmcp.tools import ALL_TOOLS


EXPECTED_TOOLS = [
    "getOgData",
    "getOgScrapeData",
    "getOgScreenshot",
    "getOgQuery",
    "getOgExtract",
    "generateImage",
    "iterateImage",
    "inspectImageSession",
    "exportImageAsset",
]


class EchoInput(BaseModel):
    text: str


@tool("echo", input_model=EchoInput)
async def echo(args: EchoInput, ctx):
    return args.text


def test_catalogue_order_and_names():
    registry = CapabilityRegistry(ALL_TOOLS)
    assert list(registry) == EXPECTED_TOOLS
    assert [definition.name for definition in registry.definitions] == EXPECTED_TOOLS


def test_duplicate_tool_name_fails_construction():
    with pytest.raises(DuplicateCapabilityError) as excinfo:
        CapabilityRegistry([echo, echo])
    assert excinfo.value.name == "echo"


def test_undecorated_callable_is_rejected():
    async def plain(args, ctx):
        return None

    with pytest.raises(ServerValidationError):
        CapabilityRegistry([plain])


def test_registry_is_read_only():
    registry = CapabilityRegistry([echo])
    with pytest.raises(TypeError):
        registry["other"] = extract_tool_spec(echo)  # type: ignore[index]


def test_og_schemas_describe_urls():
    registry = CapabilityRegistry(ALL_TOOLS)
    schema = registry["getOgData"].definition().inputSchema
    assert schema["required"] == ["url"]
    assert schema["properties"]["url"]["format"] == "uri"
    assert "title" not in schema

    query = registry["getOgQuery"].definition().inputSchema
    assert "responseStructure" in query["properties"]
    assert set(query["required"]) == {"site", "query"}

    extract = registry["getOgExtract"].definition().inputSchema
    assert extract["properties"]["html_elements"]["type"] == "array"


def test_image_schemas_use_camel_case():
    registry = CapabilityRegistry(ALL_TOOLS)
    generate = registry["generateImage"].definition().inputSchema["properties"]
    for name in ("diagramCode", "diagramFormat", "brandColors", "cropX1", "autoCrop", "outputStyle"):
        assert name in generate

    iterate = registry["iterateImage"].definition().inputSchema
    assert set(iterate["required"]) == {"sessionId", "assetId", "prompt"}
    assert iterate["properties"]["sessionId"]["format"] == "uuid"


def test_og_tools_require_credentials_image_tools_do_not():
    registry = CapabilityRegistry(ALL_TOOLS)
    assert all(registry[name].requires_credential for name in EXPECTED_TOOLS[:5])
    assert not any(registry[name].requires_credential for name in EXPECTED_TOOLS[5:])


def test_annotations_are_published():
    registry = CapabilityRegistry(ALL_TOOLS)
    annotations = registry["getOgScreenshot"].definition().annotations
    assert annotations is not None
    assert annotations.readOnlyHint is True
    assert annotations.openWorldHint is True
