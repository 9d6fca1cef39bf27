# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from ogmcp import types
from ogmcp.completion import CompletionResult, completion
from ogmcp.errors import DuplicateCapabilityError, ServerValidationError
from ogmcp.prompt import prompt
from ogmcp.server import GatewayServer, GatewaySession
from ogmcp.server.services.completions import MAX_COMPLETION_VALUES, filter_prefix
from tests.helpers import initialize, make_server, rpc


def _prompt_ref(name: str) -> types.PromptReference:
    return types.PromptReference(type="ref/prompt", name=name)


async def _values(server: GatewayServer, prompt_name: str, argument: str, value: str) -> list[str]:
    result = await server.completions.complete(
        _prompt_ref(prompt_name), types.CompletionArgument(name=argument, value=value)
    )
    return result.completion.values


@pytest.mark.anyio
async def test_prefix_filter_keeps_declared_order(server: GatewayServer):
    assert await _values(server, "create-branded-diagram", "diagramType", "s") == ["sequence", "state"]
    assert await _values(server, "create-branded-diagram", "diagramType", "") == [
        "flowchart",
        "sequence",
        "architecture",
        "er-diagram",
        "state",
        "other",
    ]


@pytest.mark.anyio
async def test_prefix_filter_is_case_insensitive(server: GatewayServer):
    assert await _values(server, "create-asset-set", "assetType", "SOC") == ["social-cards"]
    assert await _values(server, "quick-icon", "style", "3D") == ["3d"]


@pytest.mark.anyio
async def test_count_completions(server: GatewayServer):
    assert await _values(server, "create-asset-set", "count", "1") == ["10"]
    assert len(await _values(server, "create-asset-set", "count", "")) == 9


@pytest.mark.anyio
async def test_unknown_arguments_and_refs_complete_to_nothing(server: GatewayServer):
    assert await _values(server, "create-branded-diagram", "description", "a") == []
    assert await _values(server, "no-such-prompt", "diagramType", "") == []

    result = await server.completions.complete(
        types.ResourceTemplateReference(type="ref/resource", uri="asset://{sessionId}/{assetId}"),
        types.CompletionArgument(name="sessionId", value=""),
    )
    assert result.completion.values == []
    assert result.completion.total == 0
    assert result.completion.hasMore is False


@pytest.mark.anyio
async def test_completion_over_session(session: GatewaySession):
    await initialize(session)
    reply = await session.handle_message(
        rpc(
            "completion/complete",
            {
                "ref": {"type": "ref/prompt", "name": "create-branded-diagram"},
                "argument": {"name": "diagramType", "value": "ER"},
            },
        )
    )
    assert reply.root.result["completion"] == {"values": ["er-diagram"], "total": 1, "hasMore": False}


@prompt("demo", arguments=[{"name": "word", "required": True}])
def demo(arguments):
    return [{"role": "user", "content": arguments["word"]}]


@pytest.mark.anyio
async def test_async_provider_and_truncation():
    @completion(prompt="demo")
    async def many(argument, context):
        return [f"w{index}" for index in range(150)]

    server = make_server(prompts=[demo], completions=[many])
    result = await server.completions.complete(_prompt_ref("demo"), types.CompletionArgument(name="word", value="w"))

    assert len(result.completion.values) == MAX_COMPLETION_VALUES
    assert result.completion.total == 150
    assert result.completion.hasMore is True


@pytest.mark.anyio
async def test_explicit_results_pass_through():
    @completion(prompt="demo")
    def explicit(argument, context):
        return CompletionResult(values=["alpha", "beta"], total=10, has_more=True)

    server = make_server(prompts=[demo], completions=[explicit])
    result = await server.completions.complete(_prompt_ref("demo"), types.CompletionArgument(name="word", value="zzz"))

    assert result.completion.values == ["alpha", "beta"]
    assert result.completion.total == 10
    assert result.completion.hasMore is True


def test_duplicate_provider_is_rejected():
    @completion(prompt="demo")
    def first(argument, context):
        return []

    @completion(prompt="demo")
    def second(argument, context):
        return []

    with pytest.raises(DuplicateCapabilityError):
        make_server(prompts=[demo], completions=[first, second])


def test_validate_rejects_dangling_references():
    @completion(prompt="missing")
    def dangling(argument, context):
        return []

    server = make_server(prompts=[demo], completions=[dangling])
    with pytest.raises(ServerValidationError, match="unknown prompt 'missing'"):
        server.validate()


def test_default_catalogue_validates(server: GatewayServer):
    server.validate()
    assert {key for _, key in server.completions.references} == set(server.prompt_names)


def test_completion_decorator_needs_exactly_one_target():
    with pytest.raises(ValueError):
        completion()
    with pytest.raises(ValueError):
        completion(prompt="a", resource="b")


def test_filter_prefix():
    assert filter_prefix(["Apple", "apricot", "banana"], "ap") == ["Apple", "apricot"]
    assert filter_prefix([], "x") == []
