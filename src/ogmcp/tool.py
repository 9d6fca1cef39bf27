# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool declaration utilities.

A tool is a plain async function decorated with :func:`tool`. The decorator
attaches an immutable :class:`ToolSpec` describing the tool (name, description,
pydantic input model, credential requirement). Specs are collected into a
:class:`~ogmcp.server.registry.CapabilityRegistry` at startup; nothing is
registered as an import side effect.

Handlers receive the validated input model and a :class:`HandlerContext`::

    @tool(name="getOgData", input_model=UrlInput, requires_credential=True)
    async def get_og_data(args: UrlInput, ctx: HandlerContext) -> ...:
        return await ctx.opengraph.site(args.url, app_id=ctx.credential)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from . import types
from .utils.schema import model_input_schema


if TYPE_CHECKING:
    from .api import ImageAgentClient, OpenGraphClient


ToolHandler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """Per-invocation collaborators handed to tool handlers and resource readers."""

    session_id: str
    credential: str | None
    opengraph: OpenGraphClient
    image_agent: ImageAgentClient
    logger: logging.Logger


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable description of one invocable capability."""

    name: str
    fn: ToolHandler
    input_model: type[BaseModel]
    description: str = ""
    title: str | None = None
    requires_credential: bool = False
    annotations: dict[str, Any] | None = field(default=None, hash=False)

    def definition(self) -> types.Tool:
        annotations = None
        if self.annotations or self.title:
            payload = dict(self.annotations or {})
            if self.title is not None:
                payload.setdefault("title", self.title)
            annotations = types.ToolAnnotations.model_validate(payload)
        return types.Tool(
            name=self.name,
            description=self.description or None,
            inputSchema=model_input_schema(self.input_model),
            annotations=annotations,
        )


_TOOL_ATTR = "__ogmcp_tool__"


def tool(
    name: str | None = None,
    *,
    input_model: type[BaseModel],
    description: str | None = None,
    title: str | None = None,
    requires_credential: bool = False,
    annotations: dict[str, Any] | None = None,
) -> Callable[[ToolHandler], ToolHandler]:
    """Mark an async callable as a gateway tool."""

    def decorator(fn: ToolHandler) -> ToolHandler:
        desc = (description if description is not None else (fn.__doc__ or "")).strip()
        spec = ToolSpec(
            name=name or fn.__name__,
            fn=fn,
            input_model=input_model,
            description=desc,
            title=title,
            requires_credential=requires_credential,
            annotations=annotations,
        )
        setattr(fn, _TOOL_ATTR, spec)
        return fn

    return decorator


def extract_tool_spec(fn: Callable[..., Any]) -> ToolSpec | None:
    """Return the attached :class:`ToolSpec` for *fn*, if present."""
    spec = getattr(fn, _TOOL_ATTR, None)
    return spec if isinstance(spec, ToolSpec) else None


__all__ = ["HandlerContext", "ToolHandler", "ToolSpec", "extract_tool_spec", "tool"]
