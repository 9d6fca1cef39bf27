# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Normalization helpers for handler results.

Tool handlers may return a finished ``CallToolResult``, content blocks, a
pydantic model, or any JSON-compatible value; :func:`normalize_tool_result`
turns each into a complete result so services never build one piecemeal.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ValidationError

from .. import types
from ..resource_template import ResourcePayload
from ..utils import to_json


def normalize_tool_result(value: Any) -> types.CallToolResult:
    """Coerce arbitrary tool handler output into ``CallToolResult``."""
    if isinstance(value, types.CallToolResult):
        return value
    return types.CallToolResult(content=_coerce_content_blocks(value))


def error_result(message: str, **extra: Any) -> types.CallToolResult:
    """A failed invocation reported as data: ``{"error": message, ...}``."""
    payload = {"error": message, **extra}
    return types.CallToolResult(content=[types.TextContent(type="text", text=to_json(payload))], isError=True)


_BLOCK_MODELS: dict[str, type[BaseModel]] = {
    "text": types.TextContent,
    "image": types.ImageContent,
    "audio": types.AudioContent,
    "resource_link": types.ResourceLink,
    "resource": types.EmbeddedResource,
}
_BLOCK_TYPES = tuple(_BLOCK_MODELS.values())


def _coerce_content_blocks(source: Any) -> list[types.ContentBlock]:
    if source is None:
        return []

    if isinstance(source, _BLOCK_TYPES):
        return [source]

    if isinstance(source, dict):
        block = _content_from_mapping(source)
        return [block] if block is not None else [_as_text_content(source)]

    if isinstance(source, str):
        return [types.TextContent(type="text", text=source)]

    # A list holding content blocks is flattened; any other list is one JSON payload.
    if isinstance(source, (list, tuple)) and any(_is_block(item) for item in source):
        blocks: list[types.ContentBlock] = []
        for item in source:
            blocks.extend(_coerce_content_blocks(item))
        return blocks

    return [_as_text_content(source)]


def _content_from_mapping(data: dict[str, Any]) -> types.ContentBlock | None:
    model = _BLOCK_MODELS.get(data.get("type"))  # type: ignore[arg-type]
    if model is None:
        return None
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError:
        return None


def _is_block(item: Any) -> bool:
    if isinstance(item, dict):
        return _content_from_mapping(item) is not None
    return isinstance(item, _BLOCK_TYPES)


def _as_text_content(value: Any) -> types.TextContent:
    return types.TextContent(type="text", text=to_json(value))


def normalize_resource_payload(uri: str, payload: ResourcePayload) -> types.ReadResourceResult:
    """Wrap raw bytes from a resource reader as a base64 blob."""
    blob = types.BlobResourceContents(
        uri=uri,
        mimeType=payload.mime_type,
        blob=base64.b64encode(payload.data).decode("ascii"),
    )
    return types.ReadResourceResult(contents=[blob])


__all__ = ["error_result", "normalize_resource_payload", "normalize_tool_result"]
