# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""JSON Schema helpers for tool input contracts.

Tool inputs are declared as pydantic models. Listing a tool publishes the
model's JSON Schema; validation always goes through the model itself, so the
published schema is documentation for the client and never the enforcement
point.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from pydantic import BaseModel


JsonSchema = dict[str, Any]


class SchemaError(ValueError):
    """Raised when a model cannot be rendered as an object schema."""


def model_input_schema(model: type[BaseModel]) -> JsonSchema:
    """Return the client-facing input schema for *model*.

    Aliases are used for property names so the schema matches what clients
    send on the wire.
    """
    try:
        schema = model.model_json_schema(by_alias=True, mode="validation")
    except Exception as exc:
        raise SchemaError(f"Cannot build input schema for {model.__name__}: {exc}") from exc

    if schema.get("type") != "object":
        raise SchemaError(f"Input schema for {model.__name__} must describe an object")
    schema.setdefault("properties", {})
    return compress_schema(schema)


def compress_schema(schema: JsonSchema, *, drop_titles: bool = True) -> JsonSchema:
    """Return a structurally equivalent schema with cosmetic noise removed.

    Args:
        schema: JSON Schema to normalise.
        drop_titles: Remove generated ``title`` keys recursively. Property
            names that happen to be ``title`` are preserved.
    """
    clone = _clone_schema(schema)
    if drop_titles:
        _strip_titles(clone)
    _prune_empty_required(clone)
    return clone


def _clone_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {k: _clone_schema(v) for k, v in schema.items()}
    if isinstance(schema, list):
        return [_clone_schema(item) for item in schema]
    return schema


def _strip_titles(node: Any, *, in_properties: bool = False) -> None:
    if isinstance(node, MutableMapping):
        if not in_properties:
            node.pop("title", None)
        for key, value in node.items():
            _strip_titles(value, in_properties=(key in ("properties", "$defs") and not in_properties))
    elif isinstance(node, list):
        for value in node:
            _strip_titles(value)


def _prune_empty_required(node: Any) -> None:
    """Delete empty ``required`` arrays."""
    if isinstance(node, MutableMapping):
        required = node.get("required")
        if isinstance(required, list) and not required:
            node.pop("required")
        for value in node.values():
            _prune_empty_required(value)
    elif isinstance(node, list):
        for value in node:
            _prune_empty_required(value)


__all__ = ["JsonSchema", "SchemaError", "compress_schema", "model_input_schema"]
