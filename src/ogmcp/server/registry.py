# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Immutable tool catalogue.

Built once at startup from decorated handlers or :class:`ToolSpec` values.
Construction fails on the first duplicate name; afterwards the registry only
offers read access. Tool definitions (including the JSON Schema rendered
from each input model) are computed eagerly so a broken model also fails
startup rather than the first ``tools/list``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .. import types
from ..errors import DuplicateCapabilityError, ServerValidationError
from ..tool import ToolSpec, extract_tool_spec
from ..utils.schema import SchemaError


class CapabilityRegistry(Mapping[str, ToolSpec]):
    def __init__(self, tools: Iterable[ToolSpec | Callable[..., Any]]) -> None:
        specs: dict[str, ToolSpec] = {}
        definitions: dict[str, types.Tool] = {}
        for target in tools:
            spec = target if isinstance(target, ToolSpec) else extract_tool_spec(target)
            if spec is None:
                raise ServerValidationError(f"{target!r} is not decorated with @tool")
            if spec.name in specs:
                raise DuplicateCapabilityError("tool", spec.name)
            try:
                definitions[spec.name] = spec.definition()
            except SchemaError as exc:
                raise ServerValidationError(f"Tool {spec.name!r} has an invalid input model: {exc}") from exc
            specs[spec.name] = spec

        self._specs = MappingProxyType(specs)
        self._definitions = tuple(definitions.values())

    def __getitem__(self, name: str) -> ToolSpec:
        return self._specs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    @property
    def definitions(self) -> tuple[types.Tool, ...]:
        """Wire definitions in registration order."""
        return self._definitions


__all__ = ["CapabilityRegistry"]
