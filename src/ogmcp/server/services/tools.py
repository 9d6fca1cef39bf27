# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool capability service."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import time
from typing import Any

from pydantic import ValidationError

from ..adapters import error_result, normalize_tool_result
from ..registry import CapabilityRegistry
from ... import types
from ...errors import InvalidArgumentsError, MissingCredentialError, NotFoundError
from ...tool import HandlerContext


class ToolsService:
    """Validates and invokes tools from an immutable registry."""

    def __init__(self, registry: CapabilityRegistry, *, logger: logging.Logger) -> None:
        self._registry = registry
        self._logger = logger

    @property
    def tool_names(self) -> list[str]:
        return list(self._registry)

    def list_tools(self) -> types.ListToolsResult:
        return types.ListToolsResult(tools=list(self._registry.definitions))

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any] | None, context: HandlerContext
    ) -> types.CallToolResult:
        """Invoke *name* with *arguments*.

        Failures before the handler runs are protocol faults; anything the
        handler raises is reported inside the result with ``isError`` set.
        """
        spec = self._registry.get(name)
        if spec is None:
            raise NotFoundError(f"Unknown tool: {name}")

        try:
            args = spec.input_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            raise InvalidArgumentsError(
                f"Invalid arguments for tool {name}: {_summarize(exc)}",
                data=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

        if spec.requires_credential and not context.credential:
            raise MissingCredentialError()

        started = time.perf_counter()
        try:
            result = await spec.fn(args, context)
        except Exception as exc:
            self._logger.warning(
                "Tool %s failed for session %s: %s",
                name,
                context.session_id,
                exc,
                extra={"duration_ms": (time.perf_counter() - started) * 1000},
            )
            return error_result(str(exc) or type(exc).__name__)

        normalized = normalize_tool_result(result)
        self._logger.debug(
            "Tool %s completed for session %s",
            name,
            context.session_id,
            extra={"duration_ms": (time.perf_counter() - started) * 1000, "is_error": bool(normalized.isError)},
        )
        return normalized


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


__all__ = ["ToolsService"]
