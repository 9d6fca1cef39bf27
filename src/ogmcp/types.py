# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""MCP schema bindings used across the gateway.

Re-exports the generated pydantic models from ``mcp.types`` so modules import
a single ``types`` namespace, and adds the few wire constants the SDK leaves
to servers.
"""

from __future__ import annotations

from typing import Final

from mcp import types as _types


__all__ = tuple(name for name in dir(_types) if not name.startswith("_"))

globals().update({name: getattr(_types, name) for name in __all__})

# JSON-RPC server-error range code for a resource that does not exist.
RESOURCE_NOT_FOUND: Final[int] = -32002

# Ladder used for ``logging/setLevel`` thresholds, lowest severity first.
LOG_LEVELS: Final[tuple[str, ...]] = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)

__all__ = (*__all__, "RESOURCE_NOT_FOUND", "LOG_LEVELS")
