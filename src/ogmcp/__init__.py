# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""OpenGraph MCP gateway."""

from __future__ import annotations


__version__ = "1.0.0"

from . import types
from .completion import CompletionResult, completion
from .config import Settings
from .prompt import prompt
from .resource_template import resource_template
from .server import GatewayServer, GatewaySession
from .tool import HandlerContext, tool


__all__ = [
    "CompletionResult",
    "GatewayServer",
    "GatewaySession",
    "HandlerContext",
    "Settings",
    "__version__",
    "completion",
    "prompt",
    "resource_template",
    "tool",
    "types",
]
