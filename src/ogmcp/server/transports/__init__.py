# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Transport adapters for the gateway.

Thin wrappers over the reference SDK's stdio, SSE and Streamable HTTP
primitives, so the server core never touches framing.
"""

from __future__ import annotations

from ._asgi import ASGITransportBase, SessionManagerHandler
from .base import BaseTransport, TransportFactory
from .sse import SSETransport
from .stdio import StdioTransport
from .streamable_http import StreamableHTTPTransport


__all__ = [
    "ASGITransportBase",
    "BaseTransport",
    "SSETransport",
    "SessionManagerHandler",
    "StdioTransport",
    "StreamableHTTPTransport",
    "TransportFactory",
]
