# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""STDIO transport adapter built on the reference MCP SDK.

Delegates framing (newline-delimited JSON-RPC over ``stdin``/``stdout``) to
the SDK's ``stdio_server`` helper. The process serves exactly one session,
whose identity is the configured ``app_id``.
"""

from __future__ import annotations

from mcp.server.stdio import stdio_server

from ._stream import run_stream_session
from .base import BaseTransport


def get_stdio_server():
    """Return the SDK's stdio context manager.

    Separated into a helper so tests can patch it with in-memory transports.
    """
    return stdio_server


class StdioTransport(BaseTransport):
    """Run a :class:`ogmcp.server.GatewayServer` over STDIO."""

    TRANSPORT = ("stdio", "STDIO", "Standard IO")

    async def run(self, *, app_id: str | None = None) -> None:
        stdio_ctx = get_stdio_server()
        session = self.server.create_session(app_id)
        async with stdio_ctx() as (read_stream, write_stream):
            await run_stream_session(session, read_stream, write_stream)


__all__ = ["StdioTransport", "get_stdio_server"]
