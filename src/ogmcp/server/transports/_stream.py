# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Session loop for stream-pair transports (stdio, SSE, Streamable HTTP).

One stream pair is one session. Inbound messages are read in order and each
is handled in its own task; ordering within the session comes from the
session lock, which every task reaches without yielding first. The session
outbox is pumped to the write stream alongside. End of the read stream
closes the session and abandons whatever is still in flight.
"""

from __future__ import annotations

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp.shared.message import SessionMessage

from ... import types
from ...utils import get_logger
from ..session import GatewaySession


_logger = get_logger("ogmcp.transport")

_WRITE_ERRORS = (anyio.ClosedResourceError, anyio.BrokenResourceError)


async def run_stream_session(
    session: GatewaySession,
    read_stream: MemoryObjectReceiveStream[SessionMessage | Exception],
    write_stream: MemoryObjectSendStream[SessionMessage],
) -> None:
    outbox = session.claim_outbox()
    async with anyio.create_task_group() as tg:
        session.attach(tg)
        tg.start_soon(_pump_outbox, outbox, write_stream, name=f"ogmcp:{session.id}:outbox")

        try:
            async with read_stream:
                async for item in read_stream:
                    if isinstance(item, Exception):
                        _logger.warning("Discarding unreadable message on session %s: %s", session.id, item)
                        continue
                    tg.start_soon(_handle, session, item.message, write_stream)
        except anyio.ClosedResourceError:
            # The transport closed the read side from its own task (HTTP session termination).
            _logger.debug("Read stream for session %s closed by its transport", session.id)

        session.close("end of stream")
        tg.cancel_scope.cancel()


async def _handle(
    session: GatewaySession, message: types.JSONRPCMessage, write_stream: MemoryObjectSendStream[SessionMessage]
) -> None:
    reply = await session.handle_message(message)
    if reply is None:
        return
    try:
        await write_stream.send(SessionMessage(reply))
    except _WRITE_ERRORS:
        _logger.debug("Write stream closed before reply on session %s", session.id)


async def _pump_outbox(
    outbox: MemoryObjectReceiveStream[types.JSONRPCMessage], write_stream: MemoryObjectSendStream[SessionMessage]
) -> None:
    async with outbox:
        async for message in outbox:
            try:
                await write_stream.send(SessionMessage(message))
            except _WRITE_ERRORS:
                return


__all__ = ["run_stream_session"]
