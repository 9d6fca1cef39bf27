# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Sampling round-trips initiated by the server.

The only server→client request the gateway makes is a short
``sampling/createMessage`` sent when a client subscribes to a resource. It
is informational: the subscription succeeds whether or not the client
answers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcp.shared.exceptions import McpError

from ... import types


if TYPE_CHECKING:
    from ..session import GatewaySession


SYSTEM_PROMPT = "You are a helpful test server."


class SamplingService:
    def __init__(self, logger: logging.Logger, *, timeout: float) -> None:
        self._logger = logger
        self._timeout = timeout

    def subscription_context_request(self, uri: str) -> types.CreateMessageRequest:
        return types.CreateMessageRequest(
            method="sampling/createMessage",
            params=types.CreateMessageRequestParams(
                messages=[
                    types.SamplingMessage(
                        role="user",
                        content=types.TextContent(
                            type="text", text=f"Resource {uri} context: A new subscription was started"
                        ),
                    )
                ],
                systemPrompt=SYSTEM_PROMPT,
                includeContext="thisServer",
                temperature=0.7,
                maxTokens=100,
            )
        )

    async def request_subscription_context(
        self, session: GatewaySession, uri: str
    ) -> types.CreateMessageResult | None:
        """Ask the client to sample a note about a new subscription.

        Returns ``None`` when the client did not advertise sampling, answered
        with an error, or did not answer within the timeout.
        """
        if not session.client_supports_sampling():
            self._logger.debug("Client for session %s does not support sampling; skipping", session.id)
            return None
        try:
            result = await session.request_client(
                self.subscription_context_request(uri), types.CreateMessageResult, timeout=self._timeout
            )
        except McpError as exc:
            self._logger.warning("Sampling request for %s failed: %s", uri, exc.error.message)
            return None
        except TimeoutError:
            self._logger.warning("Sampling request for %s timed out after %.1fs", uri, self._timeout)
            return None
        self._logger.debug("Sampling reply for %s from model %s", uri, result.model)
        return result


__all__ = ["SYSTEM_PROMPT", "SamplingService"]
