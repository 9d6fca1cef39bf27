# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Protocol version negotiation.

The server speaks every revision the installed SDK supports. A client asking
for an unknown revision is answered with the latest one, as the MCP lifecycle
rules require; the client then decides whether to disconnect.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache

from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import LATEST_PROTOCOL_VERSION


@dataclass(frozen=True)
class VersionFeatures:
    """Feature switches tied to a negotiated protocol version."""

    completions: bool
    resource_links: bool


def negotiate_version(requested: str | int | None) -> str:
    requested = str(requested) if requested is not None else None
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return LATEST_PROTOCOL_VERSION


@cache
def features_for(version: str) -> VersionFeatures:
    # Revisions are ISO dates, so lexical order is release order.
    return VersionFeatures(
        completions=version >= "2025-03-26",
        resource_links=version >= "2025-06-18",
    )


__all__ = [
    "LATEST_PROTOCOL_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "VersionFeatures",
    "features_for",
    "negotiate_version",
]
