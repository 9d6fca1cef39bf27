# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Downstream HTTP clients."""

from __future__ import annotations

from .image_agent import ImageAgentClient
from .opengraph import OpenGraphClient


__all__ = ["ImageAgentClient", "OpenGraphClient"]
