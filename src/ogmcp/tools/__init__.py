# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""The gateway's tool catalogue, in listing order."""

from __future__ import annotations

from .images import IMAGE_TOOLS
from .opengraph import OPENGRAPH_TOOLS


ALL_TOOLS = (*OPENGRAPH_TOOLS, *IMAGE_TOOLS)

__all__ = ["ALL_TOOLS", "IMAGE_TOOLS", "OPENGRAPH_TOOLS"]
