# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Utility helpers for the gateway."""

from __future__ import annotations

from .logger import get_logger, setup_logger
from .serializer import to_json


__all__ = [
    "get_logger",
    "setup_logger",
    "to_json",
]
