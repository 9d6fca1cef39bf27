# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompts, completions and resource templates served alongside the tools."""

from __future__ import annotations

from .assets import ASSET_URI_TEMPLATE, RESOURCE_TEMPLATES, read_asset
from .completions import ARGUMENT_VALUES, COMPLETIONS
from .prompts import PROMPTS


__all__ = ["ARGUMENT_VALUES", "ASSET_URI_TEMPLATE", "COMPLETIONS", "PROMPTS", "RESOURCE_TEMPLATES", "read_asset"]
