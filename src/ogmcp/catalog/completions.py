# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Argument completions for the catalogue prompts.

Candidates are keyed by argument name and shared across prompts; the
completion service filters them against the typed prefix.
"""

from __future__ import annotations

from .. import types
from ..completion import completion
from .prompts import CREATE_ASSET_SET, CREATE_BRANDED_DIAGRAM, ITERATE_AND_REFINE, QUICK_ICON


ARGUMENT_VALUES: dict[str, tuple[str, ...]] = {
    "diagramType": ("flowchart", "sequence", "architecture", "er-diagram", "state", "other"),
    "assetType": ("icons", "social-cards", "diagrams", "illustrations"),
    "style": ("outline", "filled", "duotone", "3d"),
    "count": tuple(str(n) for n in range(2, 11)),
}


@completion(prompt=CREATE_BRANDED_DIAGRAM)
@completion(prompt=ITERATE_AND_REFINE)
@completion(prompt=CREATE_ASSET_SET)
@completion(prompt=QUICK_ICON)
def prompt_argument_values(argument: types.CompletionArgument, context: types.CompletionContext | None = None):
    return ARGUMENT_VALUES.get(argument.name, ())


COMPLETIONS = (prompt_argument_values,)


__all__ = ["ARGUMENT_VALUES", "COMPLETIONS", "prompt_argument_values"]
