# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt template declarations.

Renderers receive the caller's arguments (already checked for required
names) and return a list of messages. A message is either a
``types.PromptMessage`` or a mapping ``{"role": ..., "content": ...}`` whose
content is plain text or any MCP content block, for example a
``types.ResourceLink`` pointing at a generated asset.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from . import types


PromptRenderer = Callable[[Mapping[str, str]], Iterable[Any]]


@dataclass(frozen=True, slots=True)
class PromptSpec:
    name: str
    fn: PromptRenderer
    description: str = ""
    arguments: tuple[types.PromptArgument, ...] = ()

    @property
    def required_arguments(self) -> tuple[str, ...]:
        return tuple(arg.name for arg in self.arguments if arg.required)

    def definition(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            description=self.description or None,
            arguments=list(self.arguments) or None,
        )


_PROMPT_ATTR = "__ogmcp_prompt__"


def prompt(
    name: str | None = None,
    *,
    description: str | None = None,
    arguments: Iterable[types.PromptArgument | Mapping[str, Any]] | None = None,
) -> Callable[[PromptRenderer], PromptRenderer]:
    """Mark a callable as a prompt renderer."""

    def decorator(fn: PromptRenderer) -> PromptRenderer:
        spec = PromptSpec(
            name=name or fn.__name__,
            fn=fn,
            description=(description if description is not None else (fn.__doc__ or "")).strip(),
            arguments=tuple(
                arg if isinstance(arg, types.PromptArgument) else types.PromptArgument.model_validate(arg)
                for arg in (arguments or ())
            ),
        )
        setattr(fn, _PROMPT_ATTR, spec)
        return fn

    return decorator


def extract_prompt_spec(fn: Callable[..., Any]) -> PromptSpec | None:
    spec = getattr(fn, _PROMPT_ATTR, None)
    return spec if isinstance(spec, PromptSpec) else None


__all__ = ["PromptRenderer", "PromptSpec", "extract_prompt_spec", "prompt"]
