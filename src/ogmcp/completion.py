# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Completion provider declarations.

Providers answer ``completion/complete`` for one prompt or resource template.
The decorator may be stacked to reuse one provider for several prompts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal


CompletionFunction = Callable[..., Any]
"""``(argument, context) -> Completion | CompletionResult | Iterable[str] | None``, sync or async."""


@dataclass(slots=True)
class CompletionResult:
    """Lightweight completion payload mapped onto ``types.Completion``."""

    values: Iterable[str]
    total: int | None = None
    has_more: bool | None = None


@dataclass(frozen=True, slots=True)
class CompletionSpec:
    ref_type: Literal["prompt", "resource"]
    key: str  # prompt name or resource template URI
    fn: CompletionFunction


_COMPLETION_ATTR = "__ogmcp_completions__"


def completion(
    *, prompt: str | None = None, resource: str | None = None
) -> Callable[[CompletionFunction], CompletionFunction]:
    """Register *fn* as the completion provider for a prompt or resource template.

    Exactly one of ``prompt`` or ``resource`` must be supplied.
    """
    if (prompt is None) == (resource is None):
        raise ValueError("Provide exactly one of 'prompt' or 'resource'.")

    ref_type: Literal["prompt", "resource"] = "prompt" if prompt is not None else "resource"
    key = prompt if prompt is not None else resource

    def decorator(fn: CompletionFunction) -> CompletionFunction:
        existing: tuple[CompletionSpec, ...] = getattr(fn, _COMPLETION_ATTR, ())
        setattr(fn, _COMPLETION_ATTR, (*existing, CompletionSpec(ref_type=ref_type, key=key, fn=fn)))
        return fn

    return decorator


def extract_completion_specs(fn: Callable[..., Any]) -> tuple[CompletionSpec, ...]:
    specs = getattr(fn, _COMPLETION_ATTR, ())
    return tuple(spec for spec in specs if isinstance(spec, CompletionSpec))


__all__ = ["CompletionFunction", "CompletionResult", "CompletionSpec", "completion", "extract_completion_specs"]
