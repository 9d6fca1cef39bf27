# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Completion capability service.

Providers return either a finished ``types.Completion``/:class:`CompletionResult`
or a plain iterable of candidates. Candidates are filtered here by a
case-insensitive prefix match on the typed value, keeping provider order.
References without a provider complete to an empty list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import inspect
import logging
from typing import Any

from ... import types
from ...completion import CompletionResult, CompletionSpec, extract_completion_specs
from ...errors import DuplicateCapabilityError, ServerValidationError


MAX_COMPLETION_VALUES = 100


class CompletionService:
    def __init__(self, providers: Iterable[CompletionSpec | Callable[..., Any]], *, logger: logging.Logger) -> None:
        self._logger = logger
        self._specs: dict[tuple[str, str], CompletionSpec] = {}
        for target in providers:
            specs = (target,) if isinstance(target, CompletionSpec) else extract_completion_specs(target)
            if not specs:
                raise ServerValidationError(f"{target!r} is not decorated with @completion")
            for spec in specs:
                key = (spec.ref_type, spec.key)
                if key in self._specs:
                    raise DuplicateCapabilityError(f"{spec.ref_type} completion", spec.key)
                self._specs[key] = spec

    @property
    def references(self) -> tuple[tuple[str, str], ...]:
        """(ref_type, key) pairs with a registered provider."""
        return tuple(self._specs)

    async def complete(
        self,
        ref: types.PromptReference | types.ResourceTemplateReference,
        argument: types.CompletionArgument,
        context: types.CompletionContext | None = None,
    ) -> types.CompleteResult:
        spec = self._specs.get(_ref_key(ref))
        if spec is None:
            return _empty()

        value = spec.fn(argument, context)
        if inspect.isawaitable(value):
            value = await value
        return types.CompleteResult(completion=self._to_completion(value, argument.value))

    def _to_completion(self, value: Any, prefix: str) -> types.Completion:
        if value is None:
            return types.Completion(values=[], total=0, hasMore=False)
        if isinstance(value, types.Completion):
            return value
        if isinstance(value, CompletionResult):
            values = list(value.values)[:MAX_COMPLETION_VALUES]
            return types.Completion(values=values, total=value.total, hasMore=value.has_more)
        if isinstance(value, str):
            value = [value]

        matches = filter_prefix(value, prefix)
        return types.Completion(
            values=matches[:MAX_COMPLETION_VALUES],
            total=len(matches),
            hasMore=len(matches) > MAX_COMPLETION_VALUES,
        )


def filter_prefix(candidates: Iterable[str], prefix: str) -> list[str]:
    """Candidates starting with *prefix*, case-insensitively, in input order."""
    folded = prefix.casefold()
    return [candidate for candidate in candidates if candidate.casefold().startswith(folded)]


def _ref_key(ref: Any) -> tuple[str, str]:
    if isinstance(ref, types.PromptReference):
        return ("prompt", ref.name)
    return ("resource", str(getattr(ref, "uri", "")))


def _empty() -> types.CompleteResult:
    return types.CompleteResult(completion=types.Completion(values=[], total=0, hasMore=False))


__all__ = ["MAX_COMPLETION_VALUES", "CompletionService", "filter_prefix"]
