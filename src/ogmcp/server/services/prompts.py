# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt capability service."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import inspect
import logging
from typing import Any

from pydantic import BaseModel

from ... import types
from ...errors import DuplicateCapabilityError, InvalidArgumentsError, NotFoundError, ServerValidationError
from ...prompt import PromptSpec, extract_prompt_spec
from ...versioning import VersionFeatures


class PromptsService:
    def __init__(self, prompts: Iterable[PromptSpec | Callable[..., Any]], *, logger: logging.Logger) -> None:
        self._logger = logger
        self._specs: dict[str, PromptSpec] = {}
        for target in prompts:
            spec = target if isinstance(target, PromptSpec) else extract_prompt_spec(target)
            if spec is None:
                raise ServerValidationError(f"{target!r} is not decorated with @prompt")
            if spec.name in self._specs:
                raise DuplicateCapabilityError("prompt", spec.name)
            self._specs[spec.name] = spec

    @property
    def names(self) -> list[str]:
        return list(self._specs)

    def get(self, name: str) -> PromptSpec | None:
        return self._specs.get(name)

    def list_prompts(self) -> types.ListPromptsResult:
        return types.ListPromptsResult(prompts=[spec.definition() for spec in self._specs.values()])

    async def get_prompt(
        self, name: str, arguments: Mapping[str, str] | None, features: VersionFeatures
    ) -> types.GetPromptResult:
        spec = self._specs.get(name)
        if spec is None:
            raise NotFoundError(f"Unknown prompt: {name}")

        provided = dict(arguments or {})
        missing = [arg for arg in spec.required_arguments if not provided.get(arg)]
        if missing:
            raise InvalidArgumentsError(
                f"Missing required arguments for prompt {name}: {', '.join(missing)}", data={"missing": missing}
            )

        rendered = spec.fn(provided)
        if inspect.isawaitable(rendered):
            rendered = await rendered

        messages = [self._coerce_message(item, features) for item in rendered or ()]
        return types.GetPromptResult(description=spec.description or None, messages=messages)

    def _coerce_message(self, item: Any, features: VersionFeatures) -> types.PromptMessage:
        if isinstance(item, types.PromptMessage):
            role, content = item.role, item.content
        elif isinstance(item, Mapping):
            role, content = item.get("role", "user"), item.get("content")
        else:
            raise TypeError(f"Prompt messages must be PromptMessage or mappings, got {type(item).__name__}")

        block = _content_block(content)
        if isinstance(block, types.ResourceLink) and not features.resource_links:
            # Older clients cannot render resource links; point at the URI in text.
            block = types.TextContent(type="text", text=f"{block.name}: {block.uri}")
        return types.PromptMessage(role=role, content=block)


def _content_block(content: Any) -> Any:
    if isinstance(content, str):
        return types.TextContent(type="text", text=content)
    if isinstance(content, BaseModel):
        return content
    if isinstance(content, Mapping):
        if content.get("type") == "resource_link":
            return types.ResourceLink.model_validate(content)
        if content.get("type") == "text":
            return types.TextContent.model_validate(content)
        if content.get("type") == "image":
            return types.ImageContent.model_validate(content)
    raise TypeError(f"Unsupported prompt content: {content!r}")


__all__ = ["PromptsService"]
