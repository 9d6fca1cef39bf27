# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource capability service.

There are no static resources; every readable URI comes from a template.
``resources/read`` resolves the template by scheme, validates the URI
against it and only then calls the reader, so a malformed URI never costs a
downstream request.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
from typing import Any

from ..adapters import normalize_resource_payload
from ... import types
from ...errors import (
    DownstreamFailure,
    DuplicateCapabilityError,
    NotFoundError,
    ProtocolFault,
    ResourceNotFoundError,
    ServerValidationError,
)
from ...resource_template import ResourceTemplateSpec, extract_resource_template_spec
from ...tool import HandlerContext


class ResourcesService:
    def __init__(
        self, templates: Iterable[ResourceTemplateSpec | Callable[..., Any]], *, logger: logging.Logger
    ) -> None:
        self._logger = logger
        self._templates: dict[str, ResourceTemplateSpec] = {}
        for target in templates:
            spec = target if isinstance(target, ResourceTemplateSpec) else extract_resource_template_spec(target)
            if spec is None:
                raise ServerValidationError(f"{target!r} is not decorated with @resource_template")
            if spec.scheme in self._templates:
                raise DuplicateCapabilityError("resource scheme", spec.scheme)
            self._templates[spec.scheme] = spec

    @property
    def templates(self) -> tuple[ResourceTemplateSpec, ...]:
        return tuple(self._templates.values())

    def list_resources(self) -> types.ListResourcesResult:
        return types.ListResourcesResult(resources=[])

    def list_templates(self) -> types.ListResourceTemplatesResult:
        return types.ListResourceTemplatesResult(
            resourceTemplates=[spec.definition() for spec in self._templates.values()]
        )

    async def read(self, uri: str, context: HandlerContext) -> types.ReadResourceResult:
        spec = self._resolve(uri)
        params = spec.match(uri)
        try:
            payload = await spec.fn(params, context)
        except DownstreamFailure as exc:
            self._logger.warning("Reading %s failed: %s", uri, exc)
            if exc.not_found:
                raise ResourceNotFoundError(f"Resource not found: {uri}", data={"uri": uri}) from exc
            raise ProtocolFault(f"Failed to fetch asset: {exc}", code=types.INTERNAL_ERROR) from exc
        return normalize_resource_payload(uri, payload)

    def _resolve(self, uri: str) -> ResourceTemplateSpec:
        spec = self._templates.get(uri.partition("://")[0])
        if spec is None or not spec.handles(uri):
            raise NotFoundError(f"Unknown resource URI scheme: {uri}")
        return spec


__all__ = ["ResourcesService"]
