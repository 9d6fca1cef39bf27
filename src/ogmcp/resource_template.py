# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource template declarations.

Templates have the shape ``scheme://{param1}/{param2}``: every path segment
is one placeholder. :meth:`ResourceTemplateSpec.match` checks a concrete URI
against the template (segment count, then per-parameter patterns, which must
match a whole segment) before any reader runs, so malformed URIs never reach
a downstream service.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
import re
from typing import Any

from . import types
from .errors import InvalidArgumentsError


UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)

_PLACEHOLDER = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


@dataclass(frozen=True, slots=True)
class ResourcePayload:
    """Binary content returned by a resource reader."""

    data: bytes
    mime_type: str


ResourceReader = Callable[..., Awaitable[ResourcePayload]]
"""``(params: Mapping[str, str], ctx: HandlerContext) -> ResourcePayload``."""


@dataclass(frozen=True, slots=True)
class ResourceTemplateSpec:
    uri_template: str
    fn: ResourceReader
    name: str
    description: str = ""
    mime_type: str | None = None
    patterns: Mapping[str, re.Pattern[str]] = field(default_factory=dict, hash=False)
    pattern_error: str | None = None

    def __post_init__(self) -> None:
        scheme, sep, rest = self.uri_template.partition("://")
        if not sep or not scheme:
            raise ValueError(f"Resource template must look like scheme://{{param}}: {self.uri_template!r}")
        for segment in rest.split("/"):
            if not _PLACEHOLDER.match(segment):
                raise ValueError(f"Unsupported segment {segment!r} in {self.uri_template!r}")
        unknown = set(self.patterns) - set(self.parameters)
        if unknown:
            raise ValueError(f"Patterns given for unknown parameters: {sorted(unknown)}")

    @property
    def scheme(self) -> str:
        return self.uri_template.partition("://")[0]

    @property
    def prefix(self) -> str:
        return f"{self.scheme}://"

    @property
    def parameters(self) -> tuple[str, ...]:
        rest = self.uri_template.partition("://")[2]
        return tuple(_PLACEHOLDER.match(segment).group(1) for segment in rest.split("/"))  # type: ignore[union-attr]

    def handles(self, uri: str) -> bool:
        return uri.startswith(self.prefix)

    def match(self, uri: str) -> dict[str, str]:
        """Return the template parameters bound by *uri*.

        Raises:
            InvalidArgumentsError: wrong number of segments, an empty segment,
                or a value not matching its parameter pattern.
        """
        parts = uri[len(self.prefix) :].split("/")
        if len(parts) != len(self.parameters) or not all(parts):
            raise InvalidArgumentsError(
                f"Invalid {self.scheme} URI format. Expected: {self.uri_template}", data={"uri": uri}
            )

        params = dict(zip(self.parameters, parts, strict=True))
        for name, pattern in self.patterns.items():
            if not pattern.fullmatch(params[name]):
                message = self.pattern_error or f"Invalid {name} in {self.scheme} URI"
                raise InvalidArgumentsError(message, data={"uri": uri, "parameter": name})
        return params

    def definition(self) -> types.ResourceTemplate:
        return types.ResourceTemplate(
            uriTemplate=self.uri_template,
            name=self.name,
            description=self.description or None,
            mimeType=self.mime_type,
        )


_TEMPLATE_ATTR = "__ogmcp_resource_template__"


def resource_template(
    uri_template: str,
    *,
    name: str,
    description: str | None = None,
    mime_type: str | None = None,
    patterns: Mapping[str, re.Pattern[str] | str] | None = None,
    pattern_error: str | None = None,
) -> Callable[[ResourceReader], ResourceReader]:
    """Mark an async callable as the reader for *uri_template*."""

    def decorator(fn: ResourceReader) -> ResourceReader:
        compiled = {
            key: value if isinstance(value, re.Pattern) else re.compile(value)
            for key, value in (patterns or {}).items()
        }
        spec = ResourceTemplateSpec(
            uri_template=uri_template,
            fn=fn,
            name=name,
            description=(description if description is not None else (fn.__doc__ or "")).strip(),
            mime_type=mime_type,
            patterns=compiled,
            pattern_error=pattern_error,
        )
        setattr(fn, _TEMPLATE_ATTR, spec)
        return fn

    return decorator


def extract_resource_template_spec(fn: Callable[..., Any]) -> ResourceTemplateSpec | None:
    spec = getattr(fn, _TEMPLATE_ATTR, None)
    return spec if isinstance(spec, ResourceTemplateSpec) else None


__all__ = [
    "UUID_PATTERN",
    "ResourcePayload",
    "ResourceReader",
    "ResourceTemplateSpec",
    "extract_resource_template_spec",
    "resource_template",
]
