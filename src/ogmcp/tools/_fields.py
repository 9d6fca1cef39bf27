# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Constrained string types shared by tool input models.

Both keep the caller's original string (no normalization) so the value sent
downstream is exactly what the client typed.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, ConfigDict, HttpUrl, TypeAdapter, ValidationError, WithJsonSchema
from pydantic.alias_generators import to_camel

from ..resource_template import UUID_PATTERN


_HTTP_URL = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid http(s) URL") from None
    return value


def _check_uuid(value: str) -> str:
    if not UUID_PATTERN.fullmatch(value):
        raise ValueError("must be a valid UUID")
    return value


WebUrl = Annotated[str, AfterValidator(_check_url), WithJsonSchema({"type": "string", "format": "uri"})]
UuidStr = Annotated[str, AfterValidator(_check_uuid), WithJsonSchema({"type": "string", "format": "uuid"})]

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


__all__ = ["CAMEL_CONFIG", "UuidStr", "WebUrl"]
