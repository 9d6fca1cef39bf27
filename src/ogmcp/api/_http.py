# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared request plumbing for the downstream API clients."""

from __future__ import annotations

import time
from typing import Any

import httpx

from ..errors import DownstreamFailure
from ..utils import get_logger


_logger = get_logger("ogmcp.api")


async def send(client: httpx.AsyncClient, method: str, url: str, *, action: str, **kwargs: Any) -> httpx.Response:
    """Issue one request and return the response only if it succeeded.

    ``action`` names the operation for error messages ("create session",
    "fetch OG data"). Transport errors and non-2xx statuses both surface as
    :class:`DownstreamFailure`.
    """
    started = time.perf_counter()
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        _logger.warning("%s %s failed: %s", method, _redact(url), exc)
        raise DownstreamFailure(f"Failed to {action}: {exc}") from exc

    elapsed = (time.perf_counter() - started) * 1000
    _logger.debug(
        "%s %s -> %s", method, _redact(str(response.request.url)), response.status_code, extra={"duration_ms": elapsed}
    )
    if response.is_success:
        return response

    detail = _error_detail(response)
    _logger.warning("%s %s returned %s: %s", method, _redact(str(response.request.url)), response.status_code, detail)
    raise DownstreamFailure(f"Failed to {action}: {detail}", status_code=response.status_code)


def decode_json(response: httpx.Response, *, action: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DownstreamFailure(f"Failed to {action}: response was not valid JSON") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if value:
                return str(value)
    return response.reason_phrase or f"HTTP {response.status_code}"


def _redact(url: str) -> str:
    """Hide the ``app_id`` query value in log lines."""
    parsed = httpx.URL(url)
    if "app_id" not in parsed.params:
        return url
    return str(parsed.copy_set_param("app_id", "***"))
