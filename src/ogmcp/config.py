# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Runtime configuration.

Settings are read once from the process environment (after loading a local
``.env`` file through python-dotenv) and then passed explicitly to the server,
transports and API clients. Nothing reads ``os.environ`` after startup.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
import os
from typing import Any

from dotenv import load_dotenv

from . import types


DEFAULT_OG_BASE_URL = "https://opengraph.io"
DEFAULT_PORT = 3010
TRANSPORT_CHOICES = ("stdio", "sse", "streamable-http")


@dataclass(frozen=True, slots=True)
class Settings:
    app_id: str | None = None
    og_base_url: str = DEFAULT_OG_BASE_URL
    image_agent_url: str | None = None

    transport: str = "streamable-http"
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    path: str = "/mcp"

    http_timeout: float = 60.0
    sampling_timeout: float = 10.0
    resource_update_interval: float = 10.0
    log_sample_interval: float = 20.0
    stderr_interval: float = 30.0
    default_log_level: types.LoggingLevel = "debug"
    outbox_size: int = 64

    @property
    def opengraph_api_url(self) -> str:
        return f"{self.og_base_url.rstrip('/')}/api/1.1"

    @property
    def image_agent_base_url(self) -> str:
        """``OG_IMAGE_AGENT_URL`` when set, otherwise ``<OG_BASE_URL>/image-agent``."""
        if self.image_agent_url:
            return self.image_agent_url.rstrip("/")
        return f"{self.og_base_url.rstrip('/')}/image-agent"

    def with_overrides(self, **changes: Any) -> Settings:
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True) -> Settings:
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        def _float(key: str, default: float) -> float:
            raw = environ.get(key)
            if raw is None or not raw.strip():
                return default
            try:
                return float(raw)
            except ValueError as exc:
                raise ValueError(f"{key} must be a number, got {raw!r}") from exc

        def _int(key: str, default: int) -> int:
            return int(_float(key, default))

        transport = environ.get("OGMCP_TRANSPORT", "streamable-http").strip()
        if transport not in TRANSPORT_CHOICES:
            raise ValueError(f"OGMCP_TRANSPORT must be one of {', '.join(TRANSPORT_CHOICES)}, got {transport!r}")

        return cls(
            app_id=environ.get("OPENGRAPH_APP_ID") or environ.get("APP_ID") or None,
            og_base_url=environ.get("OG_BASE_URL") or DEFAULT_OG_BASE_URL,
            image_agent_url=environ.get("OG_IMAGE_AGENT_URL") or None,
            transport=transport,
            host=environ.get("HOST") or "127.0.0.1",
            port=_int("PORT", DEFAULT_PORT),
            http_timeout=_float("OGMCP_HTTP_TIMEOUT", 60.0),
            sampling_timeout=_float("OGMCP_SAMPLING_TIMEOUT", 10.0),
            resource_update_interval=_float("OGMCP_RESOURCE_UPDATE_INTERVAL", 10.0),
            log_sample_interval=_float("OGMCP_LOG_SAMPLE_INTERVAL", 20.0),
            stderr_interval=_float("OGMCP_STDERR_INTERVAL", 30.0),
            outbox_size=_int("OGMCP_OUTBOX_SIZE", 64),
        )


__all__ = ["DEFAULT_OG_BASE_URL", "DEFAULT_PORT", "TRANSPORT_CHOICES", "Settings"]
