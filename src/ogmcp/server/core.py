# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Gateway server composition.

:class:`GatewayServer` is assembled once at startup: it builds the immutable
tool registry, the prompt/resource/completion services, the shared
credential store and the downstream API clients, then hands sessions to
whichever transport is selected. Composition errors (duplicate names, bad
input models) surface from the constructor or :meth:`GatewayServer.validate`
before any transport binds.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import httpx

from .. import __version__, types
from ..api import ImageAgentClient, OpenGraphClient
from ..config import Settings
from ..errors import ServerValidationError
from ..utils import get_logger
from .credentials import CredentialStore, resolve_identity
from .registry import CapabilityRegistry
from .services import (
    CompletionService,
    LoggingService,
    PromptsService,
    ResourcesService,
    SamplingService,
    ToolsService,
)
from .session import GatewaySession
from .transports import BaseTransport, SSETransport, StdioTransport, StreamableHTTPTransport, TransportFactory


SERVER_NAME = "og-mcp-server"


def _default_tools() -> list[Callable[..., Any]]:
    from ..tools import ALL_TOOLS

    return list(ALL_TOOLS)


def _default_prompts() -> list[Callable[..., Any]]:
    from ..catalog import PROMPTS

    return list(PROMPTS)


def _default_completions() -> list[Callable[..., Any]]:
    from ..catalog import COMPLETIONS

    return list(COMPLETIONS)


def _default_templates() -> list[Callable[..., Any]]:
    from ..catalog import RESOURCE_TEMPLATES

    return list(RESOURCE_TEMPLATES)


class GatewayServer:
    """Composition root shared by every session and transport."""

    def __init__(
        self,
        name: str = SERVER_NAME,
        *,
        settings: Settings | None = None,
        tools: Iterable[Any] | None = None,
        prompts: Iterable[Any] | None = None,
        completions: Iterable[Any] | None = None,
        resource_templates: Iterable[Any] | None = None,
        credentials: CredentialStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        instructions: str | None = None,
        version: str = __version__,
    ) -> None:
        self.name = name
        self.version = version
        self.instructions = instructions
        self.settings = settings or Settings()
        self._logger = get_logger("ogmcp.server")

        self.credentials = credentials or CredentialStore()
        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=self.settings.http_timeout)
        self.opengraph = OpenGraphClient(
            self.http, base_url=self.settings.opengraph_api_url, default_app_id=self.settings.app_id
        )
        self.image_agent = ImageAgentClient(
            self.http, base_url=self.settings.image_agent_base_url, default_app_id=self.settings.app_id
        )

        self.registry = CapabilityRegistry(_default_tools() if tools is None else tools)
        self.tools = ToolsService(self.registry, logger=get_logger("ogmcp.tools"))
        self.resources = ResourcesService(
            _default_templates() if resource_templates is None else resource_templates,
            logger=get_logger("ogmcp.resources"),
        )
        self.prompts = PromptsService(
            _default_prompts() if prompts is None else prompts, logger=get_logger("ogmcp.prompts")
        )
        self.completions = CompletionService(
            _default_completions() if completions is None else completions,
            logger=get_logger("ogmcp.completions"),
        )
        self.logging = LoggingService(get_logger("ogmcp.logging"))
        self.sampling = SamplingService(get_logger("ogmcp.sampling"), timeout=self.settings.sampling_timeout)

        self._transport_factories: dict[str, TransportFactory] = {}
        for transport_cls in (StdioTransport, SSETransport, StreamableHTTPTransport):
            canonical, *aliases = transport_cls.TRANSPORT
            self.register_transport(canonical, transport_cls, aliases=aliases)

    # //////////////////////////////////////////////////////////////////
    # Sessions
    # //////////////////////////////////////////////////////////////////

    def create_session(self, credential: str | None = None, *, session_id: str | None = None) -> GatewaySession:
        """Create a session and bind its identity.

        *credential* is the transport-supplied identity (query parameter or
        header, already resolved in that order); the configured ``app_id``
        is the fallback.
        """
        session = GatewaySession(self, session_id)
        token = resolve_identity(credential, self.settings.app_id)
        if session.bind_credential(token):
            self._logger.debug("Bound app id for session %s", session.id)
        else:
            self._logger.debug("Session %s has no app id", session.id)
        return session

    def capabilities(self) -> types.ServerCapabilities:
        return types.ServerCapabilities(
            prompts=types.PromptsCapability(listChanged=False),
            resources=types.ResourcesCapability(subscribe=True, listChanged=False),
            tools=types.ToolsCapability(listChanged=False),
            logging=types.LoggingCapability(),
            completions=types.CompletionsCapability(),
        )

    def initialize_result(self, protocol_version: str) -> types.InitializeResult:
        return types.InitializeResult(
            protocolVersion=protocol_version,
            capabilities=self.capabilities(),
            serverInfo=types.Implementation(name=self.name, version=self.version),
            instructions=self.instructions,
        )

    @property
    def tool_names(self) -> list[str]:
        return self.tools.tool_names

    @property
    def prompt_names(self) -> list[str]:
        return self.prompts.names

    # //////////////////////////////////////////////////////////////////
    # Transport registry
    # //////////////////////////////////////////////////////////////////

    def register_transport(self, name: str, factory: TransportFactory, *, aliases: Iterable[str] | None = None) -> None:
        canonical = name.lower()
        self._transport_factories[canonical] = factory
        for alias in aliases or ():
            self._transport_factories[alias.lower()] = factory

    def _transport_for_name(self, name: str) -> BaseTransport:
        factory = self._transport_factories.get(name.lower())
        if factory is None:
            raise ValueError(f"Unsupported transport '{name}'.")
        transport = factory(self)
        if not isinstance(transport, BaseTransport):
            raise TypeError("Transport factory must return a BaseTransport instance")
        return transport

    # //////////////////////////////////////////////////////////////////
    # Serving
    # //////////////////////////////////////////////////////////////////

    async def serve(self, *, transport: str | None = None, validate: bool = True, **transport_kwargs: Any) -> None:
        """Run the selected transport until it exits, then release HTTP resources."""
        if validate:
            self.validate()
        selected = transport or self.settings.transport
        transport_instance = self._transport_for_name(selected)
        self._logger.info(
            "Serving %s %s via %s (%d tools, %d prompts)",
            self.name,
            self.version,
            transport_instance.transport_display_name,
            len(self.registry),
            len(self.prompts.names),
        )
        try:
            await transport_instance.run(**transport_kwargs)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    # //////////////////////////////////////////////////////////////////
    # Validation
    # //////////////////////////////////////////////////////////////////

    def validate(self) -> None:
        """Check cross-capability references that constructors cannot see on their own."""
        prompt_names = set(self.prompts.names)
        template_uris = {spec.uri_template for spec in self.resources.templates}
        for ref_type, key in self.completions.references:
            if ref_type == "prompt" and key not in prompt_names:
                raise ServerValidationError(f"Completion provider references unknown prompt {key!r}")
            if ref_type == "resource" and key not in template_uris:
                raise ServerValidationError(f"Completion provider references unknown resource template {key!r}")


__all__ = ["SERVER_NAME", "GatewayServer"]
