# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared transport primitives for :mod:`ogmcp.server`.

Provides a minimal base class that transports subclass and the factory
signature :class:`~ogmcp.server.core.GatewayServer` uses to instantiate them
lazily by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable


if TYPE_CHECKING:
    from ..core import GatewayServer


class BaseTransport(ABC):
    """Common base for server transports.

    ``TRANSPORT`` lists the canonical name, a display name and any aliases
    accepted by :meth:`GatewayServer.serve`.
    """

    TRANSPORT: ClassVar[tuple[str, ...]] = ()

    def __init__(self, server: GatewayServer) -> None:
        self._server = server

    @property
    def server(self) -> GatewayServer:
        return self._server

    @property
    def transport_display_name(self) -> str:
        return self.TRANSPORT[1] if len(self.TRANSPORT) > 1 else type(self).__name__

    @abstractmethod
    async def run(self, **kwargs) -> None:
        """Start the transport and block until it shuts down."""


@runtime_checkable
class TransportFactory(Protocol):
    """Callable that produces a configured transport for a ``GatewayServer``."""

    def __call__(self, server: GatewayServer) -> BaseTransport: ...


__all__ = ["BaseTransport", "TransportFactory"]
