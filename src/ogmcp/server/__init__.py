# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Server-side building blocks: sessions, services and transports."""

from __future__ import annotations

from .core import SERVER_NAME, GatewayServer
from .credentials import CredentialStore, resolve_identity
from .registry import CapabilityRegistry
from .session import GatewaySession, SessionState


__all__ = [
    "SERVER_NAME",
    "CapabilityRegistry",
    "CredentialStore",
    "GatewayServer",
    "GatewaySession",
    "SessionState",
    "resolve_identity",
]
