# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Error taxonomy for the gateway.

Protocol faults subclass :class:`mcp.shared.exceptions.McpError` so they
serialize straight into JSON-RPC error objects. Downstream failures are plain
exceptions: tools turn them into result data, resource reads turn them into
protocol faults.
"""

from __future__ import annotations

from typing import Any, ClassVar

from mcp.shared.exceptions import McpError

from . import types


class ProtocolFault(McpError):
    """A malformed or misaddressed request. Aborts that request only."""

    code: ClassVar[int] = types.INVALID_PARAMS

    def __init__(self, message: str, *, code: int | None = None, data: Any | None = None) -> None:
        super().__init__(types.ErrorData(code=self.code if code is None else code, message=message, data=data))

    @property
    def message(self) -> str:
        return self.error.message


class InvalidArgumentsError(ProtocolFault):
    """Arguments failed a capability's input contract."""


class NotFoundError(ProtocolFault):
    """Unknown tool, prompt or resource scheme."""


class ResourceNotFoundError(NotFoundError):
    code = types.RESOURCE_NOT_FOUND


class MissingCredentialError(ProtocolFault):
    """A credential-requiring tool was called on a session with no app id."""

    code = types.INVALID_REQUEST

    def __init__(self, message: str = "Could not find App ID for session.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SessionClosedError(ProtocolFault):
    code = types.INVALID_REQUEST

    def __init__(self, message: str = "Session is closed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SessionNotInitializedError(ProtocolFault):
    code = types.INVALID_REQUEST

    def __init__(self, message: str = "Session not initialized", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SessionNotFound(LookupError):
    """Raised by transports for an unknown or expired session id."""

    def __init__(self, session_id: str | None) -> None:
        self.session_id = session_id
        detail = "Missing session ID" if not session_id else f"Session not found: {session_id}"
        super().__init__(detail)


class DownstreamFailure(Exception):
    """A remote API call failed (network error, bad status or rejected payload)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class ServerValidationError(RuntimeError):
    """Raised when the server composition is invalid at startup."""


class DuplicateCapabilityError(ServerValidationError):
    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"Duplicate {kind} name: {name!r}")


__all__ = [
    "DownstreamFailure",
    "DuplicateCapabilityError",
    "InvalidArgumentsError",
    "MissingCredentialError",
    "NotFoundError",
    "ProtocolFault",
    "ResourceNotFoundError",
    "ServerValidationError",
    "SessionClosedError",
    "SessionNotFound",
    "SessionNotInitializedError",
]
