# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Session → app id binding store.

The only state shared between sessions. Every operation touches a single
key with one dict call, so unrelated sessions never contend and no lock is
needed. Bindings are write-once: the first bind wins and later attempts are
ignored (``bind`` reports whether it took effect).
"""

from __future__ import annotations

from collections.abc import Iterator

from ..utils import get_logger


_logger = get_logger("ogmcp.credentials")


def resolve_identity(*candidates: str | None) -> str | None:
    """Return the first non-empty candidate.

    Callers pass sources in precedence order: query parameter, identity
    header, process default.
    """
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return None


class CredentialStore:
    def __init__(self) -> None:
        self._bindings: dict[str, str] = {}

    def bind(self, session_id: str, token: str | None) -> bool:
        if not token:
            return False
        if session_id in self._bindings:
            _logger.debug("Ignoring rebind attempt for session %s", session_id)
            return False
        self._bindings[session_id] = token
        return True

    def get(self, session_id: str) -> str | None:
        return self._bindings.get(session_id)

    def unbind(self, session_id: str) -> None:
        self._bindings.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._bindings))


__all__ = ["CredentialStore", "resolve_identity"]
