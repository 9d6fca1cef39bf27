# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Logging capability service.

Maps MCP (RFC 5424) log levels onto an ordered ladder so sessions can filter
``notifications/message`` against the threshold chosen with
``logging/setLevel``. The session owns its threshold; this service only
ranks levels and builds the notification payloads.
"""

from __future__ import annotations

import logging
from typing import Any

from ... import types


_LEVEL_RANK: dict[str, int] = {level: rank for rank, level in enumerate(types.LOG_LEVELS)}

CONFIRMATION_LOGGER = "test-server"


class LoggingService:
    def __init__(self, logger: logging.Logger, *, logger_name: str | None = None) -> None:
        self._logger = logger
        self._logger_name = logger_name

    @staticmethod
    def rank(level: str) -> int:
        try:
            return _LEVEL_RANK[level]
        except KeyError:
            raise ValueError(f"Unknown log level: {level!r}") from None

    def is_enabled(self, level: types.LoggingLevel, threshold: types.LoggingLevel) -> bool:
        """``True`` when *level* is at or above *threshold*."""
        return self.rank(level) >= self.rank(threshold)

    def message(
        self, level: types.LoggingLevel, data: Any, *, logger: str | None = None
    ) -> types.LoggingMessageNotification:
        return types.LoggingMessageNotification(
            method="notifications/message",
            params=types.LoggingMessageNotificationParams(level=level, data=data, logger=logger or self._logger_name)
        )

    def confirmation(self, level: types.LoggingLevel) -> types.LoggingMessageNotification:
        return types.LoggingMessageNotification(
            method="notifications/message",
            params=types.LoggingMessageNotificationParams(
                level="debug", logger=CONFIRMATION_LOGGER, data=f"Logging level set to: {level}"
            )
        )


__all__ = ["CONFIRMATION_LOGGER", "LoggingService"]
