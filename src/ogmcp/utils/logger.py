# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Logging utilities for the gateway.

Everything here sits on the standard :mod:`logging` module. Plain output is
colored unless ``NO_COLOR`` is set; structured JSON output is enabled with
``OGMCP_LOG_JSON=1`` and serializes through :mod:`orjson`.

Records may carry a ``duration_ms`` attribute (tool calls and downstream
requests set it) which the text formatters render as a ``[12.34 ms]`` suffix.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import os
from typing import Any, ClassVar, Final

import orjson


RESET: Final[str] = "\033[0m"

DEBUG_COLOR: Final[str] = "\033[36m"
INFO_COLOR: Final[str] = "\033[32m"
WARNING_COLOR: Final[str] = "\033[33m"
ERROR_COLOR: Final[str] = "\033[1;31m"
CRITICAL_COLOR: Final[str] = "\033[1;35m"

LOGGER_COLOR: Final[str] = "\033[94m"
DURATION_COLOR: Final[str] = "\033[90m"

DEFAULT_LOGGER_NAME: Final[str] = "ogmcp"
ENV_LOG_LEVEL: Final[str] = "OGMCP_LOG_LEVEL"
ENV_LOG_JSON: Final[str] = "OGMCP_LOG_JSON"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

JsonSerializer = Callable[[dict[str, Any]], str]
PayloadTransformer = Callable[[dict[str, Any]], dict[str, Any]]

_BUILTIN_RECORD_KEYS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "process",
        "processName",
        "task",
        "taskName",
        "context",
        "message",
        "asctime",
    }
)


def _duration_suffix(record: logging.LogRecord) -> str | None:
    duration = getattr(record, "duration_ms", None)
    if not isinstance(duration, (int, float)):
        return None
    return f"[{duration:.2f} ms]"


class PlainFormatter(logging.Formatter):
    """Text formatter that appends the ``duration_ms`` suffix when present."""

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        suffix = _duration_suffix(record)
        return f"{rendered} {suffix}" if suffix else rendered


class ColoredFormatter(PlainFormatter):
    """ANSI-colored variant of :class:`PlainFormatter`.

    Override ``LEVEL_COLORS`` to customize the palette.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": DEBUG_COLOR,
        "INFO": INFO_COLOR,
        "WARNING": WARNING_COLOR,
        "ERROR": ERROR_COLOR,
        "CRITICAL": CRITICAL_COLOR,
    }

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        orig_name = record.name
        record.levelname = f"{self.LEVEL_COLORS.get(orig_levelname, '')}{orig_levelname}{RESET}"
        record.name = f"{LOGGER_COLOR}{orig_name}{RESET}"
        try:
            rendered = logging.Formatter.format(self, record)
        finally:
            record.levelname = orig_levelname
            record.name = orig_name

        suffix = _duration_suffix(record)
        if suffix:
            rendered = f"{rendered} {DURATION_COLOR}{suffix}{RESET}"
        return rendered


class OGMCPHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler owned by :func:`setup_logger`."""


class StructuredJSONFormatter(logging.Formatter):
    """Serialize log records into one JSON object per line."""

    def __init__(
        self,
        serializer: JsonSerializer,
        *,
        datefmt: str | None = None,
        payload_transformer: PayloadTransformer | None = None,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self._serializer = serializer
        self._transformer = payload_transformer or (lambda payload: payload)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        extra: dict[str, Any] = {}
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            extra.update(context)
        for key, value in record.__dict__.items():
            if key in _BUILTIN_RECORD_KEYS or key.startswith("_"):
                continue
            extra.setdefault(key, value)
        if extra:
            payload["context"] = extra

        return self._serializer(self._transformer(payload))


def orjson_serializer(payload: dict[str, Any]) -> str:
    """Serialize *payload* with orjson, stringifying anything it cannot encode."""
    return orjson.dumps(payload, default=str).decode()


def _has_gateway_handler(root: logging.Logger) -> bool:
    return any(isinstance(handler, OGMCPHandler) for handler in root.handlers)


def _read_bool_env(key: str) -> bool:
    value = os.getenv(key)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    *,
    level: int | str | None = None,
    use_json: bool | None = None,
    use_color: bool | None = None,
    json_serializer: JsonSerializer | None = None,
    payload_transformer: PayloadTransformer | None = None,
    fmt: str | None = None,
    datefmt: str | None = DEFAULT_DATEFMT,
    force: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level. Falls back to ``OGMCP_LOG_LEVEL`` then ``INFO``.
        use_json: Emit JSON lines. Defaults to ``OGMCP_LOG_JSON``.
        use_color: Colorize plain output. Defaults to on unless ``NO_COLOR``
            is set or JSON output is enabled.
        json_serializer: Converts the payload dict into a string. Defaults to
            :func:`orjson_serializer`.
        payload_transformer: Adjusts the payload before serialization.
        fmt: Format string for plain output.
        datefmt: Date format for both modes.
        force: Replace a previously installed gateway handler.
    """
    root = logging.getLogger()
    if _has_gateway_handler(root) and not force:
        return

    for handler in list(root.handlers):
        if isinstance(handler, OGMCPHandler):
            root.removeHandler(handler)
            handler.close()

    resolved_level = _resolve_level(level)
    root.setLevel(resolved_level)

    resolved_use_json = use_json if use_json is not None else _read_bool_env(ENV_LOG_JSON)
    if use_color is not None:
        resolved_use_color = use_color
    elif os.getenv(ENV_NO_COLOR):
        resolved_use_color = False
    else:
        resolved_use_color = not resolved_use_json

    handler = OGMCPHandler()
    handler.setLevel(resolved_level)

    formatter: logging.Formatter
    if resolved_use_json:
        formatter = StructuredJSONFormatter(
            json_serializer or orjson_serializer, datefmt=datefmt, payload_transformer=payload_transformer
        )
    elif resolved_use_color:
        formatter = ColoredFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)
    else:
        formatter = PlainFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)

    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a named logger, installing the default handler on first use."""
    if not _has_gateway_handler(logging.getLogger()):
        setup_logger()
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "ColoredFormatter",
    "OGMCPHandler",
    "PlainFormatter",
    "StructuredJSONFormatter",
    "get_logger",
    "orjson_serializer",
    "setup_logger",
]
