# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Command-line entry point.

Settings come from the environment (and .env); flags override them::

    ogmcp --transport stdio --app-id $OPENGRAPH_APP_ID
    ogmcp --transport streamable-http --port 3010
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from functools import partial
import importlib.util

import anyio

from . import __version__
from .config import TRANSPORT_CHOICES, Settings
from .server import GatewayServer
from .utils import get_logger, setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ogmcp", description="OpenGraph MCP gateway")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--transport", choices=TRANSPORT_CHOICES, help="Transport to serve (default from env)")
    parser.add_argument("--app-id", dest="app_id", help="OpenGraph app id used when a client supplies none")
    parser.add_argument("--host", help="Bind address for HTTP transports")
    parser.add_argument("--port", type=int, help="Bind port for HTTP transports")
    parser.add_argument("--path", help="Endpoint path for Streamable HTTP")
    parser.add_argument("--log-level", dest="log_level", help="Process log level (DEBUG, INFO, ...)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=args.log_level)
    logger = get_logger("ogmcp.cli")

    try:
        settings = Settings.from_env().with_overrides(
            transport=args.transport, app_id=args.app_id, host=args.host, port=args.port, path=args.path
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    if settings.app_id is None:
        logger.warning("No OPENGRAPH_APP_ID configured; clients must supply app_id per session")

    server = GatewayServer(settings=settings)
    serve = partial(server.serve, transport=settings.transport)
    use_uvloop = importlib.util.find_spec("uvloop") is not None
    logger.debug("Event loop: %s", "uvloop" if use_uvloop else "asyncio")
    try:
        anyio.run(serve, backend_options={"use_uvloop": use_uvloop})
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


__all__ = ["build_parser", "main"]
