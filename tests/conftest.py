# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from ogmcp.server import GatewayServer
from tests.helpers import APP_ID, FakeDownstream, make_server


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def downstream() -> FakeDownstream:
    return FakeDownstream()


@pytest.fixture
def server(downstream: FakeDownstream) -> GatewayServer:
    return make_server(downstream)


@pytest.fixture
def session(server: GatewayServer):
    """A fresh, uninitialized session bound to ``APP_ID``."""
    session = server.create_session(APP_ID)
    yield session
    session.close("test teardown")
