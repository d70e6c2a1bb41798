import socket

import pytest
from fastapi.testclient import TestClient

from simple_api.core.app_factory import create_application_app, create_main_app
from simple_api.core.config import Config


def reserve_free_ports(count: int):
    """Return `count` distinct loopback ports that were free a moment ago."""
    socks = []
    try:
        for _ in range(count):
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.bind(("127.0.0.1", 0))
            socks.append(sock)
        return [sock.getsockname()[1] for sock in socks]
    finally:
        for sock in socks:
            sock.close()


@pytest.fixture
def loopback_config():
    """Config for two free ports on 127.0.0.1."""
    main_port, app_port = reserve_free_ports(2)
    return Config(
        main_port=main_port,
        app_port=app_port,
        bind_address="127.0.0.1",
        log_level="warning",
        shutdown_timeout=2,
    )


@pytest.fixture
def main_client():
    return TestClient(create_main_app())


@pytest.fixture
def app_client():
    return TestClient(create_application_app())
