# test/conftest.py
import socket

import pytest

from netblocker import blocker
from netblocker.blocker import GuardedGateway
from netblocker.config import ENV_ALLOW_HOSTS, ENV_ALLOW_NETWORK, ENV_TRACE
from netblocker.policy import HostPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_ALLOW_NETWORK, ENV_ALLOW_HOSTS, ENV_TRACE):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(blocker, "_GATEWAYS", [])


@pytest.fixture
def gateway_factory(monkeypatch):
    """
    Install guarded gateways on demand. Depends on monkeypatch so fakes set with
    it are captured as originals and are undone only after the guard is gone.
    """
    gateways = []

    def make(*hosts, trace=False):
        gateway = GuardedGateway(HostPolicy(hosts), trace=trace)
        gateway.install()
        gateways.append(gateway)
        return gateway

    yield make
    for gateway in reversed(gateways):
        gateway.teardown()


@pytest.fixture
def guarded(gateway_factory):
    return gateway_factory()


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def listener():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(5)
    yield srv
    srv.close()
