# netblocker/plugin.py
"""
pytest plugin. Enable with ``-p netblocker.plugin`` or
``pytest_plugins = ["netblocker.plugin"]`` in a root conftest.py.

The guard goes in at configure time, before any test module is collected, and
comes out at unconfigure, which pytest runs whatever the test outcomes were.
"""
from __future__ import annotations
from typing import Iterator, List

import pytest

from . import blocker
from .blocker import Gateway
from .config import GuardConfig

_GATEWAY_KEY = pytest.StashKey[Gateway]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("netblocker", "block network access from tests")
    group.addoption(
        "--allow-network",
        action="store_true",
        default=None,
        help="Do not block network access for this run.",
    )
    group.addoption(
        "--allow-host",
        action="append",
        default=[],
        metavar="HOST",
        help="Allow connections to HOST (substring match, can repeat).",
    )
    parser.addini(
        "netblocker_allow_hosts",
        type="linelist",
        default=[],
        help="Hosts allowed for the whole run.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "allow_hosts(*hosts): allow connections to the given hosts during this test.",
    )
    hosts: List[str] = list(config.getini("netblocker_allow_hosts")) + list(config.getoption("allow_host"))
    cfg = GuardConfig.from_env().merged(
        allow_network=config.getoption("allow_network"),
        allow_hosts=hosts,
    )
    config.stash[_GATEWAY_KEY] = blocker.start(cfg)


def pytest_unconfigure(config: pytest.Config) -> None:
    gateway = config.stash.get(_GATEWAY_KEY, None)
    if gateway is not None:
        del config.stash[_GATEWAY_KEY]
        blocker.stop(gateway)


@pytest.fixture
def netblocker(pytestconfig: pytest.Config) -> Gateway:
    """The gateway guarding this run."""
    return pytestconfig.stash[_GATEWAY_KEY]


@pytest.fixture(autouse=True)
def _netblocker_allow_hosts(request: pytest.FixtureRequest) -> Iterator[None]:
    gateway = request.config.stash.get(_GATEWAY_KEY, None)
    marked = [h for m in request.node.iter_markers("allow_hosts") for h in m.args]
    if gateway is None or not marked:
        yield
        return
    already = set(gateway.allowed_hosts)
    added = [h for h in marked if h.strip().lower() not in already]
    for host in added:
        gateway.allow_host(host)
    try:
        yield
    finally:
        for host in added:
            gateway.block_host(host)
