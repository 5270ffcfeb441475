"""Block real network I/O from tests, with an allowlist for hosts that may be reached."""
from __future__ import annotations

from .blocker import (
    Gateway,
    GuardedGateway,
    allow_host,
    block_host,
    current,
    network_blocker,
    start,
    stop,
)
from .config import GuardConfig
from .errors import NetworkBlocked
from .policy import LOOPBACK, HostPolicy

__all__ = [
    "LOOPBACK",
    "Gateway",
    "GuardConfig",
    "GuardedGateway",
    "HostPolicy",
    "NetworkBlocked",
    "allow_host",
    "block_host",
    "current",
    "network_blocker",
    "start",
    "stop",
]
