# netblocker/blocker.py
from __future__ import annotations
import contextlib
import sys
from typing import Iterator, List, Optional, Tuple

from .config import GuardConfig
from .guards import Patch, install_all, uninstall_all
from .policy import HostPolicy


class Gateway:
    """Real delegate: entry points stay untouched and the allowlist calls do nothing."""

    active = False

    def install(self) -> None:
        pass

    def teardown(self) -> None:
        pass

    def allow_host(self, host: str) -> None:
        pass

    def block_host(self, host: str) -> None:
        pass

    @property
    def allowed_hosts(self) -> Tuple[str, ...]:
        return ()


class GuardedGateway(Gateway):
    """
    Guarded delegate: wraps every networking entry point with checks against
    its own HostPolicy.

    install() must run before the code under test touches the network, and
    teardown() puts every original back.
    """

    active = True

    def __init__(self, policy: Optional[HostPolicy] = None, *, trace: bool = False):
        self.policy = policy if policy is not None else HostPolicy()
        self.trace = trace
        self._patches: List[Patch] = []
        self._installed = False

    def _trace(self, msg: str) -> None:
        if self.trace:
            print(f"[netblocker] {msg}", file=sys.stderr, flush=True)

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return
        self._patches = install_all(self.policy)
        self._installed = True
        print(
            f"[netblocker] network blocker active, allowed hosts: {', '.join(self.policy.hosts)}",
            file=sys.stderr,
            flush=True,
        )

    def teardown(self) -> None:
        if not self._installed:
            return
        uninstall_all(self._patches)
        self._patches = []
        self._installed = False
        self._trace("network blocker removed, originals restored")

    def allow_host(self, host: str) -> None:
        if self.policy.allow(host):
            self._trace(f"allowed host: {host}")

    def block_host(self, host: str) -> None:
        if self.policy.block(host):
            self._trace(f"blocked host: {host}")

    @property
    def allowed_hosts(self) -> Tuple[str, ...]:
        return self.policy.hosts


def select_gateway(cfg: GuardConfig) -> Gateway:
    if cfg.allow_network:
        return Gateway()
    return GuardedGateway(HostPolicy(cfg.allow_hosts), trace=cfg.trace)


# Live gateways, innermost last.
_GATEWAYS: List[Gateway] = []


def start(cfg: Optional[GuardConfig] = None) -> Gateway:
    gateway = select_gateway(cfg if cfg is not None else GuardConfig.from_env())
    if not gateway.active:
        print("[netblocker] network blocker disabled, all connections allowed", file=sys.stderr, flush=True)
    gateway.install()
    _GATEWAYS.append(gateway)
    return gateway


def stop(gateway: Gateway) -> None:
    try:
        gateway.teardown()
    finally:
        if gateway in _GATEWAYS:
            _GATEWAYS.remove(gateway)


def current() -> Optional[Gateway]:
    return _GATEWAYS[-1] if _GATEWAYS else None


def allow_host(host: str) -> None:
    """Permit host (and anything containing it) on every live gateway.

    Nested gateways each check the call, so allowing on the innermost alone
    would still leave the outer ones blocking.
    """
    for gateway in list(_GATEWAYS):
        gateway.allow_host(host)


def block_host(host: str) -> None:
    """Withdraw a host on every live gateway. Loopback hosts stay allowed."""
    for gateway in list(_GATEWAYS):
        gateway.block_host(host)


@contextlib.contextmanager
def network_blocker(**kwargs) -> Iterator[Gateway]:
    """
    Block the network for the duration of a with-block or decorated call.

    Keyword arguments are GuardConfig fields; without any the environment
    toggles decide.
    """
    cfg = GuardConfig.from_kwargs(**kwargs) if kwargs else None
    gateway = start(cfg)
    try:
        yield gateway
    finally:
        stop(gateway)
