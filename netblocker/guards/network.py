# netblocker/guards/network.py
from __future__ import annotations
import asyncio
import enum
import functools
import http.client
import socket
import sys
import types
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..errors import NetworkBlocked
from ..policy import HostPolicy
from .delivery import Delivery, deliver


class Kind(enum.Enum):
    STREAM = "TCP"
    HTTP = "HTTP"
    HTTPS = "HTTPS"
    DNS = "DNS"


@dataclass(frozen=True)
class Target:
    host: Any
    port: Any = None


_NETWORK_FAMILIES = {socket.AF_INET, socket.AF_INET6}


def _emit(msg: str) -> None:
    print(f"[netblocker] {msg}", file=sys.stderr, flush=True)


def _reject(entry: "EntryPoint", target: Target) -> NetworkBlocked:
    port = "N/A" if target.port is None else target.port
    _emit(f"blocked {entry.kind.value} connection to {target.host}:{port} ({entry.qualname})")
    return NetworkBlocked(entry.kind.value, target.host, port)


def _socket_target(sock: socket.socket, address: Any) -> Optional[Target]:
    """None for local channels: unix socket paths, netlink and other non-IP families."""
    if sock.family not in _NETWORK_FAMILIES or isinstance(address, (str, bytes)):
        return None
    if not isinstance(address, (tuple, list)) or not address:
        return Target("localhost")
    port = address[1] if len(address) > 1 else None
    # connect(("", port)) reaches the local machine
    return Target(address[0] or "localhost", port)


def _addresses(infos: Iterable[Any]) -> List[Any]:
    return [info[4][0] for info in infos if info[4]]


def _guard_connect(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    def connect(self, address):
        target = _socket_target(self, address)
        if target is None or policy.is_allowed(target.host):
            return original(self, address)
        return deliver(entry.delivery, _reject(entry, target))

    return connect


def _guard_create_connection(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    async def create_connection(self, protocol_factory, host=None, port=None, *args, **kwargs):
        # a caller-supplied sock was already connected through socket.connect
        if kwargs.get("sock") is not None or not host or policy.is_allowed(host):
            return await original(self, protocol_factory, host, port, *args, **kwargs)
        return await deliver(entry.delivery, _reject(entry, Target(host, port)), loop=self)

    return create_connection


def _guard_request(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    def request(self, *args, **kwargs):
        # no host means nothing to resolve: blocked rather than assumed local
        target = Target(self.host or None, self.port)
        if policy.is_allowed(target.host):
            return original(self, *args, **kwargs)
        return deliver(entry.delivery, _reject(entry, target))

    return request


def _guard_getaddrinfo(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    def getaddrinfo(host, *args, **kwargs):
        if not host:
            return original(host, *args, **kwargs)
        if not policy.is_allowed(host):
            port = args[0] if args else kwargs.get("port")
            return deliver(entry.delivery, _reject(entry, Target(host, port)))
        infos = original(host, *args, **kwargs)
        policy.remember(host, _addresses(infos))
        return infos

    return getaddrinfo


def _hostent_addresses(result: Any) -> List[Any]:
    # gethostbyname -> "1.2.3.4"; gethostbyname_ex/gethostbyaddr -> (name, aliases, addresses)
    if isinstance(result, str):
        return [result]
    return list(result[2])


def _guard_gethostby(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    def gethostby(host, *args, **kwargs):
        if not policy.is_allowed(host):
            return deliver(entry.delivery, _reject(entry, Target(host)))
        result = original(host, *args, **kwargs)
        policy.remember(host, _hostent_addresses(result))
        return result

    return gethostby


def _guard_loop_getaddrinfo(entry: "EntryPoint", original: Callable, policy: HostPolicy) -> Callable:
    @functools.wraps(original)
    async def getaddrinfo(self, host, port, *args, **kwargs):
        if not host:
            return await original(self, host, port, *args, **kwargs)
        if not policy.is_allowed(host):
            return await deliver(entry.delivery, _reject(entry, Target(host, port)), loop=self)
        infos = await original(self, host, port, *args, **kwargs)
        policy.remember(host, _addresses(infos))
        return infos

    return getaddrinfo


@dataclass(frozen=True)
class EntryPoint:
    kind: Kind
    owner: Any
    name: str
    delivery: Delivery
    factory: Callable[["EntryPoint", Callable, HostPolicy], Callable]

    @property
    def qualname(self) -> str:
        if isinstance(self.owner, types.ModuleType):
            return f"{self.owner.__name__}.{self.name}"
        return f"{self.owner.__module__}.{self.owner.__qualname__}.{self.name}"

    def wrap(self, original: Callable, policy: HostPolicy) -> Callable:
        return self.factory(self, original, policy)


ENTRY_POINTS: Tuple[EntryPoint, ...] = (
    EntryPoint(Kind.STREAM, socket.socket, "connect", Delivery.RAISE, _guard_connect),
    EntryPoint(Kind.STREAM, socket.socket, "connect_ex", Delivery.RETURN_ERRNO, _guard_connect),
    EntryPoint(Kind.STREAM, asyncio.BaseEventLoop, "create_connection", Delivery.DEFER, _guard_create_connection),
    EntryPoint(Kind.HTTP, http.client.HTTPConnection, "request", Delivery.RAISE, _guard_request),
    EntryPoint(Kind.HTTPS, http.client.HTTPSConnection, "request", Delivery.RAISE, _guard_request),
    EntryPoint(Kind.DNS, socket, "getaddrinfo", Delivery.RAISE, _guard_getaddrinfo),
    EntryPoint(Kind.DNS, socket, "gethostbyname", Delivery.RAISE, _guard_gethostby),
    EntryPoint(Kind.DNS, socket, "gethostbyname_ex", Delivery.RAISE, _guard_gethostby),
    EntryPoint(Kind.DNS, socket, "gethostbyaddr", Delivery.RAISE, _guard_gethostby),
    EntryPoint(Kind.DNS, asyncio.BaseEventLoop, "getaddrinfo", Delivery.DEFER, _guard_loop_getaddrinfo),
)
