# netblocker/policy.py
from __future__ import annotations
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

LOOPBACK: Tuple[str, ...] = ("127.0.0.1", "localhost", "::1")


def _norm(host: Any) -> str:
    if isinstance(host, bytes):
        host = host.decode("ascii", "replace")
    return str(host).strip().lower()


class HostPolicy:
    """
    Allowlist consulted by every guarded entry point.

    Matching is by substring: an entry allows any candidate that contains it,
    so "example.com" also admits "www.example.com" (and, loosely, anything
    else containing that text). The loopback identities are always present.
    """

    def __init__(self, hosts: Iterable[str] = ()):
        self._hosts: Dict[str, None] = dict.fromkeys(LOOPBACK)
        # address -> names whose permitted lookup returned it
        self._resolved: Dict[str, FrozenSet[str]] = {}
        for host in hosts:
            self.allow(host)

    @property
    def hosts(self) -> Tuple[str, ...]:
        return tuple(self._hosts)

    def allow(self, host: str) -> bool:
        """Add host. Returns False when it was already present."""
        h = _norm(host)
        if not h or h in self._hosts:
            return False
        self._hosts[h] = None
        return True

    def block(self, host: str) -> bool:
        """Remove host. Returns False when absent or a loopback identity."""
        h = _norm(host)
        if h in LOOPBACK or h not in self._hosts:
            return False
        del self._hosts[h]
        return True

    def _matches(self, candidate: str) -> bool:
        return any(entry in candidate for entry in tuple(self._hosts))

    def is_allowed(self, candidate: Optional[Any]) -> bool:
        if candidate is None:
            return False
        c = _norm(candidate)
        if not c:
            return False
        if self._matches(c):
            return True
        return any(self._matches(name) for name in self._resolved.get(c, frozenset()))

    def remember(self, host: Any, addresses: Iterable[Any]) -> None:
        # Lookups may run in executor threads: replace the name sets, never mutate them.
        name = _norm(host)
        for address in addresses:
            key = _norm(address)
            self._resolved[key] = self._resolved.get(key, frozenset()) | {name}

    def __repr__(self) -> str:
        return f"HostPolicy(hosts={list(self._hosts)!r})"
