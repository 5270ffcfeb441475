# netblocker/config.py
from __future__ import annotations
import dataclasses
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

ENV_ALLOW_NETWORK = "NETBLOCKER_ALLOW_NETWORK"
ENV_ALLOW_HOSTS = "NETBLOCKER_ALLOW_HOSTS"
ENV_TRACE = "NETBLOCKER_TRACE"

_TRUTHY = {"1", "true", "yes", "on"}


def is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def split_hosts(value: Optional[str]) -> List[str]:
    return [h.strip() for h in (value or "").split(",") if h.strip()]


@dataclass
class GuardConfig:
    allow_network: bool = False
    allow_hosts: List[str] = field(default_factory=list)
    trace: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GuardConfig":
        """Read the toggles. Blocking stays on unless explicitly switched off."""
        env = os.environ if environ is None else environ
        return cls(
            allow_network=is_truthy(env.get(ENV_ALLOW_NETWORK)),
            allow_hosts=split_hosts(env.get(ENV_ALLOW_HOSTS)),
            trace=is_truthy(env.get(ENV_TRACE)),
        )

    @classmethod
    def from_kwargs(cls, **kwargs) -> "GuardConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        for key in kwargs:
            if key not in known:
                raise TypeError(f"Unknown argument: {key}")
        if "allow_hosts" in kwargs:
            kwargs["allow_hosts"] = list(kwargs["allow_hosts"] or [])
        return cls(**kwargs)

    def merged(
        self,
        *,
        allow_network: Optional[bool] = None,
        allow_hosts: Iterable[str] = (),
        trace: Optional[bool] = None,
    ) -> "GuardConfig":
        """Overlay explicit options (CLI, pytest) on top of this config."""
        hosts = list(self.allow_hosts)
        hosts.extend(h for h in allow_hosts if h and h not in hosts)
        return dataclasses.replace(
            self,
            allow_network=self.allow_network if allow_network is None else allow_network,
            allow_hosts=hosts,
            trace=self.trace if trace is None else trace,
        )
