from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List

from ..policy import HostPolicy
from .network import ENTRY_POINTS, EntryPoint


@dataclass
class Patch:
    owner: Any
    name: str
    original: Any
    # attribute lived in owner.__dict__ (vs. inherited) before patching
    shadowed: bool

    @classmethod
    def capture(cls, owner: Any, name: str) -> "Patch":
        return cls(owner, name, getattr(owner, name), name in vars(owner))

    def apply(self, replacement: Any) -> None:
        setattr(self.owner, self.name, replacement)

    def restore(self) -> None:
        if self.shadowed:
            setattr(self.owner, self.name, self.original)
        else:
            delattr(self.owner, self.name)


def install_all(policy: HostPolicy, entries: Iterable[EntryPoint] = ENTRY_POINTS) -> List[Patch]:
    entries = list(entries)
    # Capture before patching anything: HTTPSConnection.request is inherited
    # from HTTPConnection and must not resolve to our own wrapper.
    patches = [Patch.capture(e.owner, e.name) for e in entries]
    for entry, patch in zip(entries, patches):
        patch.apply(entry.wrap(patch.original, policy))
    return patches


def uninstall_all(patches: List[Patch]) -> None:
    # Reverse order, so stacked patches on one attribute unwind cleanly.
    for patch in reversed(patches):
        patch.restore()
