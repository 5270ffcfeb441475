# netblocker/runner.py
from __future__ import annotations
import importlib
import importlib.metadata
import runpy
import sys
from typing import Any, List, Optional, Sequence, Tuple

from . import blocker
from .config import GuardConfig
from .errors import NetworkBlocked


def find_console_entrypoint(script_name: str) -> Optional[Tuple[str, str]]:
    """(module, attr) of an installed console script, or None."""
    for ep in importlib.metadata.entry_points(group="console_scripts"):
        if ep.name == script_name:
            if ":" in ep.value:
                module, attr = ep.value.split(":", 1)
                return module, attr
            return ep.value, "__main__"
    return None


def resolve_target(spec: str) -> Tuple[str, str]:
    """
    Accept formats:
      - module:callable
      - name (console script)
      - module (run as __main__)
    """
    if ":" in spec:
        m, a = spec.split(":", 1)
        return m, a
    ep = find_console_entrypoint(spec)
    if ep:
        return ep
    return spec, "__main__"


def invoke_entry(module_name: str, attr: str, argv: Sequence[str]) -> Any:
    sys.argv = list(argv)
    if attr == "__main__":
        return runpy.run_module(module_name, run_name="__main__", alter_sys=True)
    mod = importlib.import_module(module_name)
    func = getattr(mod, attr)
    if not callable(func):
        raise TypeError(f"Entry point attribute {attr} in {module_name} is not callable.")
    return func()


def run(target: str, target_argv: List[str], cfg: GuardConfig) -> int:
    """Run target with the network guarded. Exit code 2 when a connection was blocked."""
    module_name, attr = resolve_target(target)
    saved_argv = sys.argv
    gateway = blocker.start(cfg)
    try:
        result = invoke_entry(module_name, attr, [target] + target_argv)
        return result if isinstance(result, int) else 0
    except NetworkBlocked as e:
        print(f"netblocker: blocked network call: {e.strerror}", file=sys.stderr)
        return 2
    finally:
        blocker.stop(gateway)
        sys.argv = saved_argv
