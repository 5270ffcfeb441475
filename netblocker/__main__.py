"""
netblocker - run a Python console command with outbound networking blocked.

Usage:
  python -m netblocker [--allow-host HOST]... [--trace] <target> [-- ...args...]

Examples:
  python -m netblocker mypkg.cli:main arg1 arg2
  python -m netblocker --allow-host api.internal pip -- download requests
"""

from __future__ import annotations
import argparse
import sys
from typing import Sequence

from .config import GuardConfig
from .runner import run


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="netblocker", description="Run a Python console script with networking blocked.")
    p.add_argument("--allow-host", action="append", default=[], help="Allow connections to host substring (can repeat).")
    p.add_argument("--trace", action="store_true", default=None, help="Report install, teardown and allowlist changes.")
    p.add_argument("target", help="Target command (console script name, or module[:callable]).")
    p.add_argument("target_args", nargs=argparse.REMAINDER, help="Arguments passed to target. Prefix -- to separate.")
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    ns = parse_args(argv)

    target_argv = ns.target_args or []
    if target_argv and target_argv[0] == "--":
        target_argv = target_argv[1:]

    cfg = GuardConfig.from_env().merged(allow_hosts=ns.allow_host, trace=ns.trace)
    return run(ns.target, target_argv, cfg)


if __name__ == "__main__":
    sys.exit(main())
