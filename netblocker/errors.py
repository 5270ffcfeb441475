# netblocker/errors.py
from __future__ import annotations
import errno
from typing import Any


class NetworkBlocked(OSError):
    """Raised (or delivered) in place of a connection to a host that is not allowed.

    Subclasses OSError with ENETUNREACH so code that handles ordinary network
    failures still treats it as one.
    """

    def __init__(self, label: str, host: Any, port: Any):
        self.kind = label
        self.host = host
        self.port = port
        message = (
            f"NETWORK BLOCKED: Attempted {label} connection to {host}:{port}\n"
            "Network connections are blocked while tests run.\n"
            "Mock the connection, or allow the host with netblocker.allow_host()."
        )
        super().__init__(errno.ENETUNREACH, message)

    def __reduce__(self):
        # OSError pickles (errno, strerror); rebuild from our own fields instead
        return (type(self), (self.kind, self.host, self.port))
