"""Ports for the local log sink (syslog socket, journald, ...)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SinkConnectionPort(Protocol):
    """Open, tagged connection owned by exactly one worker."""

    def write(self, priority: int, record: bytes) -> None:
        """Send ``record`` under the encoded ``priority``."""

    def close(self) -> None:
        """Release the connection."""


@runtime_checkable
class SinkPort(Protocol):
    """Factory for per-worker sink connections."""

    def connect(self, tag: str) -> SinkConnectionPort:
        """Open a connection whose records are attributed to ``tag``."""


__all__ = ["SinkConnectionPort", "SinkPort"]
