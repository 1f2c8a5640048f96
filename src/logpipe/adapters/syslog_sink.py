"""Local syslog adapter speaking the Unix-socket protocol.

Purpose
-------
Forward records to the host's syslog daemon with a per-connection tag, the
same way the C library ``syslog(3)`` client does, but with one independent
socket per worker so several tags can coexist in one process.

Contents
--------
* :data:`DEFAULT_SOCKET_PATHS` - endpoints probed in order.
* :class:`SyslogSink` - :class:`SinkPort` implementation.
* :class:`SyslogConnection` - the per-worker connection.

System Role
-----------
Default sink used by :mod:`logpipe.runtime`. Frames follow the local BSD
syslog format ``<PRI>Mmm dd hh:mm:ss TAG[PID]: MESSAGE``; the daemon adds the
hostname itself.
"""

from __future__ import annotations

import logging
import os
import socket
import sys
import time
from typing import Callable, Sequence

from logpipe.application.ports.sink import SinkConnectionPort, SinkPort
from logpipe.domain.errors import PipeIOError

LOGGER = logging.getLogger(__name__)

DEFAULT_SOCKET_PATHS: tuple[str, ...] = ("/dev/log", "/var/run/syslog", "/var/run/log")

Clock = Callable[[], time.struct_time]


def _program_name() -> str:
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "logpipe"


def format_frame(priority: int, tag: str, pid: int, record: bytes, *, now: time.struct_time) -> bytes:
    """Build one syslog datagram.

    Examples
    --------
    >>> stamp = time.strptime("2026-01-05 09:08:07", "%Y-%m-%d %H:%M:%S")
    >>> format_frame(182, "nginx", 42, b"request line", now=stamp)
    b'<182>Jan  5 09:08:07 nginx[42]: request line\\n'
    """

    timestamp = f"{time.strftime('%b', now)} {now.tm_mday:2d} {time.strftime('%H:%M:%S', now)}"
    header = f"<{priority}>{timestamp} {tag}[{pid}]: ".encode("utf-8")
    return header + record + b"\n"


class SyslogConnection(SinkConnectionPort):
    """Connected Unix socket bound to one tag."""

    def __init__(self, sock: socket.socket, *, tag: str, address: str, clock: Clock = time.localtime) -> None:
        self._socket = sock
        self._tag = tag
        self._address = address
        self._clock = clock
        self._pid = os.getpid()

    def write(self, priority: int, record: bytes) -> None:
        """Send ``record`` under ``priority``; no retry on failure."""

        frame = format_frame(priority, self._tag, self._pid, record, now=self._clock())
        try:
            self._socket.sendall(frame)
        except OSError as exc:
            raise PipeIOError(f"Writing to syslog at {self._address} failed: {exc}") from exc

    def close(self) -> None:
        self._socket.close()


class SyslogSink(SinkPort):
    """Open :class:`SyslogConnection` objects against the local daemon."""

    def __init__(
        self,
        *,
        socket_paths: Sequence[str] = DEFAULT_SOCKET_PATHS,
        clock: Clock = time.localtime,
    ) -> None:
        self._socket_paths = tuple(socket_paths)
        self._clock = clock

    def connect(self, tag: str) -> SyslogConnection:
        """Connect to the first reachable endpoint (datagram, then stream).

        Raises
        ------
        PipeIOError
            When no endpoint accepts the connection.
        """

        effective_tag = tag or _program_name()
        last_error: OSError | None = None
        for address in self._socket_paths:
            for kind in (socket.SOCK_DGRAM, socket.SOCK_STREAM):
                sock = socket.socket(socket.AF_UNIX, kind)
                try:
                    sock.connect(address)
                except OSError as exc:
                    sock.close()
                    last_error = exc
                    continue
                LOGGER.debug("Connected to syslog at %s for tag %s", address, effective_tag)
                return SyslogConnection(sock, tag=effective_tag, address=address, clock=self._clock)
        raise PipeIOError(f"Unix syslog delivery error: {last_error}") from last_error


__all__ = ["DEFAULT_SOCKET_PATHS", "SyslogConnection", "SyslogSink", "format_frame"]
