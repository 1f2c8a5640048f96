"""Journald adapter emitting records as structured journal entries.

Purpose
-------
Alternative to :class:`~logpipe.adapters.syslog_sink.SyslogSink` for hosts
where systemd-journald is the ingestion point. The encoded priority is split
back into the ``PRIORITY`` and ``SYSLOG_FACILITY`` fields journald expects.

Contents
--------
* :class:`JournaldSink` - :class:`SinkPort` implementation.
* :class:`JournaldConnection` - per-worker connection carrying the tag.
"""

from __future__ import annotations

from typing import Any, Callable

from logpipe.application.ports.sink import SinkConnectionPort, SinkPort
from logpipe.domain.errors import PipeIOError

Sender = Callable[..., None]


def _journal_sender() -> Sender:
    """Return :func:`systemd.journal.send`, raising if the binding is missing."""
    try:
        from systemd import journal
    except ImportError as exc:
        raise PipeIOError("systemd.journal is not available") from exc
    return journal.send


class JournaldConnection(SinkConnectionPort):
    """Send records to journald under a fixed ``SYSLOG_IDENTIFIER``."""

    def __init__(self, *, tag: str, sender: Sender) -> None:
        self._tag = tag
        self._sender = sender

    def write(self, priority: int, record: bytes) -> None:
        """Send ``record``; sender failures surface as :class:`PipeIOError`."""
        fields = self._build_fields(priority, record)
        try:
            self._sender(**fields)
        except PipeIOError:
            raise
        except OSError as exc:
            raise PipeIOError(f"Writing to journald failed: {exc}") from exc

    def close(self) -> None:
        """Journald sends are connectionless; nothing to release."""

    def _build_fields(self, priority: int, record: bytes) -> dict[str, Any]:
        """Construct the journal field dictionary.

        Examples
        --------
        >>> conn = JournaldConnection(tag="nginx", sender=lambda **fields: None)
        >>> fields = conn._build_fields(182, b"request line")
        >>> fields["MESSAGE"], fields["PRIORITY"], fields["SYSLOG_FACILITY"], fields["SYSLOG_IDENTIFIER"]
        ('request line', '6', '22', 'nginx')
        """
        fields: dict[str, Any] = {
            "MESSAGE": record.decode("utf-8", errors="replace"),
            "PRIORITY": str(priority & 0x07),
            "SYSLOG_FACILITY": str(priority >> 3),
        }
        if self._tag:
            fields["SYSLOG_IDENTIFIER"] = self._tag
        return fields


class JournaldSink(SinkPort):
    """Create :class:`JournaldConnection` objects sharing one sender.

    Without an explicit ``sender`` the systemd binding is resolved on every
    :meth:`connect`, so a host lacking it fails while the worker is opening
    rather than on the first record.
    """

    def __init__(self, *, sender: Sender | None = None) -> None:
        self._sender = sender

    def connect(self, tag: str) -> JournaldConnection:
        sender = self._sender or _journal_sender()
        return JournaldConnection(tag=tag, sender=sender)


__all__ = ["JournaldConnection", "JournaldSink"]
