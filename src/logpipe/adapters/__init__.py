"""Concrete adapters for FIFOs and log sinks."""

from __future__ import annotations

from .fifo import FIFO_MODE, FifoManager, FifoStream
from .journald_sink import JournaldConnection, JournaldSink
from .line_reader import LineReader
from .syslog_sink import SyslogConnection, SyslogSink

__all__ = [
    "FIFO_MODE",
    "FifoManager",
    "FifoStream",
    "JournaldConnection",
    "JournaldSink",
    "LineReader",
    "SyslogConnection",
    "SyslogSink",
]
