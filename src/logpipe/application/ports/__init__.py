"""Protocol ports the use cases depend on."""

from __future__ import annotations

from .fifo import FifoPort, FifoStreamPort, RecordSourcePort
from .sink import SinkConnectionPort, SinkPort

__all__ = ["FifoPort", "FifoStreamPort", "RecordSourcePort", "SinkConnectionPort", "SinkPort"]
