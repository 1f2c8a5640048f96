"""Port describing FIFO provisioning and the readable record stream."""

from __future__ import annotations

from types import TracebackType
from typing import Protocol, runtime_checkable


@runtime_checkable
class FifoStreamPort(Protocol):
    """Open read end of a FIFO."""

    def read(self, size: int = -1) -> bytes | None: ...

    def release_writer(self) -> None:
        """Drop the writer descriptor held by the reader itself, if any."""

    def close(self) -> None: ...

    def __enter__(self) -> "FifoStreamPort": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None: ...


@runtime_checkable
class FifoPort(Protocol):
    """Make sure a FIFO exists at a path and open it for reading."""

    def ensure_fifo(self, path: str) -> None:
        """Create the FIFO when missing; refuse non-FIFO objects."""

    def open_reader(self, path: str, *, hold_writer: bool = False) -> FifoStreamPort:
        """Open ``path`` for reading.

        Blocks until a writer attaches unless ``hold_writer`` is set, in which
        case the stream keeps its own writer and never reports end-of-stream
        before :meth:`FifoStreamPort.release_writer` is called.
        """

    def wake(self, path: str) -> None:
        """Release a reader blocked in :meth:`open_reader` on ``path``."""


@runtime_checkable
class RecordSourcePort(Protocol):
    """Yield newline-delimited records from an open stream."""

    def next_record(self) -> bytes | None:
        """Return the next record or ``None`` at end-of-stream."""


__all__ = ["FifoPort", "FifoStreamPort", "RecordSourcePort"]
