"""Newline-delimited record reader for FIFO streams."""

from __future__ import annotations

from typing import BinaryIO, Iterator

from logpipe.application.ports.fifo import RecordSourcePort
from logpipe.domain.errors import PipeIOError

DELIMITER = b"\n"
DEFAULT_CHUNK_SIZE = 64 * 1024


class LineReader(RecordSourcePort):
    """Split a byte stream into records on ``\\n``.

    A trailing fragment without delimiter is returned once at end-of-stream;
    afterwards :meth:`next_record` keeps returning ``None``. Empty lines come
    back as ``b""`` so callers decide whether to skip them.

    Examples
    --------
    >>> from io import BytesIO
    >>> reader = LineReader(BytesIO(b"a\\nb"))
    >>> list(reader)
    [b'a', b'b']
    >>> reader.next_record() is None
    True
    """

    def __init__(self, stream: BinaryIO, *, path: str | None = None, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._stream = stream
        self._path = path
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    def next_record(self) -> bytes | None:
        """Return the next record, or ``None`` once the stream is exhausted.

        Raises
        ------
        PipeIOError
            When the underlying read fails.
        """

        while True:
            index = self._buffer.find(DELIMITER)
            if index >= 0:
                record = bytes(self._buffer[:index])
                del self._buffer[: index + 1]
                return record
            if self._eof:
                if not self._buffer:
                    return None
                record = bytes(self._buffer)
                self._buffer.clear()
                return record
            self._fill()

    def __iter__(self) -> Iterator[bytes]:
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record

    def _fill(self) -> None:
        try:
            chunk = self._stream.read(self._chunk_size)
        except OSError as exc:
            raise PipeIOError(f"Reading from pipe failed: {exc}", path=self._path) from exc
        if chunk:
            self._buffer += chunk
        else:
            self._eof = True


__all__ = ["LineReader"]
