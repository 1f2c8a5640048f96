from __future__ import annotations

import io

import pytest

from logpipe.adapters.line_reader import LineReader
from logpipe.domain import PipeIOError
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class _Trickle(io.RawIOBase):
    """Stream returning at most ``step`` bytes per read, like a slow writer."""

    def __init__(self, payload: bytes, step: int) -> None:
        self._payload = payload
        self._step = step

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        chunk, self._payload = self._payload[: self._step], self._payload[self._step :]
        return chunk


class _Broken(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise OSError(5, "Input/output error")


def _drain(reader: LineReader) -> list[bytes | None]:
    records: list[bytes | None] = []
    while True:
        record = reader.next_record()
        records.append(record)
        if record is None:
            return records


def test_terminated_records_then_end_of_stream() -> None:
    assert _drain(LineReader(io.BytesIO(b"a\nb\nc\n"))) == [b"a", b"b", b"c", None]


def test_unterminated_tail_is_returned_once() -> None:
    reader = LineReader(io.BytesIO(b"a\nb"))

    assert _drain(reader) == [b"a", b"b", None]
    assert reader.next_record() is None


def test_empty_lines_are_returned_as_empty_records() -> None:
    assert _drain(LineReader(io.BytesIO(b"\n\n"))) == [b"", b"", None]


def test_empty_stream_is_immediately_exhausted() -> None:
    assert _drain(LineReader(io.BytesIO(b""))) == [None]


def test_records_spanning_reads_are_reassembled() -> None:
    reader = LineReader(_Trickle(b"first line\nsecond\n", step=3), chunk_size=3)

    assert list(reader) == [b"first line", b"second"]


def test_carriage_returns_and_binary_bytes_are_kept() -> None:
    assert list(LineReader(io.BytesIO(b"dos\r\n\xff\x00\n"))) == [b"dos\r", b"\xff\x00"]


def test_read_errors_become_pipe_io_error() -> None:
    reader = LineReader(_Broken(), path="/tmp/p")

    with pytest.raises(PipeIOError, match="Reading from pipe failed") as excinfo:
        reader.next_record()

    assert excinfo.value.path == "/tmp/p"
