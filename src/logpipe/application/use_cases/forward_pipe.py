"""Use case forwarding one FIFO into the log sink.

Purpose
-------
Drive a single configured pipe through its lifecycle: resolve the encoded
priority, open the sink connection and the FIFO, then forward records until
the process stops or an unrecoverable error occurs.

Contents
--------
* :class:`ForwardingWorker` - the per-pipe state machine.
* :data:`ReaderFactory` - signature used to wrap an open FIFO in a record source.

System Role
-----------
Instantiated once per :class:`~logpipe.domain.PipeSpec` by the composition root
and run on its own thread by :class:`~logpipe.application.use_cases.supervise.Supervisor`.
Workers never raise out of :meth:`ForwardingWorker.run`; failures are returned
as :class:`~logpipe.domain.WorkerOutcome` values.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from logpipe.application.ports import FifoPort, FifoStreamPort, RecordSourcePort, SinkConnectionPort, SinkPort
from logpipe.domain import LogpipeError, PipeSpec, WorkerOutcome, WorkerState

LOGGER = logging.getLogger(__name__)

ReaderFactory = Callable[[FifoStreamPort, str], RecordSourcePort]

#: Upper bound on how long :meth:`ForwardingWorker.stop` keeps waking a blocked open.
STOP_WAKE_TIMEOUT = 5.0
WAKE_RETRY_INTERVAL = 0.01


class ForwardingWorker:
    """Forward newline-delimited records from one FIFO to the sink.

    Parameters
    ----------
    spec:
        Validated pipe description.
    fifo:
        Adapter that provisions and opens the FIFO.
    sink:
        Adapter that opens the tagged sink connection.
    reader_factory:
        Wraps an open FIFO handle into a :class:`RecordSourcePort`.
    reopen:
        When ``True`` (the default) the FIFO is opened with a writer held by
        the worker itself, so writers may attach and detach without the worker
        ever seeing end-of-stream. When ``False`` the worker blocks until a
        writer attaches and ends cleanly after the first end-of-stream.
    """

    def __init__(
        self,
        spec: PipeSpec,
        *,
        fifo: FifoPort,
        sink: SinkPort,
        reader_factory: ReaderFactory,
        reopen: bool = True,
    ) -> None:
        self._spec = spec
        self._fifo = fifo
        self._sink = sink
        self._reader_factory = reader_factory
        self._reopen = reopen
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._opening = False
        self._stream: FifoStreamPort | None = None
        self._state = WorkerState.RESOLVING
        self._forwarded = 0

    @property
    def spec(self) -> PipeSpec:
        return self._spec

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def forwarded(self) -> int:
        """Number of records written to the sink so far."""
        return self._forwarded

    def stop(self, *, timeout: float = STOP_WAKE_TIMEOUT) -> None:
        """Ask the worker to finish after the record it is handling.

        The held writer, if any, is released so the read ends once external
        writers have detached. A worker blocked in a plain open is woken
        repeatedly until the open returns or ``timeout`` seconds pass.
        """

        with self._lock:
            self._stop_event.set()
            stream = self._stream
            opening = self._opening
        if stream is not None:
            stream.release_writer()
        if opening:
            self._wake_while_opening(timeout)

    def run(self) -> WorkerOutcome:
        """Run the worker to completion and report how it ended."""

        path = self._spec.path
        try:
            priority = self._spec.priority
            self._transition(WorkerState.OPENING)
            self._fifo.ensure_fifo(path)
            connection = self._sink.connect(self._spec.tag)
            try:
                self._transition(WorkerState.FORWARDING)
                self._forward(priority, connection)
            finally:
                connection.close()
        except LogpipeError as exc:
            if exc.path is None:
                exc.path = path
            LOGGER.error("Pipe %s failed: %s", path, exc)
            return WorkerOutcome(path=path, forwarded=self._forwarded, error=exc, spec=self._spec)
        finally:
            self._transition(WorkerState.TERMINATED)
        return WorkerOutcome(path=path, forwarded=self._forwarded, spec=self._spec)

    def _forward(self, priority: int, connection: SinkConnectionPort) -> None:
        path = self._spec.path
        while True:
            stream = self._open(path)
            if stream is None:
                return
            try:
                with stream:
                    LOGGER.debug("Reading from %s", path)
                    reader = self._reader_factory(stream, path)
                    while True:
                        record = reader.next_record()
                        if record is None:
                            break
                        if not record:
                            continue
                        connection.write(priority, record)
                        self._forwarded += 1
                        if self._stop_event.is_set():
                            return
            finally:
                with self._lock:
                    self._stream = None
            if not self._reopen:
                return
            LOGGER.debug("Writer detached from %s; waiting for the next one", path)

    def _open(self, path: str) -> FifoStreamPort | None:
        """Open the FIFO unless stopped; ``stop`` sees the stream or the pending open."""

        with self._lock:
            if self._stop_event.is_set():
                return None
            self._opening = True
        try:
            stream = self._fifo.open_reader(path, hold_writer=self._reopen)
        finally:
            with self._lock:
                self._opening = False
        with self._lock:
            if self._stop_event.is_set():
                stream.close()
                return None
            self._stream = stream
        return stream

    def _wake_while_opening(self, timeout: float) -> None:
        path = self._spec.path
        deadline = time.monotonic() + timeout
        while True:
            self._fifo.wake(path)
            with self._lock:
                if not self._opening:
                    return
            if time.monotonic() >= deadline:
                LOGGER.warning("Pipe %s is still waiting for a writer after stop", path)
                return
            time.sleep(WAKE_RETRY_INTERVAL)

    def _transition(self, state: WorkerState) -> None:
        LOGGER.debug("Pipe %s: %s -> %s", self._spec.path, self._state.value, state.value)
        self._state = state


__all__ = ["ForwardingWorker", "ReaderFactory"]
