"""Supervision of the per-pipe forwarding workers.

Purpose
-------
Start one worker thread per configured pipe, collect their terminal outcomes
through a result queue, and keep the process resident even when no pipes are
configured.

Contents
--------
* :class:`FailurePolicy` - how a worker failure affects its siblings.
* :class:`Supervisor` - thread-per-pipe runner.

System Role
-----------
Outermost application use case, driven by :func:`logpipe.runtime.run`.
Workers are not restarted; with :attr:`FailurePolicy.ISOLATE` a failing pipe
is logged and the remaining pipes keep forwarding.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from enum import Enum
from typing import Protocol, Sequence

from logpipe.domain import WorkerOutcome

LOGGER = logging.getLogger(__name__)


class Worker(Protocol):
    """Subset of :class:`ForwardingWorker` the supervisor relies on."""

    @property
    def spec(self): ...

    def run(self) -> WorkerOutcome: ...

    def stop(self) -> None: ...


class FailurePolicy(Enum):
    """Reaction to the first failed worker."""

    ISOLATE = "isolate"
    FAIL_FAST = "fail_fast"


class Supervisor:
    """Run workers concurrently and wait for them.

    Examples
    --------
    >>> supervisor = Supervisor([])
    >>> supervisor.start()
    >>> supervisor.stop()
    >>> supervisor.wait()
    []
    """

    def __init__(self, workers: Sequence[Worker], *, policy: FailurePolicy = FailurePolicy.ISOLATE) -> None:
        self._workers = list(workers)
        self._policy = policy
        self._results: queue.Queue[WorkerOutcome] = queue.Queue()
        self._threads: list[threading.Thread] = []
        self._stopped = threading.Event()

    def start(self) -> None:
        """Start one daemon thread per worker."""

        if self._threads:
            return
        for worker in self._workers:
            thread = threading.Thread(
                target=self._run_worker,
                args=(worker,),
                name=f"logpipe:{worker.spec.path}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        LOGGER.info("Started %d pipe worker(s)", len(self._threads))

    def stop(self) -> None:
        """Request every worker to stop and release an idle :meth:`wait`."""

        self._stopped.set()
        for worker in self._workers:
            worker.stop()

    def wait(self, timeout: float | None = None) -> list[WorkerOutcome]:
        """Block until every worker terminated and return their outcomes.

        With no workers this idles until :meth:`stop` is called. Under
        :attr:`FailurePolicy.FAIL_FAST` it returns as soon as one worker fails.
        When ``timeout`` elapses the outcomes gathered so far are returned.
        """

        if not self._workers:
            LOGGER.info("No pipes configured; idling")
            self._stopped.wait(timeout)
            return []

        deadline = None if timeout is None else time.monotonic() + timeout
        outcomes: list[WorkerOutcome] = []
        while len(outcomes) < len(self._workers):
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                outcome = self._results.get(timeout=remaining)
            except queue.Empty:
                break
            outcomes.append(outcome)
            self._report(outcome)
            if outcome.failed and self._policy is FailurePolicy.FAIL_FAST:
                LOGGER.error("Stopping all pipes after failure on %s", outcome.path)
                self.stop()
                break
        return outcomes

    def run(self) -> list[WorkerOutcome]:
        """Start all workers and wait for them."""

        self.start()
        return self.wait()

    def _run_worker(self, worker: Worker) -> None:
        try:
            outcome = worker.run()
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Worker for %s raised unexpectedly", worker.spec.path)
            outcome = WorkerOutcome(path=worker.spec.path, forwarded=0, error=exc, spec=worker.spec)
        self._results.put(outcome)

    def _report(self, outcome: WorkerOutcome) -> None:
        tag = outcome.spec.tag if outcome.spec is not None else ""
        if outcome.failed:
            LOGGER.error("Pipe %s (tag %r) terminated: %s", outcome.path, tag, outcome.error)
        else:
            LOGGER.info("Pipe %s (tag %r) finished after %d record(s)", outcome.path, tag, outcome.forwarded)


__all__ = ["FailurePolicy", "Supervisor", "Worker"]
