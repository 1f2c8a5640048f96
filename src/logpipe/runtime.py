"""Composition root wiring configuration, adapters, and use cases.

Purpose
-------
Translate a configuration file path plus a handful of switches into a running
:class:`~logpipe.application.use_cases.Supervisor`. All adapter choices are
made here so the application layer stays free of I/O details.

Contents
--------
* :data:`SINKS` - named sink factories selectable from the CLI.
* :func:`build_workers` / :func:`build_supervisor` - wiring helpers.
* :func:`run` - load, validate, supervise, and map the result to an exit code.
* :func:`summary_info` - metadata banner for the CLI.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Sequence

from logpipe.adapters import FifoManager, JournaldSink, LineReader, SyslogSink
from logpipe.application.ports import FifoPort, SinkPort
from logpipe.application.use_cases import FailurePolicy, ForwardingWorker, Supervisor
from logpipe.config import load_pipe_specs
from logpipe.domain import PipeSpec, WorkerOutcome

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_WORKER_FAILED = 2

SINKS: dict[str, Callable[[], SinkPort]] = {
    "syslog": SyslogSink,
    "journald": JournaldSink,
}


def build_sink(name: str) -> SinkPort:
    """Instantiate the sink registered under ``name``."""

    try:
        factory = SINKS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown sink {name!r}; expected one of {sorted(SINKS)}") from exc
    return factory()


def build_workers(
    specs: Sequence[PipeSpec],
    *,
    sink: SinkPort,
    fifo: FifoPort | None = None,
    reopen: bool = True,
) -> list[ForwardingWorker]:
    """Create one :class:`ForwardingWorker` per spec sharing ``fifo`` and ``sink``."""

    fifo_port = fifo or FifoManager()
    return [
        ForwardingWorker(
            spec,
            fifo=fifo_port,
            sink=sink,
            reader_factory=lambda handle, path: LineReader(handle, path=path),
            reopen=reopen,
        )
        for spec in specs
    ]


def build_supervisor(
    specs: Sequence[PipeSpec],
    *,
    sink: SinkPort,
    fifo: FifoPort | None = None,
    policy: FailurePolicy = FailurePolicy.ISOLATE,
    reopen: bool = True,
) -> Supervisor:
    """Return a supervisor over freshly built workers (not yet started)."""

    return Supervisor(build_workers(specs, sink=sink, fifo=fifo, reopen=reopen), policy=policy)


def exit_code_for(outcomes: Sequence[WorkerOutcome]) -> int:
    """Map worker outcomes to the process exit status."""

    return EXIT_WORKER_FAILED if any(outcome.failed for outcome in outcomes) else EXIT_OK


def run(
    config_path: str | os.PathLike[str],
    *,
    sink: SinkPort | str = "syslog",
    fifo: FifoPort | None = None,
    policy: FailurePolicy = FailurePolicy.ISOLATE,
    reopen: bool = True,
) -> int:
    """Load ``config_path`` and forward every configured pipe.

    Every pipe is validated before any worker starts, so a
    :class:`~logpipe.domain.ConfigurationError` propagates to the caller with
    nothing running. Otherwise blocks until all workers end (forever when
    none are configured) and returns the exit status.
    """

    specs = load_pipe_specs(config_path)
    sink_port = build_sink(sink) if isinstance(sink, str) else sink
    supervisor = build_supervisor(specs, sink=sink_port, fifo=fifo, policy=policy, reopen=reopen)
    try:
        outcomes = supervisor.run()
    except KeyboardInterrupt:
        LOGGER.info("Interrupted; stopping %d pipe(s)", len(specs))
        supervisor.stop()
        raise
    return exit_code_for(outcomes)


def summary_info() -> str:
    """Return the metadata banner used by the CLI ``info`` command.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """
    from . import __init__conf__

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_OK",
    "EXIT_WORKER_FAILED",
    "SINKS",
    "build_sink",
    "build_supervisor",
    "build_workers",
    "exit_code_for",
    "run",
    "summary_info",
]
