"""Domain values and errors used by the forwarding pipeline."""

from __future__ import annotations

from .errors import ConfigurationError, LogpipeError, PathConflictError, PipeIOError
from .outcome import WorkerOutcome, WorkerState
from .pipe_spec import PipeSpec, validate_pipe
from .priority import PRIORITY_TABLE, Facility, PriorityTable, Severity, encode_priority

__all__ = [
    "ConfigurationError",
    "Facility",
    "LogpipeError",
    "PRIORITY_TABLE",
    "PathConflictError",
    "PipeIOError",
    "PipeSpec",
    "PriorityTable",
    "Severity",
    "WorkerOutcome",
    "WorkerState",
    "encode_priority",
    "validate_pipe",
]
