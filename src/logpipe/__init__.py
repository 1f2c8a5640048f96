"""Forward lines written into named pipes to the local system log.

The package is layered the same way throughout: :mod:`logpipe.domain` holds
pure values and errors, :mod:`logpipe.application` the worker and supervisor
use cases behind Protocol ports, :mod:`logpipe.adapters` the FIFO and sink
implementations, and :mod:`logpipe.runtime` wires them together.
"""

from __future__ import annotations

from .domain import (
    ConfigurationError,
    Facility,
    LogpipeError,
    PathConflictError,
    PipeIOError,
    PipeSpec,
    Severity,
    encode_priority,
    validate_pipe,
)
from .runtime import run

__all__ = [
    "ConfigurationError",
    "Facility",
    "LogpipeError",
    "PathConflictError",
    "PipeIOError",
    "PipeSpec",
    "Severity",
    "encode_priority",
    "run",
    "validate_pipe",
]
