"""Worker lifecycle states and terminal outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .pipe_spec import PipeSpec


class WorkerState(Enum):
    """States of a forwarding worker, in the order they are entered."""

    RESOLVING = "resolving"
    OPENING = "opening"
    FORWARDING = "forwarding"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class WorkerOutcome:
    """Terminal report a worker hands to the supervisor.

    ``error`` is ``None`` when the worker stopped because it was asked to (or
    ran with ``reopen=False`` and reached end-of-stream).
    """

    path: str
    forwarded: int
    error: BaseException | None = None
    spec: PipeSpec | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


__all__ = ["WorkerOutcome", "WorkerState"]
