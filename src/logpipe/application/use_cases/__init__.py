"""Application use cases: the forwarding worker and its supervisor."""

from __future__ import annotations

from .forward_pipe import ForwardingWorker, ReaderFactory
from .supervise import FailurePolicy, Supervisor

__all__ = ["FailurePolicy", "ForwardingWorker", "ReaderFactory", "Supervisor"]
