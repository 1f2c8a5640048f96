"""Error taxonomy shared by every layer.

Each error records the pipe ``path`` it belongs to so operators can tell which
configured pipe failed without reading a traceback.
"""

from __future__ import annotations


class LogpipeError(Exception):
    """Base class for all errors raised by logpipe."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationError(LogpipeError, ValueError):
    """Configuration is missing, malformed, or names an unknown facility/severity."""


class PathConflictError(LogpipeError):
    """The pipe path exists but is not a FIFO."""


class PipeIOError(LogpipeError, OSError):
    """Creating, opening, or reading a FIFO, or writing to the log sink failed."""


__all__ = ["ConfigurationError", "LogpipeError", "PathConflictError", "PipeIOError"]
