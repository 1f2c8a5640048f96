"""Filesystem adapter that provisions and opens named pipes.

Purpose
-------
Guarantee that every configured path ends up being a FIFO before a worker
starts reading, creating it with mode ``0666`` when it is missing and refusing
to touch any other kind of file.

Contents
--------
* :class:`FifoManager` - concrete :class:`FifoPort` implementation.
* :class:`FifoStream` - unbuffered read end, optionally holding its own writer.
"""

from __future__ import annotations

import errno
import io
import logging
import os
import stat
import threading

from logpipe.application.ports.fifo import FifoPort
from logpipe.domain.errors import PathConflictError, PipeIOError

LOGGER = logging.getLogger(__name__)

FIFO_MODE = 0o666


class FifoStream(io.FileIO):
    """Read end of a FIFO.

    When opened with a held writer descriptor the kernel never reports
    end-of-stream while that descriptor is open, so writers may come and go
    without the reader closing the pipe. :meth:`release_writer` drops the
    descriptor; once every other writer has detached, reads return ``b""``.
    """

    def __init__(self, fd: int, *, writer_fd: int | None = None) -> None:
        self._writer_fd = writer_fd
        self._writer_lock = threading.Lock()
        super().__init__(fd, "rb", closefd=True)

    @property
    def holds_writer(self) -> bool:
        return self._writer_fd is not None

    def release_writer(self) -> None:
        """Close the held writer descriptor; safe to call from any thread."""

        with self._writer_lock:
            fd, self._writer_fd = self._writer_fd, None
        if fd is not None:
            os.close(fd)

    def close(self) -> None:
        self.release_writer()
        super().close()


class FifoManager(FifoPort):
    """Create, validate, and open FIFOs on the local filesystem.

    Examples
    --------
    >>> import tempfile, pathlib
    >>> path = str(pathlib.Path(tempfile.mkdtemp()) / "pipe")
    >>> FifoManager().ensure_fifo(path)
    >>> stat.S_ISFIFO(os.stat(path).st_mode)
    True
    >>> with FifoManager().open_reader(path, hold_writer=True) as stream:
    ...     stream.holds_writer
    True
    """

    def __init__(self, *, mode: int = FIFO_MODE) -> None:
        self._mode = mode

    def ensure_fifo(self, path: str) -> None:
        """Create the FIFO at ``path`` when missing.

        Raises
        ------
        PathConflictError
            When ``path`` exists but is not a FIFO. The existing object is left
            untouched.
        PipeIOError
            When the path cannot be inspected or the FIFO cannot be created.
        """

        try:
            info = os.stat(path)
        except FileNotFoundError:
            self._create(path)
            return
        except OSError as exc:
            raise PipeIOError(f"Cannot inspect {path}: {exc}", path=path) from exc

        if not stat.S_ISFIFO(info.st_mode):
            raise _conflict(path)

    def open_reader(self, path: str, *, hold_writer: bool = False) -> FifoStream:
        """Open ``path`` for unbuffered binary reading.

        Without ``hold_writer`` the call blocks until a writer opens the other
        end, without a timeout. With ``hold_writer`` it returns at once and
        keeps a writer descriptor of its own, so reads block until data
        arrives and never see end-of-stream before :meth:`FifoStream.release_writer`.
        """

        if not hold_writer:
            try:
                return FifoStream(os.open(path, os.O_RDONLY))
            except OSError as exc:
                raise PipeIOError(f"Opening {path} failed: {exc}", path=path) from exc

        try:
            fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        except OSError as exc:
            raise PipeIOError(f"Opening {path} failed: {exc}", path=path) from exc
        try:
            writer_fd = os.open(path, os.O_WRONLY | os.O_NONBLOCK)
            os.set_blocking(fd, True)
        except OSError as exc:
            os.close(fd)
            raise PipeIOError(f"Opening {path} failed: {exc}", path=path) from exc
        return FifoStream(fd, writer_fd=writer_fd)

    def wake(self, path: str) -> None:
        """Attach and immediately detach a non-blocking writer.

        A reader blocked in :meth:`open_reader` returns and then sees
        end-of-stream. Nothing happens when no reader is waiting.
        """

        try:
            fd = os.open(path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError as exc:
            if exc.errno not in (errno.ENXIO, errno.ENOENT):
                LOGGER.debug("Could not wake reader on %s", path, exc_info=exc)
            return
        os.close(fd)

    def _create(self, path: str) -> None:
        try:
            os.mkfifo(path, self._mode)
            # mkfifo honours the umask; apply the requested mode verbatim.
            os.chmod(path, self._mode)
        except FileExistsError:
            # Something appeared between stat and mkfifo, or the path is a
            # dangling symlink. Inspect the entry itself, once.
            self._check_existing(path)
            return
        except OSError as exc:
            raise PipeIOError(f"Creating FIFO {path} failed: {exc}", path=path) from exc
        LOGGER.info("Created FIFO %s with mode %o", path, self._mode)

    def _check_existing(self, path: str) -> None:
        try:
            info = os.lstat(path)
        except OSError as exc:
            raise PipeIOError(f"Cannot inspect {path}: {exc}", path=path) from exc
        if not stat.S_ISFIFO(info.st_mode):
            raise _conflict(path)


def _conflict(path: str) -> PathConflictError:
    return PathConflictError(f"{path} exists, but it's not a named pipe (FIFO)", path=path)


__all__ = ["FIFO_MODE", "FifoManager", "FifoStream"]
