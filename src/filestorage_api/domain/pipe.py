"""Bounded in-memory byte pipe between an upload producer and its consumer."""

import threading
from collections import deque

from filestorage_api.exceptions import PipeClosedError


class BoundedPipe:
    """
    Thread-safe byte pipe holding at most ``capacity`` chunks.

    The writer side calls ``write`` and finally ``close``, optionally with an
    error. The reader side is file-like: ``read`` blocks until data arrives,
    returns ``b""`` on a clean close and raises the writer's error on an
    aborted one. Buffered data is discarded on abort, so a reader never sees
    bytes past the point the writer gave up.
    """

    def __init__(self, capacity: int = 16):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._chunks: deque[bytes] = deque()
        self._cond = threading.Condition()
        self._write_closed = False
        self._read_closed = False
        self._error: Exception | None = None

    def write(self, data: bytes) -> int:
        """
        Appends a chunk, blocking while the pipe is full.

        Raises:
            PipeClosedError: If either end has already been closed.
        """
        if not data:
            return 0
        with self._cond:
            while len(self._chunks) >= self._capacity and not self._read_closed:
                self._cond.wait()
            if self._read_closed or self._write_closed:
                raise PipeClosedError()
            self._chunks.append(bytes(data))
            self._cond.notify_all()
        return len(data)

    def close(self, error: Exception | None = None) -> None:
        """Closes the writer end. Readers get EOF, or ``error`` when given."""
        with self._cond:
            if self._write_closed:
                return
            self._write_closed = True
            if error is not None:
                self._error = error
                self._chunks.clear()
            self._cond.notify_all()

    def close_reader(self) -> None:
        """Closes the reader end, releasing a writer blocked on a full pipe."""
        with self._cond:
            self._read_closed = True
            self._chunks.clear()
            self._cond.notify_all()

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        """
        Reads up to ``size`` bytes, or everything until EOF when negative.

        Raises:
            Exception: The error the writer closed the pipe with.
        """
        if size is None or size < 0:
            return b"".join(iter(lambda: self.read(64 * 1024), b""))
        if size == 0:
            return b""

        with self._cond:
            while not self._chunks:
                if self._error is not None:
                    raise self._error
                if self._write_closed or self._read_closed:
                    return b""
                self._cond.wait()
            if self._error is not None:
                raise self._error

            parts = []
            remaining = size
            while self._chunks and remaining > 0:
                chunk = self._chunks.popleft()
                if len(chunk) > remaining:
                    self._chunks.appendleft(chunk[remaining:])
                    chunk = chunk[:remaining]
                parts.append(chunk)
                remaining -= len(chunk)
            self._cond.notify_all()
        return b"".join(parts)
