"""Random-access byte sources.

A source fills a caller buffer from an absolute offset and returns the number
of bytes written, following the ``readinto`` convention. Fewer bytes than
requested means the data ended. Errors are raised and left for the caller.
"""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Optional, Union

from .keystream import Buffer


class ByteSource:
    def read_at(self, buffer: Buffer, offset: int) -> int:  # pragma: no cover
        raise NotImplementedError

    @property
    def size(self) -> Optional[int]:
        return None


class BytesSource(ByteSource):
    """In-memory source over an immutable copy of ``data``."""

    def __init__(self, data: Buffer):
        self._data = bytes(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read_at(self, buffer: Buffer, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"Offset must be non-negative, got {offset}")
        view = memoryview(buffer).cast("B")
        n = max(0, min(len(view), len(self._data) - offset))
        view[:n] = memoryview(self._data)[offset:offset + n]
        return n


class FileSource(ByteSource):
    """Positional reads from a file opened in binary mode.

    Uses ``os.preadv`` where the platform has it; elsewhere seek+read runs
    under a lock so concurrent readers cannot move each other's position.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = open(self.path, "rb")
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        return os.fstat(self._file.fileno()).st_size

    def read_at(self, buffer: Buffer, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"Offset must be non-negative, got {offset}")
        view = memoryview(buffer).cast("B")
        total = 0
        while total < len(view):
            n = self._read_once(view[total:], offset + total)
            if not n:
                break
            total += n
        return total

    def _read_once(self, view: memoryview, offset: int) -> int:
        if hasattr(os, "preadv"):
            return os.preadv(self._file.fileno(), [view], offset)
        with self._lock:
            self._file.seek(offset)
            return self._file.readinto(view) or 0

    def close(self) -> None:
        self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def __enter__(self) -> "FileSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
