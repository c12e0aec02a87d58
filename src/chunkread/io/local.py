"""Local files exposed as remote objects, using mmap."""

import io
import mmap
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..core.model import RangeOption


class LocalStream:
    """Bounded stream over a LocalObject; supports in-place range seeks."""

    def __init__(self, owner: "LocalObject", offset: int, limit: int):
        self._owner = owner
        self._pos = 0
        self._end = 0
        self.closed = False
        self._set_range(offset, limit)

    def _set_range(self, offset: int, limit: int):
        size = self._owner.size
        self._pos = min(offset, size)
        self._end = size if limit < 0 else min(offset + limit, size)

    def read(self, size: int = -1) -> bytes:
        if self.closed:
            raise ValueError("read from closed stream")
        remaining = max(self._end - self._pos, 0)
        if size < 0 or size > remaining:
            size = remaining
        data = self._owner._slice(self._pos, size)
        self._pos += len(data)
        return data

    def range_seek(self, offset: int, whence: int, length: int) -> int:
        """Move the stream to `offset` and bound it to `length` bytes (-1 = to end)."""
        if self.closed:
            raise ValueError("seek on closed stream")
        if whence == os.SEEK_CUR:
            offset += self._pos
        elif whence == os.SEEK_END:
            offset += self._owner.size
        elif whence != os.SEEK_SET:
            raise ValueError(f"invalid whence ({whence})")
        if offset < 0:
            raise OSError(f"negative seek position {offset}")
        self._set_range(offset, length if length > 0 else -1)
        return self._pos

    def close(self):
        self.closed = True


class LocalObject:
    """Local file or in-memory buffer served through the remote-object protocol."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_fetched = 0
        self.requests_made = 0
        self._file = None
        self._mmap = None
        self._data = None  # For in-memory sources
        self._should_close_file = False

        if hasattr(source, 'read'):
            # BinaryIO object
            self._file = source
            if hasattr(source, 'getvalue'):
                # BytesIO: snapshot the data upfront
                self._data = source.getvalue()
        else:
            # Path or str
            self._file = open(source, 'rb')
            self._should_close_file = True

    def _ensure_mmap(self):
        """Create mmap on first access."""
        if self._mmap is None and self._data is None:
            if self._file is None:
                raise IOError("Object is closed")
            if not self._file.seekable():
                raise IOError("File is not seekable, cannot use mmap")
            self._file.seek(0, 2)  # Seek to end
            if self._file.tell() == 0:
                self._data = b""
                return
            try:
                self._mmap = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
            except (io.UnsupportedOperation, OSError):
                # Fallback for files that don't support fileno()
                self._file.seek(0)
                self._data = self._file.read()

    def _slice(self, start: int, length: int) -> bytes:
        source = self._mmap if self._mmap is not None else self._data
        data = source[start:start + length]
        self.bytes_fetched += len(data)
        return data

    @property
    def size(self) -> int:
        """Return the total size of the source in bytes."""
        if self._data is not None:
            return len(self._data)
        self._ensure_mmap()
        return len(self._mmap) if self._mmap is not None else len(self._data)

    def open(self, range_option: Optional[RangeOption] = None) -> LocalStream:
        """Open the whole object or the given byte range."""
        self._ensure_mmap()
        self.requests_made += 1
        if range_option is None:
            return LocalStream(self, 0, -1)
        offset, limit = range_option.decode(self.size)
        return LocalStream(self, offset, limit)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close mmap and file if we opened it."""
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._should_close_file and self._file is not None:
            self._file.close()
            self._file = None


def open_local_object(source: Union[Path, str, BinaryIO]) -> LocalObject:
    """Create a local remote object."""
    return LocalObject(source)
