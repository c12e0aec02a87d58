"""Chunked reading of remote objects.

A ChunkedReader serves ordinary read/seek calls from a remote object while
fetching it in chunks whose sizes come from a ChunkSizeIterator: small ranges
first, then progressively bigger ones, so that short reads stay cheap and long
sequential reads need few requests.
"""

from __future__ import annotations
import asyncio
import enum
import logging
import os
import threading

from .core.iterators import ChunkSizeIterator, fix_negative, iterator_from_min_max
from .core.model import ClosedReaderError, InvalidSeekError, RangeOption
from .core.schedule import MultiplierList, parse_multiplier_list
from .io.base import ObjectStream, RangeSeeker, RemoteObject, UnknownSizeError

logger = logging.getLogger(__name__)

_READ_BLOCK = 1024 * 1024


class _State(enum.Enum):
    PENDING = "pending"        # no stream positioned yet, acquire before reading
    POSITIONED = "positioned"  # stream open at self._offset
    CLOSED = "closed"


def _read_full(stream: ObjectStream, view: memoryview) -> int:
    """Fill `view` from `stream`; a short count means the stream ended."""
    filled = 0
    while filled < len(view):
        data = stream.read(len(view) - filled)
        if not data:
            break
        view[filled:filled + len(data)] = data
        filled += len(data)
    return filled


class ChunkedReader:
    """Read/seek interface over a RemoteObject, fetched chunk by chunk.

    Every public method holds the reader's lock for its whole duration,
    including the blocking I/O it performs.
    """

    def __init__(self, obj: RemoteObject, size_iterator: ChunkSizeIterator, *, owns_object: bool = False):
        self._lock = threading.RLock()
        self._object = obj
        self._owns_object = owns_object
        self._size_iterator = size_iterator
        self._stream: ObjectStream | None = None
        self._state = _State.PENDING
        self._offset = 0
        self._chunk_offset = 0
        self._chunk_size = fix_negative(size_iterator.next_chunk_size())

    @classmethod
    def from_min_max(cls, obj: RemoteObject, min_size: int, max_size: int = -1) -> ChunkedReader:
        """Start with `min_size` chunks and double up to `max_size`.

        A `min_size` <= 0 disables chunked reading. Seeking restarts at `min_size`.
        """
        return cls(obj, iterator_from_min_max(min_size, max_size))

    @classmethod
    def from_schedule(cls, obj: RemoteObject, schedule: MultiplierList | str) -> ChunkedReader:
        if isinstance(schedule, str):
            schedule = parse_multiplier_list(schedule)
        return cls(obj, schedule.iter())

    # --- state ---
    @property
    def remote_object(self) -> RemoteObject:
        return self._object

    @property
    def closed(self) -> bool:
        return self._state is _State.CLOSED

    def _check_open(self):
        if self._state is _State.CLOSED:
            raise ClosedReaderError()

    def _position(self) -> int:
        if self._state is _State.POSITIONED:
            return self._offset
        return self._chunk_offset

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        with self._lock:
            self._check_open()
            return self._position()

    # --- reading ---
    def readinto(self, buffer) -> int:
        """Read into `buffer`, returning the byte count (0 at end of object)."""
        with self._lock:
            self._check_open()
            return self._readinto(memoryview(buffer).cast("B"))

    def read(self, size: int = -1) -> bytes:
        """Read up to `size` bytes, or to the end of the object if `size` < 0."""
        with self._lock:
            self._check_open()
            blocks = []
            remaining = size
            while remaining != 0:
                buf = bytearray(_READ_BLOCK if remaining < 0 else min(remaining, _READ_BLOCK))
                n = self._readinto(memoryview(buf))
                if n > 0:
                    blocks.append(bytes(buf[:n]))
                if n < len(buf):
                    # end of object
                    break
                if remaining > 0:
                    remaining -= n
            return b"".join(blocks)

    def _readinto(self, view: memoryview) -> int:
        total = 0
        while len(view) > 0:
            # the current chunk boundary, valid only when chunk_size > 0
            chunk_end = self._chunk_offset + self._chunk_size
            logger.debug(
                "read at %d length %d chunk_offset %d chunk_size %d",
                self._position(), len(view), self._chunk_offset, self._chunk_size,
            )

            if self._state is _State.POSITIONED and self._chunk_size > 0 and self._offset == chunk_end:
                # last chunk read completely
                self._chunk_offset = self._offset
                self._chunk_size = fix_negative(self._size_iterator.next_chunk_size())
                chunk_end = self._chunk_offset + self._chunk_size
                if self._at_end():
                    break
                self._open_range()
            elif self._state is _State.PENDING:
                if self._at_end():
                    break
                self._open_range()

            if self._chunk_size > 0 and len(view) > chunk_end - self._offset:
                rest = chunk_end - self._offset
                part, view = view[:rest], view[rest:]
            else:
                part, view = view, view[:0]

            n = _read_full(self._stream, part)
            total += n
            self._offset += n
            if n < len(part):
                # the object ended before the chunk did
                break
        return total

    def _at_end(self) -> bool:
        try:
            size = self._object.size
        except UnknownSizeError:
            # the stream itself reports the end
            return False
        return self._chunk_offset >= size

    # --- seeking ---
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self.range_seek(offset, whence, -1)

    def range_seek(self, offset: int, whence: int = os.SEEK_SET, length: int = -1) -> int:
        """Move to a new position; nothing is reopened until the next read.

        A positive `length` is used verbatim as the size of the next chunk,
        otherwise the chunk-size strategy starts over.
        """
        with self._lock:
            self._check_open()
            logger.debug("range_seek from %d to %d length %d", self._position(), offset, length)

            size = self._object.size
            if whence == os.SEEK_SET:
                base = 0
            elif whence == os.SEEK_CUR:
                base = self._position()
            elif whence == os.SEEK_END:
                base = size
            else:
                raise ValueError(f"invalid whence ({whence})")

            self._chunk_offset = base + offset
            self._state = _State.PENDING
            self._size_iterator.reset(length)
            if length > 0:
                self._chunk_size = length
            else:
                self._chunk_size = fix_negative(self._size_iterator.next_chunk_size())

            if not 0 <= self._chunk_offset < size:
                target = self._chunk_offset
                self._chunk_offset = 0
                raise InvalidSeekError(f"invalid seek position {target} for object of size {size}")
            return self._chunk_offset

    # --- range acquisition ---
    def open(self) -> ChunkedReader:
        """Acquire the current range now instead of on the next read."""
        with self._lock:
            self._check_open()
            if self._stream is not None and self._state is _State.POSITIONED:
                return self
            self._open_range()
            return self

    def _open_range(self):
        offset, length = self._chunk_offset, self._chunk_size
        logger.debug("open_range at %d length %d", offset, length)

        self._state = _State.PENDING
        if isinstance(self._stream, RangeSeeker):
            try:
                landed = self._stream.range_seek(offset, os.SEEK_SET, length)
            except (OSError, ValueError) as e:
                logger.debug("in-place range seek failed (%s), reopening", e)
            else:
                if landed == offset:
                    self._offset = offset
                    self._state = _State.POSITIONED
                    return
                logger.debug("in-place range seek landed at %d instead of %d, reopening", landed, offset)

        if length <= 0:
            option = None if offset == 0 else RangeOption(offset, -1)
        else:
            option = RangeOption(offset, offset + length - 1)

        self._close_stream()
        self._stream = self._object.open(option)
        self._offset = offset
        self._state = _State.POSITIONED

    def _close_stream(self):
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()

    # --- closing ---
    def close(self):
        """Close the current stream; the reader is unusable afterwards.

        A reader built with `owns_object=True` also closes its remote object.
        """
        with self._lock:
            self._check_open()
            self._state = _State.CLOSED
            try:
                self._close_stream()
            finally:
                if self._owns_object and hasattr(self._object, "close"):
                    self._object.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        return (
            f"<ChunkedReader {self._state.value} offset={self._position()} "
            f"chunk=({self._chunk_offset}, {self._chunk_size})>"
        )


class AsyncChunkedReader:
    """Asynchronous chunked reader - thin wrapper around the sync reader."""

    def __init__(self, reader: ChunkedReader):
        self._sync_reader = reader

    @property
    def closed(self) -> bool:
        return self._sync_reader.closed

    async def read(self, size: int = -1) -> bytes:
        return await asyncio.to_thread(self._sync_reader.read, size)

    async def readinto(self, buffer) -> int:
        return await asyncio.to_thread(self._sync_reader.readinto, buffer)

    async def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return await asyncio.to_thread(self._sync_reader.seek, offset, whence)

    async def range_seek(self, offset: int, whence: int = os.SEEK_SET, length: int = -1) -> int:
        return await asyncio.to_thread(self._sync_reader.range_seek, offset, whence, length)

    def tell(self) -> int:
        return self._sync_reader.tell()

    async def open(self) -> AsyncChunkedReader:
        await asyncio.to_thread(self._sync_reader.open)
        return self

    async def close(self):
        """Close the underlying sync reader."""
        await asyncio.to_thread(self._sync_reader.close)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.closed:
            await self.close()
