"""Base protocols and shared types for the remote-object layer."""

from typing import Optional, Protocol, runtime_checkable

from ..core.model import RangeOption


class RangeNotSupportedError(RuntimeError):
    """Raised when server rejects Range and file size >= RANGE_FALLBACK_MAX."""


class UnknownSizeError(IOError):
    """Raised by `size` when the object length was never reported."""


RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB


@runtime_checkable
class ObjectStream(Protocol):
    """Readable, closable handle on (a range of) a remote object."""

    def read(self, size: int = -1) -> bytes:
        """Return up to `size` bytes; b'' at the end of the range."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class RangeSeeker(Protocol):
    """Optional capability: reposition an open stream in place."""

    def range_seek(self, offset: int, whence: int, length: int) -> int:
        """Seek to `offset` and expect to read about `length` bytes (-1 = to end).
        Returns the position actually landed at.
        """
        ...


@runtime_checkable
class RemoteObject(Protocol):
    """Protocol for objects that can be opened by byte range."""

    @property
    def size(self) -> int:
        """Total size of the object in bytes."""
        ...

    def open(self, range_option: Optional[RangeOption] = None) -> ObjectStream:
        """Open the whole object (None) or the given byte range."""
        ...
