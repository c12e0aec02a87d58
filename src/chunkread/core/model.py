from __future__ import annotations
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class RangeOption:
    start: int
    end: int = -1              # inclusive, -1 = to end of object

    def header(self) -> str:
        """Return the HTTP Range header value for this range."""
        if self.end < 0:
            return f"bytes={self.start}-"
        return f"bytes={self.start}-{self.end}"

    def decode(self, size: int) -> tuple[int, int]:
        """Resolve against an object of `size` bytes -> (offset, limit).

        A limit of -1 means read to the end of the object.
        """
        offset = min(max(self.start, 0), size)
        if self.end < 0:
            return offset, -1
        return offset, max(min(self.end + 1, size) - offset, 0)


class ClosedReaderError(ValueError):
    """Raised when a ChunkedReader is used after close()."""

    def __init__(self, message: str = "file already closed"):
        super().__init__(message)


class InvalidSeekError(ValueError):
    """Raised when a seek resolves outside [0, size)."""


class SizeParseError(ValueError):
    """Raised when a size literal such as '128M' cannot be parsed."""


class ScheduleParseError(ValueError):
    """Raised when a multiplier schedule string is malformed."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"invalid schedule segment {token!r}: {reason}")
