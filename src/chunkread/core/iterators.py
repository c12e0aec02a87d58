"""Chunk-size strategies consulted by the chunked reader."""

from __future__ import annotations
import sys
from typing import Protocol, runtime_checkable

UNBOUNDED = -1  # chunk extends to the end of the object


@runtime_checkable
class ChunkSizeIterator(Protocol):
    """Protocol for chunk-size strategies."""

    def next_chunk_size(self) -> int:
        """Return the size of the next chunk to fetch.
        A value <= 0 disables chunking for that chunk.
        """
        ...

    def reset(self, length: int) -> None:
        """Called after a range seek with the explicit length (or -1)."""
        ...


def fix_negative(size: int) -> int:
    return size if size > 0 else UNBOUNDED


class MinMaxIterator:
    """Start at `min_size`, double on every call, never exceed `max_size`."""

    def __init__(self, min_size: int, max_size: int):
        self.min_size = min_size
        self.max_size = max_size
        self._current = 0

    def next_chunk_size(self) -> int:
        if self.min_size <= 0:
            return UNBOUNDED
        if self._current < self.min_size:
            self._current = self.min_size
        else:
            self._current = min(self._current * 2, self.max_size)
        return self._current

    def reset(self, length: int) -> None:
        self._current = 0

    def __repr__(self) -> str:
        return f"MinMaxIterator(min_size={self.min_size}, max_size={self.max_size})"


def iterator_from_min_max(min_size: int, max_size: int | None = -1) -> MinMaxIterator:
    """Build a doubling iterator.

    A `min_size` <= 0 always yields UNBOUNDED and disables chunked reading.
    A `max_size` of -1 or None means no cap; a cap below `min_size` is
    raised to `min_size`.
    """
    if min_size <= 0:
        return MinMaxIterator(UNBOUNDED, UNBOUNDED)
    if max_size is None or max_size == -1:
        max_size = sys.maxsize
    elif max_size < min_size:
        max_size = min_size
    return MinMaxIterator(min_size, max_size)
