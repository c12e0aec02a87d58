"""chunkread - adaptive chunked reading of remote objects."""

import asyncio

from .core.config import ChunkingConfig
from .core.iterators import UNBOUNDED, ChunkSizeIterator, MinMaxIterator, iterator_from_min_max
from .core.model import (                                             # re-export
    ClosedReaderError, InvalidSeekError, RangeOption, ScheduleParseError, SizeParseError,
)
from .core.schedule import MultiplierList, parse_multiplier_list
from .core.sizes import format_size, parse_size
from .io import open_object
from .reader import AsyncChunkedReader, ChunkedReader


def open_chunked(source, config: ChunkingConfig | None = None, **object_options) -> ChunkedReader:
    """Open a path, URL, or file-like object for chunked reading.

    The reader owns the remote object it opens here; closing the reader closes it.
    """
    config = config or ChunkingConfig()
    obj = open_object(source, **object_options)
    return ChunkedReader(obj, config.build_iterator(), owns_object=True)


async def open_chunked_async(source, config: ChunkingConfig | None = None, **object_options) -> AsyncChunkedReader:
    """Async variant of open_chunked(); the HEAD/mmap setup runs in a worker thread."""
    reader = await asyncio.to_thread(open_chunked, source, config, **object_options)
    return AsyncChunkedReader(reader)


__all__ = [
    "open_chunked", "open_chunked_async", "open_object",
    "ChunkedReader", "AsyncChunkedReader", "ChunkingConfig",
    "ChunkSizeIterator", "MinMaxIterator", "iterator_from_min_max", "UNBOUNDED",
    "MultiplierList", "parse_multiplier_list", "parse_size", "format_size",
    "RangeOption", "ClosedReaderError", "InvalidSeekError", "ScheduleParseError", "SizeParseError",
]
