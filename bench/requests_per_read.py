"""Request-count benchmark for chunking configurations.

Reads a 256 MiB in-memory object through a chunked reader with a few
configurations and reports how many range requests each one needed for a
short header read, a full sequential read, and a seek + short read.
Meant for manual runs.
"""

import io
import os

from chunkread import ChunkedReader, ChunkingConfig
from chunkread.core.sizes import format_size
from chunkread.io.local import LocalObject

OBJECT_SIZE = 256 * 1024 * 1024

CONFIGS = {
    "unchunked": ChunkingConfig.disabled(),
    "1M fixed": ChunkingConfig.from_strings("1M", "1M"),
    "1M doubling": ChunkingConfig.from_strings("1M", "off"),
    "1M..32M": ChunkingConfig.from_strings("1M", "32M"),
    "schedule": ChunkingConfig.from_strings(schedule="64k,x4,16M,x2,64M"),
}


class _NoSeekStream:
    def __init__(self, stream):
        self._stream = stream

    def read(self, size=-1):
        return self._stream.read(size)

    def close(self):
        self._stream.close()


class NoSeekObject(LocalObject):
    """LocalObject whose streams cannot seek in place, like an HTTP body."""

    def open(self, range_option=None):
        return _NoSeekStream(super().open(range_option))


def run(name, config, data):
    obj = NoSeekObject(io.BytesIO(data))
    with ChunkedReader(obj, config.build_iterator()) as reader:
        reader.read(4096)
        header = obj.requests_made
        while reader.read(8 * 1024 * 1024):
            pass
        full = obj.requests_made
        reader.seek(OBJECT_SIZE // 2, os.SEEK_SET)
        reader.read(4096)
        after_seek = obj.requests_made - full
    print(f"{name:<14} header={header:<4} full={full:<5} seek+read={after_seek:<3} "
          f"fetched={format_size(obj.bytes_fetched)}")


if __name__ == "__main__":
    print("chunkread request benchmark")
    print("=" * 40)
    payload = os.urandom(OBJECT_SIZE)
    for name, config in CONFIGS.items():
        run(name, config, payload)
