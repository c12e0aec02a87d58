"""Tests for local file objects."""

import io
import os
import tempfile
from pathlib import Path

import pytest

from chunkread.core.model import RangeOption
from chunkread.io.base import ObjectStream, RangeSeeker, RemoteObject
from chunkread.io.local import LocalObject, LocalStream, open_local_object
from chunkread.reader import ChunkedReader


class TestLocalObject:
    """Test local remote objects."""

    def test_whole_object(self):
        """Test opening without a range."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            obj = LocalObject(f.name)
            assert obj.size == 10

            stream = obj.open()
            assert stream.read(4) == b"0123"
            assert stream.read() == b"456789"
            assert stream.read(1) == b""

            assert obj.bytes_fetched == 10
            assert obj.requests_made == 1

            stream.close()
            obj.close()

    def test_ranges(self):
        """Test bounded and half-open ranges."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            obj = LocalObject(f.name)

            assert obj.open(RangeOption(2, 4)).read() == b"234"
            assert obj.open(RangeOption(7)).read() == b"789"
            # ranges past the end are clamped
            assert obj.open(RangeOption(8, 99)).read() == b"89"
            assert obj.open(RangeOption(10, 20)).read() == b""

            assert obj.bytes_fetched == 8  # 3 + 3 + 2
            assert obj.requests_made == 4

            obj.close()

    def test_binary_io_source(self):
        """Test using BinaryIO as source."""
        bio = io.BytesIO(b"0123456789")

        obj = LocalObject(bio)

        assert obj.size == 10
        assert obj.open(RangeOption(0, 4)).read() == b"01234"
        assert obj.open(RangeOption(5, 9)).read() == b"56789"
        assert obj.bytes_fetched == 10

        obj.close()

    def test_unbuffered_file_source(self):
        """Test using an open file object as source."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            with open(f.name, "rb") as fh:
                obj = LocalObject(fh)
                assert obj.open(RangeOption(3, 5)).read() == b"345"
                obj.close()
                # files we did not open stay open
                assert not fh.closed

    def test_path_source(self):
        """Test using Path as source."""
        with tempfile.NamedTemporaryFile(delete=False) as f:
            f.write(b"0123456789")
            f.flush()
            temp_path = Path(f.name)

        try:
            obj = LocalObject(temp_path)
            assert obj.open(RangeOption(0, 4)).read() == b"01234"
            assert obj.bytes_fetched == 5
            obj.close()
        finally:
            temp_path.unlink()

    def test_empty_file(self):
        """Test handling of empty files."""
        with tempfile.NamedTemporaryFile() as f:
            obj = LocalObject(f.name)
            assert obj.size == 0
            assert obj.open().read() == b""
            obj.close()

    def test_closed_object(self):
        """Test opening after close."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            obj = LocalObject(f.name)
            obj.close()
            with pytest.raises(IOError, match="closed"):
                obj.open()

    def test_context_manager(self):
        """Test context manager usage."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            with LocalObject(f.name) as obj:
                assert obj.open(RangeOption(0, 4)).read() == b"01234"
                assert obj.bytes_fetched == 5

    def test_protocols(self):
        obj = LocalObject(io.BytesIO(b"abc"))
        stream = obj.open()
        assert isinstance(obj, RemoteObject)
        assert isinstance(stream, ObjectStream)
        assert isinstance(stream, RangeSeeker)


class TestLocalStream:
    """Test in-place range seeks on local streams."""

    def test_range_seek(self):
        obj = LocalObject(io.BytesIO(b"0123456789"))
        stream = obj.open(RangeOption(0, 1))
        assert stream.read() == b"01"

        assert stream.range_seek(5, os.SEEK_SET, 3) == 5
        assert stream.read() == b"567"
        assert stream.range_seek(-2, os.SEEK_END, -1) == 8
        assert stream.read() == b"89"
        assert stream.range_seek(2, os.SEEK_SET, -1) == 2
        assert stream.range_seek(1, os.SEEK_CUR, 2) == 3
        assert stream.read() == b"34"
        assert obj.requests_made == 1

    def test_range_seek_past_end_lands_at_end(self):
        stream = LocalObject(io.BytesIO(b"0123456789")).open()
        assert stream.range_seek(50, os.SEEK_SET, 10) == 10

    def test_range_seek_errors(self):
        stream = LocalObject(io.BytesIO(b"0123456789")).open()
        with pytest.raises(OSError):
            stream.range_seek(-1, os.SEEK_SET, 1)
        with pytest.raises(ValueError):
            stream.range_seek(0, 9, 1)
        stream.close()
        with pytest.raises(ValueError):
            stream.read()
        with pytest.raises(ValueError):
            stream.range_seek(0, os.SEEK_SET, 1)


class TestChunkedLocalReads:
    """Test the chunked reader over local objects."""

    def test_chunks_reuse_one_stream(self):
        test_data = bytes(range(256)) * 64  # 16 KiB

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            with LocalObject(f.name) as obj:
                reader = ChunkedReader.from_min_max(obj, 1024, 4096)
                assert reader.read() == test_data
                # boundaries are crossed by in-place seeks
                assert obj.requests_made == 1
                assert obj.bytes_fetched == len(test_data)

                reader.seek(100)
                assert reader.read(10) == test_data[100:110]
                assert obj.requests_made == 1
                reader.close()

    def test_factory_function(self):
        """Test factory function."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            obj = open_local_object(f.name)
            assert isinstance(obj, LocalObject)
            assert isinstance(obj.open(), LocalStream)
            obj.close()
