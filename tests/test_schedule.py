"""Tests for multiplier schedules."""

import pytest

from chunkread.core.iterators import UNBOUNDED, ChunkSizeIterator
from chunkread.core.model import ScheduleParseError
from chunkread.core.schedule import (
    MultiplierList, parse_multiplier_list, parse_multiplier_list_parts,
)

K = 1 << 10
M = 1 << 20
G = 1 << 30


def take(schedule: MultiplierList, n: int) -> list[int]:
    it = schedule.iter()
    return [it.next_chunk_size() for _ in range(n)]


class TestParse:
    """Test schedule parsing."""

    def test_anchors_and_multipliers(self):
        ml = parse_multiplier_list("2k,x3,20k,x2")
        assert ml.anchors == (2 * K, 20 * K)
        assert ml.multipliers == (3, 2)

    def test_whitespace_is_ignored(self):
        assert parse_multiplier_list(" 2M , x2 ,8M") == parse_multiplier_list("2M,x2,8M")

    def test_parts(self):
        assert parse_multiplier_list_parts(["1M", "x4"]) == MultiplierList((M,), (4,))

    def test_classmethod(self):
        assert MultiplierList.parse("1M") == MultiplierList((M,), (0,))

    @pytest.mark.parametrize("text,token,reason", [
        (",2M", "", "empty segment"),
        ("2M,", "", "empty segment"),
        ("", "", "empty segment"),
        ("x2,2M", "x2", "multiplier at first position"),
        ("2M,x2,x3,4M", "x3", "multiple multipliers in a row"),
        ("2M,x1", "x1", "multiplier must be at least 2"),
        ("2M,x0", "x0", "multiplier must be at least 2"),
        ("2M,x-3", "x-3", "multiplier must be at least 2"),
        ("2M,xabc", "xabc", "invalid multiplier"),
        ("2M,x", "x", "invalid multiplier"),
        ("2M,lots", "lots", "invalid size"),
        ("2M,0", "0", "size must be positive"),
        ("off", "off", "size must be positive"),
    ])
    def test_errors(self, text, token, reason):
        with pytest.raises(ScheduleParseError) as excinfo:
            parse_multiplier_list(text)
        assert excinfo.value.token == token
        assert excinfo.value.reason == reason
        assert reason in str(excinfo.value)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_multiplier_list("x2")


class TestIteration:
    """Test the chunk sizes a schedule produces."""

    def test_simple(self):
        ml = parse_multiplier_list("2M,10M,50M,200M")
        assert take(ml, 5) == [2 * M, 10 * M, 50 * M, 200 * M, 200 * M]

    def test_trailing_multiplier(self):
        ml = parse_multiplier_list("128M,1G,x2")
        assert take(ml, 5) == [128 * M, 1 * G, 2 * G, 4 * G, 8 * G]

    def test_multiplier_between_anchors(self):
        ml = parse_multiplier_list("2k,x3,20k,x2")
        assert take(ml, 5) == [2 * K, 6 * K, 18 * K, 20 * K, 40 * K]

    def test_snaps_when_multiple_lands_exactly(self):
        ml = parse_multiplier_list("1k,x2,4k")
        assert take(ml, 5) == [1 * K, 2 * K, 4 * K, 4 * K, 4 * K]

    def test_single_anchor_with_multiplier_grows_forever(self):
        ml = parse_multiplier_list("1k,x2")
        assert take(ml, 4) == [1 * K, 2 * K, 4 * K, 8 * K]

    def test_single_anchor_repeats(self):
        assert take(parse_multiplier_list("3M"), 3) == [3 * M] * 3

    def test_empty_list_is_unbounded(self):
        ml = MultiplierList()
        assert ml.empty
        assert take(ml, 3) == [UNBOUNDED] * 3

    def test_reset(self):
        it = parse_multiplier_list("2k,x3,20k,x2").iter()
        for _ in range(4):
            it.next_chunk_size()
        it.reset(12345)  # explicit length is ignored
        assert [it.next_chunk_size() for _ in range(3)] == [2 * K, 6 * K, 18 * K]

    def test_iterators_are_independent(self):
        ml = parse_multiplier_list("1k,2k,3k")
        a, b = ml.iter(), ml.iter()
        a.next_chunk_size()
        a.next_chunk_size()
        assert b.next_chunk_size() == 1 * K

    def test_protocol(self):
        assert isinstance(parse_multiplier_list("1M").iter(), ChunkSizeIterator)


class TestFormat:
    """Test formatting schedules back to text."""

    def test_format(self):
        assert str(parse_multiplier_list("2k,x3,20k,x2")) == "2k,x3,20k,x2"
        assert str(parse_multiplier_list("128M, 1G ,x2")) == "128M,1G,x2"
        assert str(parse_multiplier_list("1024k")) == "1M"

    @pytest.mark.parametrize("text", [
        "2M,10M,50M,200M",
        "128M,1G,x2",
        "2k,x3,20k,x2",
        "1.5M,x4,1G",
        "100b,x2,1000b",
        "10,20",
        "7MiB,x10",
    ])
    def test_round_trip(self, text):
        ml = parse_multiplier_list(text)
        again = parse_multiplier_list(str(ml))
        assert again == ml
        assert again.anchors == ml.anchors
        assert again.multipliers == ml.multipliers
