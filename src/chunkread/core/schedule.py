"""Explicit chunk-size schedules such as ``"2k,x3,20k,x2"``.

A schedule is a comma separated list of size anchors. An ``x<N>`` token after
an anchor multiplies the previous chunk size by N on every call until the next
anchor is reached (the value then snaps to that anchor). A trailing
multiplier keeps growing the chunk size forever; without one the last anchor
repeats.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .iterators import UNBOUNDED
from .model import ScheduleParseError, SizeParseError
from .sizes import format_size, parse_size


@dataclass(slots=True, frozen=True)
class MultiplierList:
    anchors: tuple[int, ...] = ()
    multipliers: tuple[int, ...] = ()   # 0 = no multiplier after the anchor

    @classmethod
    def parse(cls, text: str) -> MultiplierList:
        return parse_multiplier_list(text)

    @property
    def empty(self) -> bool:
        return not self.anchors

    def iter(self) -> MultiplierListIterator:
        """Return a fresh chunk-size iterator over this schedule."""
        return MultiplierListIterator(self)

    def __str__(self) -> str:
        parts: list[str] = []
        for anchor, mult in zip(self.anchors, self.multipliers):
            parts.append(format_size(anchor))
            if mult > 1:
                parts.append(f"x{mult}")
        return ",".join(parts)


def parse_multiplier_list(text: str) -> MultiplierList:
    """Parse a comma separated schedule string."""
    return parse_multiplier_list_parts(text.split(","))


def parse_multiplier_list_parts(parts: Iterable[str]) -> MultiplierList:
    """Parse already split schedule segments."""
    anchors: list[int] = []
    multipliers: list[int] = []
    for raw in parts:
        token = raw.strip()
        if not token:
            raise ScheduleParseError(raw, "empty segment")
        if token.startswith("x"):
            if not multipliers:
                raise ScheduleParseError(token, "multiplier at first position")
            if multipliers[-1] != 0:
                raise ScheduleParseError(token, "multiple multipliers in a row")
            try:
                mult = int(token[1:])
            except ValueError:
                raise ScheduleParseError(token, "invalid multiplier") from None
            if mult < 2:
                raise ScheduleParseError(token, "multiplier must be at least 2")
            multipliers[-1] = mult
            continue
        try:
            size = parse_size(token)
        except SizeParseError as e:
            raise ScheduleParseError(token, "invalid size") from e
        if size <= 0:
            raise ScheduleParseError(token, "size must be positive")
        anchors.append(size)
        multipliers.append(0)
    return MultiplierList(tuple(anchors), tuple(multipliers))


class MultiplierListIterator:
    """Chunk-size iterator walking a MultiplierList."""

    def __init__(self, schedule: MultiplierList):
        self.schedule = schedule
        self._index = 0
        self._last = 0

    def next_chunk_size(self) -> int:
        anchors, multipliers = self.schedule.anchors, self.schedule.multipliers
        count = len(anchors)
        if count == 0:
            return UNBOUNDED

        # past the last anchor: keep applying its multiplier, if any
        if self._index >= count:
            if multipliers[-1] > 1:
                self._last *= multipliers[-1]
            return self._last

        if self._last == 0:
            self._last = anchors[0]
            return self._last

        mult = multipliers[self._index]
        if mult <= 1:
            self._index += 1
            if self._index < count:
                self._last = anchors[self._index]
            return self._last

        self._last *= mult
        if self._index + 1 < count and self._last >= anchors[self._index + 1]:
            self._index += 1
            self._last = anchors[self._index]
        return self._last

    def reset(self, length: int) -> None:
        self._index = 0
        self._last = 0
