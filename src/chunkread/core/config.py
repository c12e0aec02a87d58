from __future__ import annotations
from dataclasses import dataclass

from .iterators import ChunkSizeIterator, iterator_from_min_max
from .schedule import MultiplierList, parse_multiplier_list
from .sizes import parse_size

DEFAULT_CHUNK_SIZE = 128 * 1024 * 1024  # 128 MiB


@dataclass(slots=True, frozen=True)
class ChunkingConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_size_limit: int = -1              # -1 = no cap
    schedule: MultiplierList | None = None  # takes precedence when non-empty

    @classmethod
    def from_strings(
        cls,
        chunk_size: str = "128M",
        chunk_size_limit: str = "off",
        schedule: str | None = None,
    ) -> ChunkingConfig:
        """Build a config from textual options such as '64M' / 'off' / '2M,x2'."""
        parsed = parse_multiplier_list(schedule) if schedule and schedule.strip() else None
        return cls(parse_size(chunk_size), parse_size(chunk_size_limit), parsed)

    @classmethod
    def disabled(cls) -> ChunkingConfig:
        """Every read extends to the end of the object."""
        return cls(chunk_size=-1)

    def build_iterator(self) -> ChunkSizeIterator:
        if self.schedule is not None and not self.schedule.empty:
            return self.schedule.iter()
        return iterator_from_min_max(self.chunk_size, self.chunk_size_limit)
