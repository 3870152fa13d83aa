from __future__ import annotations
from typing import List, Optional

from .outcome import Outcome


class CacheLine:
    """Represents a single resident line in a cache set."""
    def __init__(self, tag: int):
        self.tag = tag
        self.recency = 0  # 0 is most recently used

    def __repr__(self) -> str:
        return f"CacheLine(tag={self.tag:#x}, recency={self.recency})"


class CacheSet:
    """
    Represents one set of cache lines, implementing LRU replacement.

    Recency is tracked with a per-line age counter rather than an ordered
    container: a hit ages every other line by one, and a replacement ages
    every line except the victim. Appending a line to a set that still has
    room does not age the lines already resident.
    """
    def __init__(self, index: int, associativity: int):
        if associativity <= 0:
            raise ValueError("Associativity must be positive.")
        self._index = index
        self.associativity = associativity
        # Lines are only ever appended, so len(lines) is the occupancy.
        self.lines: List[CacheLine] = []

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_full(self) -> bool:
        return len(self.lines) >= self.associativity

    def __len__(self) -> int:
        return len(self.lines)

    def tags(self) -> List[int]:
        return [line.tag for line in self.lines]

    def _age_all_except(self, keep: CacheLine):
        for line in self.lines:
            if line is not keep:
                line.recency += 1

    def lookup(self, tag: int) -> Outcome:
        """Checks the set for a tag. On a hit, makes that line MRU and ages the rest."""
        for line in self.lines:
            if line.tag == tag:
                self._age_all_except(line)
                line.recency = 0
                return Outcome.HIT
        return Outcome.MISS

    def find_lru_line(self) -> CacheLine:
        """Returns the line with the largest recency; ties go to the first one."""
        victim = self.lines[0]
        for line in self.lines:
            if victim.recency < line.recency:
                victim = line
        return victim

    def insert_or_replace(self, tag: int) -> Optional[int]:
        """
        Places a tag in the set after a miss.

        Returns the evicted tag, or None if the set still had room.
        """
        if not self.is_full:
            self.lines.append(CacheLine(tag))
            return None

        victim = self.find_lru_line()
        evicted_tag = victim.tag
        self._age_all_except(victim)
        victim.tag = tag
        victim.recency = 0
        return evicted_tag
