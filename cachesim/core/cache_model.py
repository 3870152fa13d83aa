from __future__ import annotations
from typing import Dict, List

from ..errors import GeometryInvariantViolation
from ..utils.logging import get_logger
from .cache_set import CacheSet
from .geometry import Geometry, decompose
from .outcome import Outcome

logger = get_logger(__name__)


class CacheModel:
    """
    A set-associative cache with LRU replacement.

    This class only classifies accesses as hits or misses; it holds tags, not
    data, and has no notion of timing.
    """
    def __init__(self, geometry: Geometry):
        self.geometry = geometry
        self.sets: List[CacheSet] = [
            CacheSet(i, geometry.set_size) for i in range(geometry.num_sets)
        ]
        self.evictions = 0

    def _get_set(self, index: int, address: int | None = None) -> CacheSet:
        if not 0 <= index < len(self.sets):
            raise GeometryInvariantViolation(index, len(self.sets), address)
        return self.sets[index]

    def access(self, address: int) -> Outcome:
        """
        Performs one cache access: looks the address up in its set and, on a
        miss, fills it in before returning.
        """
        tag, index, _ = decompose(address, self.geometry)
        return self.access_fields(tag, index, address)

    def access_fields(self, tag: int, index: int, address: int | None = None) -> Outcome:
        """Same as `access` for an address that has already been decomposed."""
        cache_set = self._get_set(index, address)

        outcome = cache_set.lookup(tag)
        if outcome is Outcome.MISS:
            evicted = cache_set.insert_or_replace(tag)
            if evicted is not None:
                self.evictions += 1
                logger.debug("set %d: evicted tag %#x for tag %#x", index, evicted, tag)
        return outcome

    def resident_tags(self, index: int) -> List[int]:
        """Tags currently held by the set at `index`, in storage order."""
        return self._get_set(index).tags()

    def snapshot(self) -> Dict[int, List[int]]:
        """Maps every non-empty set index to its resident tags."""
        return {s.index: s.tags() for s in self.sets if len(s) > 0}
