from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from ..config import SimConfig
from ..core.cache_model import CacheModel
from ..core.geometry import Geometry, decompose
from ..core.outcome import Outcome
from ..errors import ReferenceStateError
from ..trace.reference import Reference
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunningTotals:
    """Hit/miss counters. Each `record` returns the totals after one more reference."""
    total_accesses: int = 0
    total_hits: int = 0
    total_misses: int = 0
    evictions: int = 0

    def record(self, outcome: Outcome) -> RunningTotals:
        if outcome is Outcome.HIT:
            return replace(self, total_accesses=self.total_accesses + 1,
                           total_hits=self.total_hits + 1)
        return replace(self, total_accesses=self.total_accesses + 1,
                       total_misses=self.total_misses + 1)

    @property
    def hit_rate(self) -> Optional[float]:
        """Fraction of accesses that hit, or None before any access."""
        if self.total_accesses == 0:
            return None
        return self.total_hits / self.total_accesses

    @property
    def miss_rate(self) -> Optional[float]:
        if self.total_accesses == 0:
            return None
        return self.total_misses / self.total_accesses

    def to_dict(self):
        return {
            "total_accesses": self.total_accesses,
            "total_hits": self.total_hits,
            "total_misses": self.total_misses,
            "evictions": self.evictions,
            "hit_rate": self.hit_rate,
            "miss_rate": self.miss_rate,
        }


class SimulationEngine:
    """Replays a reference stream against a fresh cache model."""

    def __init__(self, geometry: Geometry):
        self.geometry = geometry
        self.cache: CacheModel | None = None

    def run(self, references: Iterable[Reference]) -> Tuple[Tuple[Reference, ...], RunningTotals]:
        """
        Simulates every reference in arrival order.

        Each reference is enriched with its tag, index, offset and outcome.
        Returns the enriched references and the final totals. The cache state
        of the run stays available as `self.cache` for inspection.
        """
        self.cache = CacheModel(self.geometry)
        totals = RunningTotals()
        enriched: List[Reference] = []

        for ref in references:
            if ref.is_enriched:
                raise ReferenceStateError(
                    f"Reference {ref.sequence_number} has already been simulated.")
            tag, index, offset = decompose(ref.address, self.geometry)
            outcome = self.cache.access_fields(tag, index, ref.address)
            ref.enrich(tag, index, offset, outcome)
            totals = totals.record(outcome)
            enriched.append(ref)
            logger.debug("#%d %s %#x -> tag=%#x index=%d offset=%d %s",
                         ref.sequence_number, ref.operation, ref.address,
                         tag, index, offset, outcome)

        totals = replace(totals, evictions=self.cache.evictions)
        logger.info("Simulated %d references: %d hits, %d misses",
                    totals.total_accesses, totals.total_hits, totals.total_misses)
        return tuple(enriched), totals


def run(references: Iterable[Reference], config: SimConfig) -> Tuple[Tuple[Reference, ...], RunningTotals]:
    """
    Runs the simulation for a reference stream and configuration.

    This is the main entry point for the runtime: it derives the geometry
    from the SimConfig (raising ConfigError before any reference is touched)
    and replays the trace.
    """
    geometry = config.geometry()
    logger.info("Running simulation: %d sets, %d-way, %dB lines",
                geometry.num_sets, geometry.set_size, geometry.line_size)
    engine = SimulationEngine(geometry)
    return engine.run(references)
