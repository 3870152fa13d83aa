from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..core.outcome import Outcome
from ..errors import ReferenceStateError


class Operation(str, Enum):
    """Memory operation recorded in a trace."""

    READ = "Read"
    WRITE = "Write"

    @classmethod
    def from_code(cls, code: str) -> Operation:
        """Maps a trace operation code ('R' or 'W') to an Operation."""
        codes = {"R": cls.READ, "W": cls.WRITE}
        try:
            return codes[code.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown operation code: {code!r}") from None

    def __str__(self) -> str:
        return self.value


@dataclass
class Reference:
    """A single memory reference from a trace, enriched once by the simulator."""
    sequence_number: int
    operation: Operation
    size: int
    address: int

    # Filled in by `enrich`
    tag: Optional[int] = None
    index: Optional[int] = None
    offset: Optional[int] = None
    outcome: Optional[Outcome] = None

    @property
    def is_enriched(self) -> bool:
        return self.outcome is not None

    def enrich(self, tag: int, index: int, offset: int, outcome: Outcome):
        """Records the decomposition and outcome of this reference."""
        if self.is_enriched:
            raise ReferenceStateError(f"Reference {self.sequence_number} has already been simulated.")
        self.tag = tag
        self.index = index
        self.offset = offset
        self.outcome = outcome

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence_number": self.sequence_number,
            "operation": str(self.operation),
            "size": self.size,
            "address": self.address,
            "tag": self.tag,
            "index": self.index,
            "offset": self.offset,
            "outcome": str(self.outcome) if self.outcome is not None else None,
        }
