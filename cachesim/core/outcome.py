from enum import Enum


class Outcome(str, Enum):
    """Result of a single cache access."""

    HIT = "Hit"
    MISS = "Miss"

    def __str__(self) -> str:
        return self.value
