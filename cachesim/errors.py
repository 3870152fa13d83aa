from __future__ import annotations


class CacheSimError(Exception):
    """Base class for all simulator errors."""


class ConfigError(CacheSimError, ValueError):
    """Invalid cache geometry or an unreadable configuration."""


class GeometryInvariantViolation(CacheSimError, RuntimeError):
    """A decomposed set index fell outside the cache's set array."""

    def __init__(self, index: int, num_sets: int, address: int | None = None):
        source = f"Address {address:#x} decomposed to set index" if address is not None else "Set index"
        super().__init__(f"{source} {index} outside [0, {num_sets}).")
        self.address = address
        self.index = index
        self.num_sets = num_sets


class TraceParseError(CacheSimError, ValueError):
    """A malformed memory trace line."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ReferenceStateError(CacheSimError, RuntimeError):
    """A reference was handed to the simulator after it had already been simulated."""
