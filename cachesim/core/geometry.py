from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from ..errors import ConfigError


def is_power_of_two(n: int) -> bool:
    return (n > 0) and (n & (n - 1) == 0)


def _exact_log2(n: int) -> int:
    """log2 of a power of two. Callers validate `n` first."""
    return n.bit_length() - 1


@dataclass(frozen=True)
class Geometry:
    """Derived cache geometry. Built by `compute_geometry`, never mutated."""
    total_cache_size: int
    line_size: int
    set_size: int
    num_sets: int
    offset_bits: int
    index_bits: int
    tag_bits: int
    offset_mask: int
    index_mask: int
    tag_mask: int

    @property
    def num_lines(self) -> int:
        return self.num_sets * self.set_size

    @property
    def tag_shift(self) -> int:
        return self.index_bits + self.offset_bits

    def to_dict(self) -> dict:
        return {
            "total_cache_size": self.total_cache_size,
            "line_size": self.line_size,
            "set_size": self.set_size,
            "num_sets": self.num_sets,
            "offset_bits": self.offset_bits,
            "index_bits": self.index_bits,
            "tag_bits": self.tag_bits,
            "offset_mask": hex(self.offset_mask),
            "index_mask": hex(self.index_mask),
            "tag_mask": hex(self.tag_mask),
        }


def compute_geometry(total_cache_size: int, line_size: int, set_size: int) -> Geometry:
    """
    Derives the set count, field widths and masks of a cache.

    Raises ConfigError for any geometry whose fields would not partition an
    address exactly: non-positive inputs, a line size or set count that is not
    a power of two, or sizes that do not divide evenly.
    """
    for name, value in (("Total cache size", total_cache_size),
                        ("Line size", line_size),
                        ("Set size", set_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{name} must be an integer, got {value!r}.")
        if not value > 0:
            raise ConfigError(f"{name} must be positive, got {value}.")

    if not is_power_of_two(line_size):
        raise ConfigError(f"Line size must be a power of two, got {line_size}.")
    if total_cache_size % line_size != 0:
        raise ConfigError(
            f"Total cache size {total_cache_size} is not a multiple of line size {line_size}.")

    num_lines = total_cache_size // line_size
    if num_lines % set_size != 0:
        raise ConfigError(
            f"Number of lines {num_lines} is not a multiple of set size {set_size}.")

    num_sets = num_lines // set_size
    if not is_power_of_two(num_sets):
        raise ConfigError(f"Number of sets must be a power of two, got {num_sets}.")

    offset_bits = _exact_log2(line_size)
    index_bits = _exact_log2(num_sets)
    tag_bits = line_size * 8 - index_bits - offset_bits
    if tag_bits < 0:
        raise ConfigError(
            f"Index and offset fields ({index_bits + offset_bits} bits) "
            f"exceed the {line_size * 8}-bit address width.")

    offset_mask = (1 << offset_bits) - 1
    index_mask = ((1 << (index_bits + offset_bits)) - 1) ^ offset_mask
    tag_mask = ((1 << (line_size * 8)) - 1) ^ index_mask ^ offset_mask

    return Geometry(
        total_cache_size=total_cache_size,
        line_size=line_size,
        set_size=set_size,
        num_sets=num_sets,
        offset_bits=offset_bits,
        index_bits=index_bits,
        tag_bits=tag_bits,
        offset_mask=offset_mask,
        index_mask=index_mask,
        tag_mask=tag_mask,
    )


def decompose(address: int, geometry: Geometry) -> Tuple[int, int, int]:
    """Decomposes an address into tag, index, and offset."""
    if address < 0:
        raise ValueError(f"Address must be non-negative, got {address}.")
    offset = address & geometry.offset_mask
    index = (address & geometry.index_mask) >> geometry.offset_bits
    tag = address >> geometry.tag_shift
    return tag, index, offset


def compose(tag: int, index: int, offset: int, geometry: Geometry) -> int:
    """Reconstructs an address from its tag, index, and offset fields."""
    return (tag << geometry.tag_shift) | (index << geometry.offset_bits) | offset
