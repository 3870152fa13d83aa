from __future__ import annotations
from pathlib import Path
import re
from typing import Iterable, Iterator, List

from ..errors import TraceParseError
from .reference import Operation, Reference

FIELD_SEPARATOR = ":"
COMMENT_PREFIX = "#"

SIZE_RE = re.compile(r"[0-9]+")
ADDRESS_RE = re.compile(r"(0[xX])?[0-9a-fA-F]+")


def parse_trace_line(line: str, sequence_number: int) -> Reference:
    """
    Parses one `<R|W>:<size>:<hexaddress>` trace line into a Reference.

    Raises ValueError describing the first malformed field.
    """
    fields = [f.strip() for f in line.strip().split(FIELD_SEPARATOR)]
    if len(fields) != 3:
        raise ValueError(f"expected 3 ':'-separated fields, got {len(fields)} in {line.strip()!r}")
    op_code, size_str, address_str = fields

    operation = Operation.from_code(op_code)

    if size_str.startswith("-") and SIZE_RE.fullmatch(size_str[1:]):
        raise ValueError(f"size must be non-negative, got {size_str}")
    if not SIZE_RE.fullmatch(size_str):
        raise ValueError(f"size must be a decimal integer, got {size_str!r}")
    size = int(size_str, 10)

    if address_str.startswith("-") and ADDRESS_RE.fullmatch(address_str[1:]):
        raise ValueError(f"address must be non-negative, got {address_str!r}")
    if not ADDRESS_RE.fullmatch(address_str):
        raise ValueError(f"address must be hexadecimal, got {address_str!r}")
    address = int(address_str, 16)

    return Reference(sequence_number=sequence_number, operation=operation, size=size, address=address)


def iter_trace(lines: Iterable[str]) -> Iterator[Reference]:
    """Lazily parses trace lines, numbering references in arrival order."""
    sequence_number = 0
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        try:
            ref = parse_trace_line(stripped, sequence_number)
        except ValueError as e:
            raise TraceParseError(str(e), line_number) from e
        yield ref
        sequence_number += 1


def load_trace(path: str | Path) -> List[Reference]:
    """Reads and parses a whole trace file."""
    trace_path = Path(path)
    if not trace_path.exists():
        raise TraceParseError(f"Trace file {trace_path} not found.")
    try:
        with open(trace_path, "r", encoding="utf-8") as f:
            return list(iter_trace(f))
    except (OSError, UnicodeDecodeError) as e:
        raise TraceParseError(f"Could not read trace file {trace_path}: {e}") from e
