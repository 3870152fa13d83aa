from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence
from ..config import SimConfig
from ..core.geometry import Geometry
from ..runtime.simulator import RunningTotals
from ..trace.reference import Reference
from . import viz


def _format_rate(rate: float | None) -> str:
    """Formats a rate to 5 significant digits, or 'n/a' when undefined."""
    if rate is None:
        return "n/a"
    return f"{rate:.5g}"


def _calculate_set_stats(records: List[Dict[str, Any]]) -> Dict[int, Dict[str, int]]:
    """Per-set access, hit and miss counts."""
    set_stats: Dict[int, Dict[str, int]] = {}
    for item in records:
        stats = set_stats.setdefault(item['index'], {"accesses": 0, "hits": 0, "misses": 0})
        stats["accesses"] += 1
        if item['outcome'] == "Hit":
            stats["hits"] += 1
        else:
            stats["misses"] += 1
    return dict(sorted(set_stats.items()))


def generate_report_json(references: Sequence[Reference], totals: RunningTotals,
                         geometry: Geometry) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary from a finished simulation."""
    records = [ref.to_dict() for ref in references]
    return {
        "geometry": geometry.to_dict(),
        "summary": totals.to_dict(),
        "set_stats": _calculate_set_stats(records),
        "references": records,
    }


def format_report_table(references: Sequence[Reference], totals: RunningTotals,
                        geometry: Geometry) -> str:
    """Renders the cache summary, one row per reference, and the simulation summary."""
    lines = [
        "",
        f"Total Cache Size:  {geometry.total_cache_size}B",
        f"Line Size:  {geometry.line_size}B",
        f"Set Size:  {geometry.set_size}",
        f"Number of Sets:  {geometry.num_sets}",
        "",
        f"{'RefNum':<8}{'  R/W':<10}{'Address':<13}{'Tag':<6}{'Index':<8}{'Offset':<10}{'H/M':<8}",
        "*" * 63,
    ]
    for ref in references:
        lines.append(
            f"   {ref.sequence_number:<5}"
            f"{str(ref.operation):>5}   "
            f"  {ref.address:08x}"
            f"{ref.tag:>7x}"
            f"{ref.index:>8}"
            f"{ref.offset:>8}"
            f"{str(ref.outcome):>10}"
        )
    lines += [
        "",
        "    Simulation Summary",
        "*" * 26,
        f"Total Hits:\t{totals.total_hits}",
        f"Total Misses:\t{totals.total_misses}",
        f"Hit Rate:\t{_format_rate(totals.hit_rate)}",
        f"Miss Rate:\t{_format_rate(totals.miss_rate)}",
    ]
    return "\n".join(lines) + "\n"


def generate_report(references: Sequence[Reference], totals: RunningTotals,
                    geometry: Geometry, config: SimConfig):
    """Generates all report artifacts."""
    report_data = generate_report_json(references, totals, geometry)
    report_data["config"] = config.__dict__
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    table = format_report_table(references, totals, geometry)
    with open(output_dir / "report.txt", "w") as f:
        f.write(table)

    if config.html_report:
        viz.export_access_timeline(report_data['references'], str(output_dir / "report.html"))

    print(table)
    print(viz.export_hit_miss_ascii(report_data['references']))
    print(f"Reports generated in {output_dir.absolute()}")
