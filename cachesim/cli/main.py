from __future__ import annotations
import argparse
import logging
import sys
from ..config import SimConfig
from ..errors import CacheSimError
from ..runtime.simulator import run as run_sim
from ..trace.parser import load_trace
from ..utils.logging import get_logger
from ..utils.reporting import generate_report

logger = get_logger("cachesim")


def cmd_geometry(args):
    """Handles the 'geometry' command."""
    config = SimConfig.from_args(args)
    geometry = config.geometry()

    print("--- Cache Geometry ---")
    for key, value in geometry.to_dict().items():
        print(f"  {key:<17}: {value}")
    print("----------------------")
    return 0


def cmd_run(args):
    """Handles the 'run' command."""
    # Create simulator config from args
    config = SimConfig.from_args(args)
    logging.getLogger().setLevel(config.log_level.upper())

    logger.info("Configuration: %s", config)

    # 1. Derive the geometry before touching the trace
    geometry = config.geometry()

    # 2. Parse the trace
    if not config.trace:
        raise CacheSimError("No trace file given (positional argument or 'trace' in config).")
    references = load_trace(config.trace)

    # 3. Run simulation
    enriched, totals = run_sim(references, config)

    # 4. Generate all reports
    generate_report(enriched, totals, geometry, config)

    logger.info("Simulation finished. Reports are in %s", config.report_dir)
    return 0


def _add_geometry_args(p):
    p.add_argument("cache_config", nargs='?', default=None,
                   help="Path to cache config (set size, line size, total size)")
    p.add_argument("-c", "--config", type=str, default=None,
                   help="Path to YAML config file to override defaults")
    p.add_argument("--set-size", type=int, default=None, dest="set_size",
                   help="Associativity (lines per set)")
    p.add_argument("--line-size", type=int, default=None, dest="line_size",
                   help="Cache line size in bytes")
    p.add_argument("--cache-size", type=int, default=None, dest="total_cache_size",
                   help="Total cache size in bytes")


def build_parser():
    p = argparse.ArgumentParser(
        prog="cachesim",
        description="Trace-driven set-associative LRU cache simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Geometry Command ---
    pg = sub.add_parser("geometry", help="Print the derived cache geometry",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_geometry_args(pg)
    pg.set_defaults(func=cmd_geometry)

    # --- Run Command ---
    pr = sub.add_parser("run", help="Simulate a memory trace",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_geometry_args(pr)
    pr.add_argument("trace", nargs='?', default=None,
                    help="Path to memory trace (<R|W>:<size>:<hexaddress> per line)")
    pr.add_argument("--report", type=str, default=None, dest="report_dir",
                    help="Directory to save simulation reports")
    pr.add_argument("--no-html", action="store_false", default=None, dest="html_report",
                    help="Skip the HTML access timeline")
    pr.add_argument("--log-level", type=str, default=None, dest="log_level",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="Logging verbosity")
    pr.set_defaults(func=cmd_run)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except CacheSimError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
