#!/usr/bin/env python3
"""
===============================================================================
PERFNOTES - BENCHMARK ENTRY POINT
===============================================================================
Runs the naive-vs-optimized demonstrations and writes CSV tables, plots and
an optional Markdown report.

USAGE:
    perfnotes                              # All scenarios, config defaults
    perfnotes --quick                      # Reduced sizes (smoke run)
    perfnotes --scenario memoization       # Single scenario (repeatable)
    perfnotes --config my.yaml --report    # Custom config + report.md

OUTPUTS (in --output-dir, default benchmark_results/):
    <scenario>.csv          - Full timing statistics per scenario
    summary.csv             - Naive mean / optimized mean / speedup
    speedup_bar.png         - Speedup per scenario
    timing_comparison.png   - Naive vs optimized mean time
    report.md               - Markdown summary (with --report)
===============================================================================
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import replace
from datetime import datetime

import numpy as np

from .config import SCENARIOS, load_config
from .errors import ConfigError
from .suite import generate_report, run_all

logger = logging.getLogger("perfnotes")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='perfnotes',
        description='Naive vs optimized benchmarks for efficient numerical Python',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  perfnotes                                  All scenarios
  perfnotes --quick                          Quick smoke run
  perfnotes --scenario vectorization         One scenario
  perfnotes --runs 50 --report               More repetitions + report.md
        """
    )

    parser.add_argument('--config', type=str, default=None,
                        help='Path to benchmark config YAML')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for CSVs, plots and report')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (overrides config)')
    parser.add_argument('--runs', type=int, default=None,
                        help='Timed repetitions per implementation')
    parser.add_argument('--scenario', action='append', choices=SCENARIOS,
                        default=None, help='Run only this scenario (repeatable)')
    parser.add_argument('--quick', action='store_true',
                        help='Quick mode (reduced sizes)')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip the matplotlib charts')
    parser.add_argument('--report', action='store_true',
                        help='Write a Markdown report')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    return parser


def main(argv=None) -> int:
    """
    Main entry point. Parses command line arguments and runs the requested
    scenarios.  Returns the process exit status.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.config)
        overrides = {}
        if args.output_dir is not None:
            overrides['output_dir'] = args.output_dir
        if args.seed is not None:
            overrides['seed'] = args.seed
        if args.runs is not None:
            overrides['num_runs'] = args.runs
        if args.scenario:
            overrides['scenarios'] = list(dict.fromkeys(args.scenario))
        config = replace(config, **overrides)
        if args.quick:
            logger.info("Quick mode: reduced problem sizes")
            config = config.quick()
        config.validate()
    except ConfigError as exc:
        logger.error(f"Configuration error: {exc}")
        return 2

    print("=" * 70)
    print("  PERFNOTES BENCHMARKS")
    print("=" * 70)
    print(f"  Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Random seed: {config.seed}")
    print(f"  Scenarios: {', '.join(config.scenarios)}")
    print("=" * 70)

    np.random.seed(config.seed)

    start = time.time()
    run_all(config, plots=not args.no_plots)
    if args.report:
        generate_report(config.output_dir)

    total_time = time.time() - start
    print("\n" + "=" * 70)
    print(f"  Total wall time: {total_time:.1f} seconds")
    print(f"  Outputs saved to: {os.path.abspath(config.output_dir)}")
    print("=" * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
