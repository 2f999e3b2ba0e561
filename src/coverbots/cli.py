"""coverbots: solve coverage arenas from a contest directory.

Usage:
    coverbots run --id 21
    coverbots run-all --start 1 --end 300 --workers 8
    coverbots -vv test-run --id 21
    coverbots report
    coverbots update-best

Solver tunables can be passed as a config URI:
    coverbots --config "coverbots://solver?near_horizon=3&far_ability_kinds=BC" run --id 5
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from coverbots.errors import CoverbotsError
from coverbots.runner import LAST_ARENA_ID, Library, report, run, run_all, test_run, update_best
from coverbots.solver.config import SolverConfig, parse_config_uri


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coverbots", description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Debug trace level (-v, -vv)")
    parser.add_argument("--contest-dir", default=None, help="Contest directory (default: $COVERBOTS_CONTEST_DIR or ./contest)")
    parser.add_argument("--config", default=None, help="Solver config URI, e.g. coverbots://solver?near_horizon=3")

    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Solve one arena and record the solution")
    p_run.add_argument("--id", type=int, default=0, help="Arena id")

    p_all = sub.add_parser("run-all", help="Solve a range of arenas in parallel")
    p_all.add_argument("--start", type=int, default=1, help="First arena id")
    p_all.add_argument("--end", type=int, default=LAST_ARENA_ID, help="Last arena id (inclusive)")
    p_all.add_argument("--workers", type=int, default=None, help="Worker processes (default: CPU count)")

    p_test = sub.add_parser("test-run", help="Solve one arena into testrun/ only")
    p_test.add_argument("--id", type=int, default=0, help="Arena id")

    p_report = sub.add_parser("report", help="Compare lastrun and submit scores with the best ones")
    p_report.add_argument("--start", type=int, default=1)
    p_report.add_argument("--end", type=int, default=LAST_ARENA_ID)

    p_best = sub.add_parser("update-best", help="Promote better submissions into best/")
    p_best.add_argument("--start", type=int, default=1)
    p_best.add_argument("--end", type=int, default=LAST_ARENA_ID)

    return parser


def _config(args: argparse.Namespace) -> SolverConfig:
    config = parse_config_uri(args.config) if args.config else SolverConfig()
    if args.verbose:
        config.debug = max(config.debug, args.verbose)
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    library = Library.from_env(args.contest_dir)

    try:
        config = _config(args)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        if args.command == "run":
            run(args.id, library, config)
        elif args.command == "test-run":
            test_run(args.id, library, config)
        elif args.command == "run-all":
            result = run_all(range(args.start, args.end + 1), library, args.workers, config)
            return 0 if result.ok else 1
        elif args.command == "report":
            report(library, range(args.start, args.end + 1))
        elif args.command == "update-best":
            updated = update_best(library, range(args.start, args.end + 1))
            print(f"Updated {len(updated)} best solution(s)")
    except (CoverbotsError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
