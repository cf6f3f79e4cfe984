from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import build_run_config
from .errors import CompareError
from .process import CommandRunner
from .runner import ComparisonRunner, RunReport
from .toolchain import DEFAULT_TOOLCHAIN, TOOLCHAINS


logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revision-bench",
        description=(
            "Build two revisions of a library checkout in turn and run a test or "
            "benchmark program against each"
        ),
    )
    # Required options are checked by build_run_config so that every missing
    # one is reported together.
    parser.add_argument("--workdir", type=Path, help="version-control checkout root")
    parser.add_argument("--program", type=Path, help="program to run against each build")
    parser.add_argument("--before", help="revision to check out first")
    parser.add_argument("--after", help="revision to check out second")
    parser.add_argument("--tests-only", action="store_true")
    parser.add_argument("--benchmarks-only", action="store_true")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="echo program command lines and forward --verbose to the program",
    )
    parser.add_argument("--toolchain", choices=sorted(TOOLCHAINS), default=DEFAULT_TOOLCHAIN)
    parser.add_argument("--perl", default="perl", help="interpreter for configure and the program")
    parser.add_argument("--timeout-seconds", type=float, default=None)
    parser.add_argument("--dry-run", action="store_true", help="print the commands without running them")
    parser.add_argument("--summary-json", type=Path, default=None)
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    return parser


def configure_logging(level: str | None, verbose: bool) -> None:
    chosen = level or ("INFO" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, chosen),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def write_summary(report: RunReport, path: Path | str) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(
        json.dumps(report.to_dict(), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def main(argv: list[str] | None = None, *, command_runner: CommandRunner | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.verbose)

    try:
        config = build_run_config(
            workdir=args.workdir,
            program=args.program,
            before=args.before,
            after=args.after,
            tests_only=args.tests_only,
            benchmarks_only=args.benchmarks_only,
            verbose=args.verbose,
            toolchain=args.toolchain,
            perl=args.perl,
            timeout_seconds=args.timeout_seconds,
            dry_run=args.dry_run,
        )
    except CompareError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return exc.exit_code

    runner = ComparisonRunner(config, runner=command_runner)
    if config.dry_run:
        for planned in runner.plan():
            print(planned.describe())
        return 0

    try:
        report = runner.run()
    except CompareError as exc:
        logger.debug("run aborted", exc_info=True)
        print(f"error: {exc.message}", file=sys.stderr)
        if args.summary_json is not None:
            try:
                write_summary(runner.report, args.summary_json)
            except OSError as write_exc:
                print(f"error: cannot write summary {args.summary_json}: {write_exc}", file=sys.stderr)
        return exc.exit_code

    if args.summary_json is not None:
        write_summary(report, args.summary_json)
        print(str(args.summary_json))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
