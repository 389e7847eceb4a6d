from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from reviewflow.adapters.seed import DEFAULT_RECORD_COUNT, DEFAULT_SEED
from reviewflow.app import export_seed_file, load_records, run_simulation
from reviewflow.config import configure_logging, get_backend_config
from reviewflow.domain.queries import record_stats

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive the record approval workflow")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log individual mutations and rollbacks",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Write a generated seed file")
    seed.add_argument(
        "--count",
        type=int,
        default=DEFAULT_RECORD_COUNT,
        help="Number of records to generate (default: %(default)s)",
    )
    seed.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Random seed for reproducible data (default: %(default)s)",
    )
    seed.add_argument(
        "--output",
        type=Path,
        help="Target JSON-lines file (defaults to the data directory)",
    )

    simulate = subparsers.add_parser("simulate", help="Run a simulated review session")
    simulate.add_argument(
        "--input",
        type=Path,
        help="Seed file to load instead of generating records",
    )
    simulate.add_argument(
        "--count",
        type=int,
        default=DEFAULT_RECORD_COUNT,
        help="Number of records to generate when no input is given (default: %(default)s)",
    )
    simulate.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Random seed for data, workload and failures (default: %(default)s)",
    )
    simulate.add_argument(
        "--actions",
        type=int,
        default=100,
        help="Number of operator actions to issue (default: %(default)s)",
    )
    simulate.add_argument(
        "--batch-size",
        type=int,
        default=0,
        help="Records per batch action; every tenth action is a batch when positive",
    )
    simulate.add_argument(
        "--failure-rate",
        type=float,
        help="Override the backing call failure probability (0-1)",
    )

    stats = subparsers.add_parser("stats", help="Show status counts of a record set")
    stats.add_argument(
        "--input",
        type=Path,
        help="Seed file to inspect instead of generating records",
    )
    stats.add_argument("--count", type=int, default=DEFAULT_RECORD_COUNT)
    stats.add_argument("--seed", type=int, default=DEFAULT_SEED)

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if getattr(args, "count", 0) < 0:
        raise ValueError("--count must be non-negative")
    if getattr(args, "actions", 0) < 0:
        raise ValueError("--actions must be non-negative")
    if getattr(args, "batch_size", 0) < 0:
        raise ValueError("--batch-size must be non-negative")
    failure_rate = getattr(args, "failure_rate", None)
    if failure_rate is not None and not 0.0 <= failure_rate <= 1.0:
        raise ValueError("--failure-rate must be between 0 and 1")


def _log_stats(title: str, by_status: dict[str, int], total: int) -> None:
    counts = ", ".join(f"{status}={count}" for status, count in by_status.items())
    log.info("%s: total=%s, %s", title, total, counts)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "seed":
            path = export_seed_file(
                parsed_args.output,
                count=parsed_args.count,
                seed=parsed_args.seed,
            )
            log.info("Seed file written to %s", path)
        elif parsed_args.command == "simulate":
            backend_config = get_backend_config()
            if parsed_args.failure_rate is not None:
                backend_config = replace(backend_config, failure_rate=parsed_args.failure_rate)
            result = run_simulation(
                records=load_records(
                    parsed_args.input,
                    count=parsed_args.count,
                    seed=parsed_args.seed,
                ),
                actions=parsed_args.actions,
                batch_size=parsed_args.batch_size,
                seed=parsed_args.seed,
                backend_config=backend_config,
            )
            if result.store_stats is not None:
                _log_stats(
                    "Client store",
                    dict(result.store_stats.by_status),
                    result.store_stats.total,
                )
        elif parsed_args.command == "stats":
            stats = record_stats(
                load_records(parsed_args.input, count=parsed_args.count, seed=parsed_args.seed)
            )
            _log_stats("Records", dict(stats.by_status), stats.total)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
