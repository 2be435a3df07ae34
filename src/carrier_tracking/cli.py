# src/carrier_tracking/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config.env import load_env
from .config.logging_config import get_logger
from .errors import TrackingError, UnsupportedCarrierError
from .io.paths import derive_output_paths


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="carrier-tracking",
        description="Track UPS, FedEx and USPS packages through one normalized interface.",
    )
    p.add_argument("tracking_numbers", nargs="*",
                   help="Tracking numbers to look up (printed as JSON).")
    p.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Workbook (.xlsx) or .csv with a 'Tracking Number' column; "
             "writes <name>_tracked.xlsx next to it.",
    )
    p.add_argument(
        "--history",
        type=Path,
        default=None,
        help="JSON history file; enables serving fresh (2h) results from history.",
    )
    p.add_argument("--user", default="local",
                   help="User id recorded in the history file. Default: local")
    p.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Explicit .env file with carrier credentials (default: nearest .env).",
    )
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains when --input is used).",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO",
    )
    return p


def _build_tracker(args, logger):
    # Lazy imports to keep --help fast
    from .services.registry import CarrierRegistry
    from .services.resolver import TrackingResolver

    registry = CarrierRegistry(logger=logger.getChild("registry"))
    resolver = TrackingResolver(registry, logger=logger.getChild("resolver"))
    if args.history is None:
        return lambda tn: resolver.track(tn)

    from .services.history import CachedTracker, TrackingHistoryStore

    cached = CachedTracker(resolver, TrackingHistoryStore(args.history),
                           logger=logger.getChild("history"))
    logger.info("History enabled: %s", args.history)
    return lambda tn: cached.track(tn, args.user)


def _track_numbers(track, numbers: List[str]) -> int:
    code = 0
    for raw in numbers:
        try:
            info = track(raw)
        except UnsupportedCarrierError as e:
            print(f"error: {e}", file=sys.stderr)
            code = 2
            continue
        print(json.dumps(info.to_dict(), ensure_ascii=False, indent=2))
    return code


def _track_workbook(track, input_path: Path, output_path: Path, logger) -> int:
    from .io.workbook import read_tracking_numbers, result_row, unsupported_row, write_results

    numbers = read_tracking_numbers(input_path)
    logger.info("Read %d tracking number(s) from %s", len(numbers), input_path)

    rows = []
    for tn in numbers:
        try:
            rows.append(result_row(track(tn)))
        except UnsupportedCarrierError as e:
            logger.warning("%s", e)
            rows.append(unsupported_row(tn))
    write_results(rows, output_path)
    logger.info("Tracked output: %s", output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.tracking_numbers and args.input is None:
        print("error: give tracking numbers or --input", file=sys.stderr)
        return 2

    tracked_path = log_path = None
    if args.input is not None:
        try:
            tracked_path, log_path = derive_output_paths(args.input)
        except FileNotFoundError:
            print(f"error: input file not found: {args.input}", file=sys.stderr)
            return 2

    logger = get_logger(
        "carrier_tracking",
        level=args.log_level,
        console=not args.no_console,
        log_file=log_path,
    )
    logger.debug("Logger initialized.")

    # Credentials are read from the process env; .env values never override it.
    load_env(args.dotenv, override=False)

    track = _build_tracker(args, logger)

    code = 0
    try:
        if args.tracking_numbers:
            code = _track_numbers(track, args.tracking_numbers)
        if args.input is not None:
            code = max(code, _track_workbook(track, args.input, tracked_path, logger))
    except ValueError as e:
        logger.error("Invalid input: %s", e)
        return 2
    except TrackingError as e:
        logger.error("Tracking failed: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected failure: %s", e)
        return 1

    logger.info("Done.")
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
