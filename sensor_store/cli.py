"""Command-line inspection of a sample store.

The store is always opened as consumer, so the CLI can run next to a live
producer without touching its data.

Usage:
    python -m sensor_store --db sensors.db latest
    python -m sensor_store history -n 20
    python -m sensor_store stats -n 100
    python -m sensor_store export -n 1000 -o samples.csv
"""

import argparse
import logging
import sys
from typing import List, Optional

from sensor_store.config import StoreSettings, configure_logging
from sensor_store.errors import EmptyStore, SampleStoreError, StoreNotFound
from sensor_store.frames import export_csv, get_stats
from sensor_store.models import Sample, StoreMode
from sensor_store.store import SampleStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def format_sample(sample: Sample) -> str:
    """One-line rendering of a sample."""
    return (
        f"#{sample.id} {sample.timestamp}  "
        f"BMP280 {sample.bmp280_temperature:.2f} C {sample.bmp280_pressure:.2f} hPa  "
        f"HTU21D {sample.htu21d_temperature:.2f} C {sample.htu21d_humidity:.2f} %RH"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensor_store",
        description="Inspect a sensor sample store (read-only)",
    )
    parser.add_argument("--db", help="Path to the SQLite store (default: $SENSOR_DB_PATH)")
    parser.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("latest", help="Print the most recent sample")

    history = sub.add_parser("history", help="Print the last N samples, newest first")
    history.add_argument("-n", "--count", type=int, default=10)

    stats = sub.add_parser("stats", help="Summary statistics over the last N samples")
    stats.add_argument("-n", "--count", type=int, default=1000)

    export = sub.add_parser("export", help="Export the last N samples to CSV")
    export.add_argument("-n", "--count", type=int, default=1000)
    export.add_argument("-o", "--output", help="Output CSV path (default: timestamped name)")

    return parser


def _run(store: SampleStore, args: argparse.Namespace) -> int:
    if args.command == "latest":
        try:
            print(format_sample(store.read_latest()))
        except EmptyStore:
            print("No samples stored yet", file=sys.stderr)
            return EXIT_ERROR
        return EXIT_OK

    samples = store.read_last_n(args.count)

    if args.command == "history":
        for sample in samples:
            print(format_sample(sample))
    elif args.command == "stats":
        for key, value in get_stats(samples).items():
            print(f"{key}: {value}")
    elif args.command == "export":
        print(export_csv(samples, args.output))

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "count", 0) < 0:
        parser.error("--count must be >= 0")

    try:
        settings = StoreSettings.from_env()
    except SampleStoreError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    configure_logging(args.log_level or settings.log_level)
    db_path = args.db or settings.db_path

    try:
        with SampleStore.open(db_path, StoreMode.CONSUMER) as store:
            return _run(store, args)
    except StoreNotFound as e:
        print(str(e), file=sys.stderr)
        return EXIT_NOT_FOUND
    except SampleStoreError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
