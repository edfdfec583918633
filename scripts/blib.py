#!/usr/bin/env python3
"""
blib command line tool

Runs the structural diff, the SQL template builders and the date normalizer
on files or values from the shell, printing JSON to stdout.

Usage:
    ./scripts/blib.py diff old.yaml new.yaml
    ./scripts/blib.py diff old.json new.json --loose
    ./scripts/blib.py insert --table users --data row.json
    ./scripts/blib.py update --table users --data changes.yaml --criteria key.yaml
    ./scripts/blib.py date 31/12/2023
    ./scripts/blib.py date "31/12/2023 10:00" --datetime --midnight

Environment:
    BLIB_LOG_LEVEL: Log level (default INFO)
    JSON_LOGGING: "true" for JSON log lines on stderr
    BLIB_CORRELATION_ID: Correlation ID for this run (default: fresh UUID4)
"""

import os
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import yaml

from src.arrays import diff
from src.sql import build_insert, build_update, normalize_date, SqlBuildError
from src.utils.correlation import CorrelationContext
from src.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def load_document(path: str) -> Any:
    """
    Load a JSON or YAML document.

    Files ending in .json are read as JSON, anything else as YAML.
    """
    file_path = Path(path)
    with open(file_path, 'r') as f:
        if file_path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Structural diff and SQL template helpers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    diff_parser = subparsers.add_parser("diff", help="Show values of OLD that differ in NEW")
    diff_parser.add_argument("old", help="Old document (JSON or YAML)")
    diff_parser.add_argument("new", help="New document (JSON or YAML)")
    diff_parser.add_argument("--loose", action="store_true", help="Coercive equality ('5' == 5)")

    insert_parser = subparsers.add_parser("insert", help="Build an INSERT template")
    insert_parser.add_argument("--table", required=True, help="Table name")
    insert_parser.add_argument("--data", required=True, help="Column values (JSON or YAML)")

    update_parser = subparsers.add_parser("update", help="Build an UPDATE template")
    update_parser.add_argument("--table", required=True, help="Table name")
    update_parser.add_argument("--data", required=True, help="Column values (JSON or YAML)")
    update_parser.add_argument("--criteria", required=True, help="WHERE values (JSON or YAML)")

    date_parser = subparsers.add_parser("date", help="Normalize a date string to SQL format")
    date_parser.add_argument("value", help="Date string, e.g. 31/12/2023")
    date_parser.add_argument("--datetime", action="store_true", help="Return YYYY-MM-DD HH:MM:SS")
    date_parser.add_argument(
        "--midnight",
        action="store_true",
        help="Pad missing time with 00:00:00 instead of the current time"
    )

    return parser


def run_command(args: argparse.Namespace) -> Any:
    if args.command == "diff":
        return diff(load_document(args.old), load_document(args.new), loose_equality=args.loose)

    if args.command == "insert":
        return build_insert(args.table, load_document(args.data) or {}).as_dict()

    if args.command == "update":
        return build_update(
            args.table,
            load_document(args.data) or {},
            load_document(args.criteria) or {}
        ).as_dict()

    if args.command == "date":
        return normalize_date(
            args.value,
            preset_now=not args.midnight,
            is_datetime=args.datetime
        )

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else None, loggers=(__name__,))

    if not args.command:
        parser.print_help()
        return 1

    with CorrelationContext(os.getenv("BLIB_CORRELATION_ID") or None):
        try:
            result = run_command(args)
        except SqlBuildError as e:
            logger.error(f"Error: {e}")
            return 1
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Cannot read input: {e}", exc_info=args.verbose)
            return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
