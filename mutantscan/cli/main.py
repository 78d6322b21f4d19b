"""
MutantScan CLI — classify DNA grids and report stats.

Commands:
    mutantscan detect ROW [ROW ...]     — Classify rows given inline
    mutantscan detect --file dna.json   — Classify {"dna": [...]} from a file
    mutantscan stats                    — Print counts and ratio as JSON

Exit codes for detect:
    0  mutant
    3  human
    2  invalid input
    1  internal failure (fingerprint or store)
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional

from ..domain import InvalidGridError, MutantScanError
from ..service import MutantService
from ..storage.store import RecordStore, SqliteRecordStore


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

DEFAULT_DB_PATH = "mutantscan.db"
DB_PATH_ENV_VAR = "MUTANTSCAN_DB"

EXIT_MUTANT = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_HUMAN = 3


def resolve_db_path(cli_value: Optional[str]) -> str:
    """--db wins, then $MUTANTSCAN_DB, then the default file."""
    if cli_value:
        return cli_value
    return os.environ.get(DB_PATH_ENV_VAR, DEFAULT_DB_PATH)


def open_store(args: argparse.Namespace) -> RecordStore:
    return SqliteRecordStore(resolve_db_path(getattr(args, "db", None)))


def load_rows(args: argparse.Namespace) -> Optional[list]:
    """
    Read rows from --file or the positional arguments.

    Raises:
        ValueError: If both sources are given, or the file is not a JSON
            object whose "dna" field is a list of strings (nulls allowed)
    """
    if args.file and args.rows:
        raise ValueError("give grid rows or --file, not both")

    if args.file:
        with open(args.file, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
        if not isinstance(payload, dict) or "dna" not in payload:
            raise ValueError('expected a JSON object with a "dna" field')
        rows = payload["dna"]
        if not isinstance(rows, list):
            raise ValueError('"dna" must be a list of strings')
        if not all(row is None or isinstance(row, str) for row in rows):
            raise ValueError('"dna" must contain only strings')
        return rows
    return args.rows or None


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_detect(args: argparse.Namespace) -> int:
    """Classify a grid and store the verdict."""
    try:
        rows = load_rows(args)
    except (OSError, ValueError) as e:
        print("ERROR: cannot read input")
        print(f"Reason: {e}")
        return EXIT_INVALID

    try:
        with open_store(args) as store:
            is_mutant = MutantService(store).detect(rows)
    except InvalidGridError as e:
        print(f"INVALID: {e.reason.value}")
        return EXIT_INVALID
    except MutantScanError as e:
        print("ERROR: detection failed")
        print(f"Reason: {e}")
        return EXIT_FAILURE

    if is_mutant:
        print("MUTANT")
        return EXIT_MUTANT
    print("HUMAN")
    return EXIT_HUMAN


def cmd_stats(args: argparse.Namespace) -> int:
    """Print verdict counts and ratio."""
    try:
        with open_store(args) as store:
            stats = MutantService(store).stats()
    except MutantScanError as e:
        print("ERROR: stats unavailable")
        print(f"Reason: {e}")
        return EXIT_FAILURE

    print(json.dumps(stats.to_dict()))
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="mutantscan",
        description="MutantScan — DNA mutant detection with deduplicated results",
    )
    parser.add_argument(
        "--db",
        help=f"Record store path (default: ${DB_PATH_ENV_VAR} or {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Detect command
    detect_parser = subparsers.add_parser(
        "detect",
        help="Classify a DNA grid as mutant or human",
    )
    detect_parser.add_argument(
        "rows",
        nargs="*",
        help="Grid rows, e.g. ATGC CAGT TTAT AGAC",
    )
    detect_parser.add_argument(
        "--file",
        help='JSON file containing {"dna": [...]}',
    )
    detect_parser.set_defaults(func=cmd_detect)

    # Stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show mutant/human counts and ratio",
    )
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
