"""CLI entry point."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from .config import SOURCES, Config
from .generate import generate
from .logging_config import configure_logging
from .lookup import AirportLookup


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Airport lookup unit generator")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--data-dir", dest="data_dir", help="Folder holding generated units")
    commands = parser.add_subparsers(dest="command", required=True)

    # SUPPRESS keeps a top-level --data-dir when the subcommand omits it
    data_dir = argparse.ArgumentParser(add_help=False)
    data_dir.add_argument("--data-dir", dest="data_dir", default=argparse.SUPPRESS,
                          help="Folder holding generated units")

    gen = commands.add_parser("generate", parents=[data_dir], help="Build units from airport records")
    gen.add_argument("--csv", dest="csv_path", help="OurAirports-style CSV file")
    gen.add_argument("--source", choices=SOURCES, help="Record provider")
    gen.add_argument("--country", help="Only keep airports in this ISO country")

    lookup = commands.add_parser("lookup", parents=[data_dir], help="Print the airport for a code")
    lookup.add_argument("code")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    config = Config.from_env()
    overrides = {}
    if args.data_dir:
        overrides["output_path"] = Path(args.data_dir)
    if getattr(args, "csv_path", None):
        overrides["csv_path"] = Path(args.csv_path)
    if getattr(args, "source", None):
        overrides["source"] = args.source
    if getattr(args, "country", None):
        overrides["country"] = args.country.upper()
    return replace(config, **overrides)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)
    config = config_from_args(args)

    if args.command == "generate":
        generate(config)
        return 0

    airport = asyncio.run(AirportLookup.from_directory(config.output_path).lookup_record(args.code))
    if airport is None:
        print(f"{args.code}: not found", file=sys.stderr)
        return 1
    print(json.dumps(airport.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
