#!/usr/bin/env python3
"""Decode a ZIM archive and write its index to a DuckDB catalog.

Usage:
    python3 scripts/build_archive_catalog.py --zim wikipedia.zim \
      --output catalogs/wikipedia.duckdb

    # Skip dirents that fail to decode instead of aborting
    python3 scripts/build_archive_catalog.py --zim broken.zim \
      --output catalogs/broken.duckdb --tolerant -v
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from zimdecode.archive import ArchiveFile
from zimdecode.catalog import write_catalog
from zimdecode.config import DecoderOptions
from zimdecode.errors import ZimError
from zimdecode.io_utils import dump_json

log = logging.getLogger("build_archive_catalog")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Decode a ZIM archive and write its index to a DuckDB catalog."
    )
    parser.add_argument("--zim", required=True, type=Path, help="Path to the .zim file")
    parser.add_argument(
        "--output", required=True, type=Path, help="Catalog path (.duckdb); replaced if present"
    )
    parser.add_argument(
        "--options",
        type=Path,
        default=None,
        help="JSON file with decoder options",
    )
    parser.add_argument(
        "--tolerant",
        action="store_true",
        help="Skip dirents that fail to decode (logged as warnings).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main() -> None:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        options = DecoderOptions.from_json(args.options) if args.options else None
    except (OSError, ValueError) as exc:
        print(f"Error: invalid options file {args.options}: {exc}", file=sys.stderr)
        sys.exit(1)

    t0 = time.monotonic()
    try:
        with ArchiveFile(args.zim, options) as zf:
            stats = write_catalog(zf.archive, zf.source, args.output, tolerant=args.tolerant)
    except (ZimError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    elapsed = time.monotonic() - t0
    log.info("Catalog build finished in %.2fs", elapsed)
    dump_json({
        "zim": str(args.zim),
        "output": str(args.output),
        "dirents_written": stats.dirents_written,
        "dirents_failed": stats.dirents_failed,
        "elapsed_sec": round(elapsed, 3),
    })


if __name__ == "__main__":
    main()
