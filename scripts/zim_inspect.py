#!/usr/bin/env python3
"""Print the decoded layout of a ZIM archive as JSON.

Shows the header, MIME list, cluster pointers and decoded clusters, and
optionally a range of dirents decoded on demand.

Usage:
    # Header, MIME list and cluster summary
    python3 scripts/zim_inspect.py --zim wikipedia.zim

    # Also decode the first 20 dirents, skipping any that fail
    python3 scripts/zim_inspect.py --zim wikipedia.zim --dirents 20 --tolerant

    # Only the header
    python3 scripts/zim_inspect.py --zim wikipedia.zim --header-only
"""
from __future__ import annotations

import argparse
import itertools
import logging
import sys
from pathlib import Path
from typing import Any

from zimdecode.archive import Archive, ArchiveFile
from zimdecode.config import DecoderOptions
from zimdecode.errors import ZimError
from zimdecode.io_utils import dump_json, to_jsonable
from zimdecode.types import Err, Ok

log = logging.getLogger("zim_inspect")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print the decoded layout of a ZIM archive as JSON."
    )
    parser.add_argument("--zim", required=True, type=Path, help="Path to the .zim file")
    parser.add_argument(
        "--options",
        type=Path,
        default=None,
        help="JSON file with decoder options (max_blobs, mime_list_warn_bytes, decode_clusters)",
    )
    parser.add_argument(
        "--header-only",
        action="store_true",
        help="Print only the decoded header.",
    )
    parser.add_argument(
        "--dirents",
        type=int,
        default=0,
        help="Decode and print the first N dirents (default: 0)",
    )
    parser.add_argument(
        "--tolerant",
        action="store_true",
        help="Report dirents that fail to decode instead of aborting.",
    )
    parser.add_argument(
        "--no-clusters",
        action="store_true",
        help="Omit per-cluster details from the output.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def summarize_archive(archive: Archive, *, include_clusters: bool = True) -> dict[str, Any]:
    """Build the JSON payload for an archive (without dirents)."""
    out: dict[str, Any] = {
        "header": to_jsonable(archive.header),
        "mime_types": list(archive.mime_types),
        "cluster_count": len(archive.cluster_pointers),
        "article_count": archive.article_count,
        "deferred_clusters": sum(1 for c in archive.clusters if c.offset_table_deferred),
    }
    if include_clusters:
        out["clusters"] = [
            {"pointer": pointer, **to_jsonable(cluster)}
            for pointer, cluster in zip(archive.cluster_pointers, archive.clusters)
        ]
    return out


def collect_dirents(zf: ArchiveFile, limit: int, *, tolerant: bool) -> list[dict[str, Any]]:
    """Decode up to ``limit`` dirents into JSON rows."""
    rows: list[dict[str, Any]] = []
    count = min(limit, zf.archive.article_count)
    if tolerant:
        for index, result in itertools.islice(zf.scan_dirents(), count):
            match result:
                case Ok(value=dirent):
                    rows.append({"index": index, **to_jsonable(dirent)})
                case Err(error=exc):
                    rows.append({"index": index, "error": str(exc)})
        return rows
    for index in range(count):
        rows.append({"index": index, **to_jsonable(zf.dirent(index))})
    return rows


def main() -> None:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if args.dirents < 0:
        print("Error: --dirents must be >= 0", file=sys.stderr)
        sys.exit(1)

    try:
        options = DecoderOptions.from_json(args.options) if args.options else None
    except (OSError, ValueError) as exc:
        print(f"Error: invalid options file {args.options}: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        with ArchiveFile(args.zim, options) as zf:
            if args.header_only:
                dump_json(zf.archive.header)
                return
            payload = summarize_archive(zf.archive, include_clusters=not args.no_clusters)
            if args.dirents:
                payload["dirents"] = collect_dirents(zf, args.dirents, tolerant=args.tolerant)
    except (ZimError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    dump_json(payload)


if __name__ == "__main__":
    main()
