"""Whole-archive assembly and on-demand dirent access.

Decoding order is fixed because the header supplies every later offset:

  header → MIME list → cluster pointer table → each cluster → dirent pointer table

Dirents are not decoded eagerly; callers read them by index against a source
that is still open (``ArchiveFile`` keeps one around).
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from zimdecode.cluster import Cluster, parse_cluster
from zimdecode.config import DEFAULT_OPTIONS, DecoderOptions
from zimdecode.dirent import ContentPayload, Dirent, read_dirent_at
from zimdecode.errors import ArchiveNotFoundError, ZimError
from zimdecode.header import Header, parse_header
from zimdecode.mime import parse_mime_list
from zimdecode.pointers import read_pointer_table
from zimdecode.reader import seek_to
from zimdecode.types import Err, Ok, Result

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Archive:
    """Fully decoded archive index. ``clusters`` is aligned with ``cluster_pointers``."""

    header: Header
    mime_types: tuple[str, ...]
    cluster_pointers: tuple[int, ...]
    clusters: tuple[Cluster, ...]
    dirent_pointers: tuple[int, ...]

    @property
    def article_count(self) -> int:
        return len(self.dirent_pointers)

    def read_dirent(self, source: BinaryIO, index: int) -> Dirent:
        """Decode dirent ``index`` via the dirent pointer table."""
        if not 0 <= index < len(self.dirent_pointers):
            raise IndexError(
                f"Dirent index {index} out of range (0..{len(self.dirent_pointers) - 1})"
            )
        return read_dirent_at(source, self.dirent_pointers[index])

    def iter_dirents(self, source: BinaryIO) -> Iterator[Dirent]:
        """Decode every dirent in pointer-table order; stops at the first error."""
        for pointer in self.dirent_pointers:
            yield read_dirent_at(source, pointer)

    def main_page_dirent(self, source: BinaryIO) -> Dirent | None:
        if not self.header.has_main_page:
            return None
        return self.read_dirent(source, self.header.main_page)

    def mime_type_for(self, dirent: Dirent) -> str:
        """Resolve a content dirent's mime-type code against the MIME list."""
        if not dirent.is_article():
            raise LookupError(f"{dirent.kind.value} dirent has no MIME type")
        if dirent.mime_type >= len(self.mime_types):
            raise LookupError(
                f"MIME index {dirent.mime_type} out of range ({len(self.mime_types)} types)"
            )
        return self.mime_types[dirent.mime_type]

    def cluster_for(self, dirent: Dirent) -> Cluster:
        """Return the decoded cluster that holds a content dirent's blob."""
        payload = dirent.payload
        if not isinstance(payload, ContentPayload):
            raise LookupError(f"{dirent.kind.value} dirent has no cluster")
        if payload.cluster_number >= len(self.clusters):
            raise LookupError(
                f"Cluster {payload.cluster_number} out of range ({len(self.clusters)} decoded)"
            )
        return self.clusters[payload.cluster_number]


def read_clusters(
    source: BinaryIO,
    pointers: tuple[int, ...],
    *,
    max_blobs: int = DEFAULT_OPTIONS.max_blobs,
) -> tuple[Cluster, ...]:
    """Seek to each cluster pointer in turn and decode it."""
    clusters: list[Cluster] = []
    for pointer in pointers:
        seek_to(source, pointer)
        clusters.append(parse_cluster(source, max_blobs=max_blobs))
    return tuple(clusters)


def parse_archive(source: BinaryIO, options: DecoderOptions | None = None) -> Archive:
    """Decode a complete archive index from a seekable byte source.

    Any error aborts the whole call; no partial archive is returned.
    """
    opts = options or DEFAULT_OPTIONS
    t0 = time.perf_counter()

    seek_to(source, 0)
    header = parse_header(source)
    log.debug(
        "Header: version %s, %d articles, %d clusters",
        header.version, header.article_count, header.cluster_count,
    )

    mime_types = parse_mime_list(source, header, opts)

    cluster_pointers = read_pointer_table(
        source, header.cluster_ptr_pos, header.cluster_count, "cluster pointer table",
    )

    clusters: tuple[Cluster, ...] = ()
    if opts.decode_clusters:
        clusters = read_clusters(source, cluster_pointers, max_blobs=opts.max_blobs)
        deferred = sum(1 for c in clusters if c.offset_table_deferred)
        if deferred:
            log.debug("%d of %d clusters are compressed; offset tables deferred",
                      deferred, len(clusters))

    dirent_pointers = read_pointer_table(
        source, header.path_ptr_pos, header.article_count, "dirent pointer table",
    )

    log.info(
        "Decoded archive %s: %d MIME types, %d clusters, %d dirents in %.3fs",
        header.uuid_hex, len(mime_types), len(cluster_pointers),
        len(dirent_pointers), time.perf_counter() - t0,
    )
    return Archive(
        header=header,
        mime_types=mime_types,
        cluster_pointers=cluster_pointers,
        clusters=clusters,
        dirent_pointers=dirent_pointers,
    )


def scan_clusters(
    source: BinaryIO,
    pointers: tuple[int, ...],
    *,
    max_blobs: int = DEFAULT_OPTIONS.max_blobs,
) -> Iterator[tuple[int, Result[Cluster, ZimError]]]:
    """Decode clusters one by one, reporting failures instead of raising."""
    for index, pointer in enumerate(pointers):
        try:
            seek_to(source, pointer)
            yield index, Ok(parse_cluster(source, max_blobs=max_blobs))
        except ZimError as exc:
            log.warning("Cluster %d at offset %d failed: %s", index, pointer, exc)
            yield index, Err(exc)


def scan_dirents(
    source: BinaryIO,
    archive: Archive,
) -> Iterator[tuple[int, Result[Dirent, ZimError]]]:
    """Decode dirents one by one, reporting failures instead of raising."""
    for index, pointer in enumerate(archive.dirent_pointers):
        try:
            yield index, Ok(read_dirent_at(source, pointer))
        except ZimError as exc:
            log.warning("Dirent %d at offset %d failed: %s", index, pointer, exc)
            yield index, Err(exc)


def open_archive(path: Path | str, options: DecoderOptions | None = None) -> Archive:
    """Decode the archive at ``path``.

    A missing path raises ArchiveNotFoundError before anything is opened.
    """
    p = Path(path)
    if not p.exists():
        raise ArchiveNotFoundError(p)
    with open(p, "rb") as f:
        return parse_archive(f, options)


class ArchiveFile:
    """Open archive file plus its decoded index, for on-demand dirent reads.

    Usage::

        with ArchiveFile("wiki.zim") as zf:
            print(zf.archive.header.version)
            first = zf.dirent(0)
    """

    def __init__(self, path: Path | str, options: DecoderOptions | None = None) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise ArchiveNotFoundError(self.path)
        self._source: BinaryIO = open(self.path, "rb")  # noqa: SIM115
        try:
            self.archive = parse_archive(self._source, options)
        except BaseException:
            self._source.close()
            raise

    @property
    def source(self) -> BinaryIO:
        return self._source

    def dirent(self, index: int) -> Dirent:
        return self.archive.read_dirent(self._source, index)

    def dirents(self) -> Iterator[Dirent]:
        return self.archive.iter_dirents(self._source)

    def scan_dirents(self) -> Iterator[tuple[int, Result[Dirent, ZimError]]]:
        return scan_dirents(self._source, self.archive)

    def close(self) -> None:
        self._source.close()

    def __enter__(self) -> ArchiveFile:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
