"""Cluster decoding: compression tag, extended flag, blob-offset table.

Tag byte:
  bits 0-3  compression code (1=none, 2=zip, 3=bzip2, 4=lzma, 5=zstd)
  bit  4    extended flag (8-byte offsets instead of 4-byte)

An uncompressed cluster is followed by its offset table. The table describes
its own length: the first offset points just past the table, so
``first_offset // width`` is the number of entries. N entries bound N-1 blobs.

A compressed cluster keeps its offset table inside the compressed stream.
No codec is integrated, so that table is reported as deferred rather than
decoded; ``offset_table_deferred`` tells it apart from an empty table.
"""
from __future__ import annotations

import logging
import struct
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, TypeAlias

from zimdecode.config import MAX_BLOBS
from zimdecode.errors import InvalidCompressionError, TooManyBlobsError
from zimdecode.reader import read_exact, read_u8, read_u32, read_u64

log = logging.getLogger(__name__)

COMPRESSION_MASK = 0x0F
EXTENDED_FLAG = 0x10


class Compression(IntEnum):
    NONE = 1
    ZIP = 2
    BZIP2 = 3
    LZMA = 4
    ZSTD = 5


@dataclass(frozen=True, slots=True)
class Cluster:
    """One decoded cluster.

    ``blob_offsets`` are relative to the first byte after the tag byte.
    """

    compression: Compression
    is_extended: bool
    blob_offsets: tuple[int, ...] = ()
    offset_table_deferred: bool = False

    @property
    def offset_width(self) -> int:
        return 8 if self.is_extended else 4

    def blob_count(self) -> int:
        if not self.blob_offsets:
            return 0
        return len(self.blob_offsets) - 1

    def blob_size(self, index: int) -> int | None:
        """Size of blob ``index``, or None when there is no such blob."""
        bounds = self.blob_range(index)
        if bounds is None:
            return None
        return bounds[1] - bounds[0]

    def blob_range(self, index: int) -> tuple[int, int] | None:
        """(start, end) offsets of blob ``index``, or None when out of range."""
        if index < 0 or index + 1 >= len(self.blob_offsets):
            return None
        return self.blob_offsets[index], self.blob_offsets[index + 1]


def decode_tag(tag: int) -> tuple[Compression, bool]:
    """Split a tag byte into (compression, is_extended)."""
    code = tag & COMPRESSION_MASK
    try:
        compression = Compression(code)
    except ValueError:
        raise InvalidCompressionError(code) from None
    return compression, bool(tag & EXTENDED_FLAG)


def _read_offset_table(source: BinaryIO, width: int, max_blobs: int) -> tuple[int, ...]:
    if width == 8:
        first = read_u64(source, "cluster first offset")
    else:
        first = read_u32(source, "cluster first offset")
    count = first // width
    if count > max_blobs:
        raise TooManyBlobsError(count, max_blobs)
    if count <= 1:
        return (first,)
    rest = read_exact(source, width * (count - 1), "cluster offset table")
    tail = struct.unpack(f"<{count - 1}{'Q' if width == 8 else 'I'}", rest)
    return (first, *tail)


def _decode_uncompressed(
    source: BinaryIO, compression: Compression, is_extended: bool, max_blobs: int,
) -> Cluster:
    width = 8 if is_extended else 4
    offsets = _read_offset_table(source, width, max_blobs)
    return Cluster(
        compression=compression,
        is_extended=is_extended,
        blob_offsets=offsets,
    )


def _defer_compressed(
    source: BinaryIO, compression: Compression, is_extended: bool, max_blobs: int,
) -> Cluster:
    log.debug("Deferring offset table of %s cluster", compression.name)
    return Cluster(
        compression=compression,
        is_extended=is_extended,
        offset_table_deferred=True,
    )


_ClusterDecoder: TypeAlias = Callable[[BinaryIO, Compression, bool, int], Cluster]

_DECODERS: dict[Compression, _ClusterDecoder] = {
    Compression.NONE: _decode_uncompressed,
    Compression.ZIP: _defer_compressed,
    Compression.BZIP2: _defer_compressed,
    Compression.LZMA: _defer_compressed,
    Compression.ZSTD: _defer_compressed,
}


def parse_cluster(source: BinaryIO, *, max_blobs: int = MAX_BLOBS) -> Cluster:
    """Decode the cluster starting at the source's current position.

    Reads 1 tag byte, plus ``count * width`` bytes of offset table when the
    cluster is uncompressed. Blob payload bytes are never read.
    """
    compression, is_extended = decode_tag(read_u8(source, "cluster tag"))
    return _DECODERS[compression](source, compression, is_extended, max_blobs)
