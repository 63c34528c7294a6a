"""ZIM header decoding (fixed 80 bytes at offset 0).

Layout (little-endian):
  [0:4)   magic_number      u32  (0x044D495A, "ZIM\\x04")
  [4:6)   major_version     u16
  [6:8)   minor_version     u16
  [8:24)  uuid              16 raw bytes
  [24:28) article_count     u32
  [28:32) cluster_count     u32
  [32:40) path_ptr_pos      u64  → dirent pointer table
  [40:48) title_idx_pos     u64  → title index (0 when absent)
  [48:56) cluster_ptr_pos   u64  → cluster pointer table
  [56:64) mime_list_pos     u64  → MIME list
  [64:68) main_page         u32  (0xFFFFFFFF when absent)
  [68:72) layout_page       u32  (0xFFFFFFFF by convention)
  [72:80) checksum_pos      u64
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO

from zimdecode.errors import InvalidMagicNumberError
from zimdecode.reader import read_exact

ZIM_MAGIC_NUMBER = 0x044D495A
HEADER_SIZE = 80
NO_PAGE = 0xFFFFFFFF

HEADER_STRUCT = struct.Struct("<IHH16sIIQQQQIIQ")
assert HEADER_STRUCT.size == HEADER_SIZE


@dataclass(frozen=True, slots=True)
class Header:
    """Decoded archive header. All ``*_pos`` fields are absolute offsets."""

    magic_number: int
    major_version: int
    minor_version: int
    uuid: bytes
    article_count: int
    cluster_count: int
    path_ptr_pos: int
    title_idx_pos: int
    cluster_ptr_pos: int
    mime_list_pos: int
    main_page: int
    layout_page: int
    checksum_pos: int

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}"

    @property
    def uuid_hex(self) -> str:
        return self.uuid.hex()

    @property
    def has_main_page(self) -> bool:
        return self.main_page != NO_PAGE

    @property
    def has_layout_page(self) -> bool:
        return self.layout_page != NO_PAGE


def decode_header(data: bytes) -> Header:
    """Decode an 80-byte header buffer.

    The magic number is checked before any other field is interpreted.
    """
    (magic,) = struct.unpack_from("<I", data, 0)
    if magic != ZIM_MAGIC_NUMBER:
        raise InvalidMagicNumberError(magic, ZIM_MAGIC_NUMBER)

    (
        magic_number,
        major_version,
        minor_version,
        uuid,
        article_count,
        cluster_count,
        path_ptr_pos,
        title_idx_pos,
        cluster_ptr_pos,
        mime_list_pos,
        main_page,
        layout_page,
        checksum_pos,
    ) = HEADER_STRUCT.unpack(data)

    return Header(
        magic_number=magic_number,
        major_version=major_version,
        minor_version=minor_version,
        uuid=uuid,
        article_count=article_count,
        cluster_count=cluster_count,
        path_ptr_pos=path_ptr_pos,
        title_idx_pos=title_idx_pos,
        cluster_ptr_pos=cluster_ptr_pos,
        mime_list_pos=mime_list_pos,
        main_page=main_page,
        layout_page=layout_page,
        checksum_pos=checksum_pos,
    )


def parse_header(source: BinaryIO) -> Header:
    """Read and decode the header from the current position (normally 0)."""
    return decode_header(read_exact(source, HEADER_SIZE, "header"))
