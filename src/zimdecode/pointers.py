"""Fixed-width pointer tables (cluster pointers and dirent/path pointers)."""
from __future__ import annotations

import struct
from typing import BinaryIO

from zimdecode.reader import read_exact, seek_to

POINTER_SIZE = 8


def decode_pointer_table(data: bytes) -> tuple[int, ...]:
    """Decode a buffer of little-endian u64 offsets in file order."""
    if len(data) % POINTER_SIZE:
        raise ValueError(
            f"Pointer table length {len(data)} is not a multiple of {POINTER_SIZE}"
        )
    count = len(data) // POINTER_SIZE
    return struct.unpack(f"<{count}Q", data)


def read_pointer_table(
    source: BinaryIO,
    start: int,
    count: int,
    what: str = "pointer table",
) -> tuple[int, ...]:
    """Seek once to ``start`` and read ``count`` consecutive u64 offsets."""
    seek_to(source, start)
    data = read_exact(source, POINTER_SIZE * count, what)
    return decode_pointer_table(data)
