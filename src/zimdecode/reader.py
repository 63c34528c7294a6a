"""Low-level reads against a seekable binary source.

A byte source is any object with ``read``/``seek``/``tell`` over bytes: an
``open(path, "rb")`` handle or an ``io.BytesIO``. All integers are
little-endian. Short reads are hard failures.
"""
from __future__ import annotations

import struct
from typing import BinaryIO

from zimdecode.errors import InvalidUtf8Error, ShortReadError

U8 = struct.Struct("<B")
U32 = struct.Struct("<I")
U64 = struct.Struct("<Q")

_CSTRING_CHUNK = 64


def _position(source: BinaryIO) -> int | None:
    try:
        return source.tell()
    except (OSError, ValueError):
        return None


def seek_to(source: BinaryIO, offset: int) -> None:
    """Seek to an absolute offset."""
    source.seek(offset)


def read_exact(source: BinaryIO, size: int, what: str = "data") -> bytes:
    """Read exactly ``size`` bytes or raise ShortReadError."""
    offset = _position(source)
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b"".join(chunks)
    if len(data) != size:
        raise ShortReadError(what, size, len(data), offset)
    return data


def read_u8(source: BinaryIO, what: str = "u8") -> int:
    return U8.unpack(read_exact(source, U8.size, what))[0]


def read_u32(source: BinaryIO, what: str = "u32") -> int:
    return U32.unpack(read_exact(source, U32.size, what))[0]


def read_u64(source: BinaryIO, what: str = "u64") -> int:
    return U64.unpack(read_exact(source, U64.size, what))[0]


def decode_utf8(raw: bytes, what: str) -> str:
    """Decode strict UTF-8, mapping failures to InvalidUtf8Error."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidUtf8Error(what, raw) from exc


def read_cstring(source: BinaryIO, what: str = "string") -> str:
    """Read a null-terminated UTF-8 string; the terminator is consumed.

    Reads in small chunks and seeks back past any over-read so the source
    ends exactly one byte after the terminator. Sources that cannot seek
    fall back to byte-at-a-time reads.
    """
    start = _position(source)
    if start is None:
        return _read_cstring_bytewise(source, what)

    buf = bytearray()
    while True:
        chunk = source.read(_CSTRING_CHUNK)
        if not chunk:
            raise ShortReadError(f"{what} terminator", len(buf) + 1, len(buf), start)
        nul = chunk.find(b"\x00")
        if nul >= 0:
            buf += chunk[:nul]
            source.seek(start + len(buf) + 1)
            return decode_utf8(bytes(buf), what)
        buf += chunk


def _read_cstring_bytewise(source: BinaryIO, what: str) -> str:
    buf = bytearray()
    while True:
        byte = source.read(1)
        if not byte:
            raise ShortReadError(f"{what} terminator", len(buf) + 1, len(buf))
        if byte == b"\x00":
            return decode_utf8(bytes(buf), what)
        buf += byte
