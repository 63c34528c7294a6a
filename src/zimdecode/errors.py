"""Exception hierarchy for ZIM decoding.

Every decoder raises at the read that failed and lets the error propagate;
nothing in the package retries or returns partial structures.

Hierarchy:
  ZimError                      — base for everything raised here
    ShortReadError              — stream ended before a fixed/variable read
    ZimFormatError              — bytes were read but do not form a valid archive
      InvalidMagicNumberError
      InvalidCompressionError
      TooManyBlobsError
      InvalidMimeListBoundsError
      MimeListNotTerminatedError
      InvalidUtf8Error
    ArchiveNotFoundError        — input path does not exist
"""
from __future__ import annotations


class ZimError(Exception):
    """Base class for all ZIM decoding errors."""


class ShortReadError(ZimError, EOFError):
    """Fewer bytes were available than a read required."""

    def __init__(self, what: str, expected: int, actual: int, offset: int | None = None) -> None:
        self.what = what
        self.expected = expected
        self.actual = actual
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(
            f"Short read for {what}{where}: expected {expected} bytes, got {actual}"
        )


class ZimFormatError(ZimError, ValueError):
    """Base class for malformed archive content."""


class InvalidMagicNumberError(ZimFormatError):
    def __init__(self, found: int, expected: int) -> None:
        self.found = found
        self.expected = expected
        super().__init__(
            f"Invalid magic number: expected 0x{expected:08x}, got 0x{found:08x}"
        )


class InvalidCompressionError(ZimFormatError):
    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Invalid compression type: {code}")


class TooManyBlobsError(ZimFormatError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Too many blobs in cluster: {count} (limit {limit})")


class InvalidMimeListBoundsError(ZimFormatError):
    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Invalid MIME list bounds: end {end} <= start {start}")


class MimeListNotTerminatedError(ZimFormatError):
    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(
            f"MIME list entry starting at region offset {position} is not null-terminated"
        )


class InvalidUtf8Error(ZimFormatError):
    def __init__(self, what: str, raw: bytes) -> None:
        self.what = what
        self.raw = raw
        preview = raw[:32].hex()
        super().__init__(f"Invalid UTF-8 in {what}: {preview}")


class ArchiveNotFoundError(ZimError, FileNotFoundError):
    """The input path does not exist (raised before any read)."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Archive not found: {path}")
