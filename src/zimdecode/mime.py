"""MIME-type list decoding.

The list is a run of UTF-8 strings separated by single null bytes. Its
region starts at ``mime_list_pos`` and ends at the nearest following table
the header knows about: the dirent pointer table, the cluster pointer table,
or the title index when one is present.
"""
from __future__ import annotations

import logging
from typing import BinaryIO

from zimdecode.config import DEFAULT_OPTIONS, DecoderOptions
from zimdecode.errors import InvalidMimeListBoundsError, MimeListNotTerminatedError
from zimdecode.header import Header
from zimdecode.reader import decode_utf8, read_exact, seek_to

log = logging.getLogger(__name__)


def mime_list_bounds(header: Header) -> tuple[int, int]:
    """Return the (start, end) byte region of the MIME list."""
    start = header.mime_list_pos
    end = min(header.path_ptr_pos, header.cluster_ptr_pos)
    if header.title_idx_pos != 0:
        end = min(end, header.title_idx_pos)
    if end <= start:
        raise InvalidMimeListBoundsError(start, end)
    return start, end


def split_mime_list(data: bytes) -> tuple[str, ...]:
    """Split a bounded MIME region into entries.

    An empty entry at the cursor ends the list, so trailing padding is
    ignored. Running off the end of the region is fine when nothing is left;
    a non-empty tail without its null raises MimeListNotTerminatedError.
    """
    entries: list[str] = []
    pos = 0
    while pos < len(data):
        nul = data.find(b"\x00", pos)
        if nul < 0:
            raise MimeListNotTerminatedError(pos)
        if nul == pos:
            break
        entries.append(decode_utf8(data[pos:nul], f"MIME type #{len(entries)}"))
        pos = nul + 1
    return tuple(entries)


def parse_mime_list(
    source: BinaryIO,
    header: Header,
    options: DecoderOptions | None = None,
) -> tuple[str, ...]:
    """Seek to the MIME list, read its whole region, and split it.

    Leaves the source positioned at the end of the region.
    """
    opts = options or DEFAULT_OPTIONS
    start, end = mime_list_bounds(header)
    size = end - start
    if size > opts.mime_list_warn_bytes:
        log.warning(
            "MIME list region is %d bytes (warn threshold %d)",
            size, opts.mime_list_warn_bytes,
        )
    seek_to(source, start)
    data = read_exact(source, size, "MIME list")
    mime_types = split_mime_list(data)
    log.debug("Decoded %d MIME types from [%d, %d)", len(mime_types), start, end)
    return mime_types
