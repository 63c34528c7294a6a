"""Directory entry (dirent) decoding.

Record layout (little-endian):
  [0:2)  mime_type  u16   0xFFFF redirect, 0xFFFE link target, 0xFFFD deleted,
                          anything else is content and indexes the MIME list
  [2:3)  extra_len  u8    size of the trailing parameter block
  [3:4)  namespace  byte
  [4:8)  revision   u32
  payload                 redirect: u32 target index
                          content:  u32 cluster number, u32 blob number
                          link target / deleted: nothing
  url    null-terminated UTF-8
  title  null-terminated UTF-8 (may be empty)
  parameter  extra_len raw bytes

Namespace bytes are exposed as ``chr(byte)``. Values >= 0x80 are not
validated; they come back as the Latin-1 code point with the same number.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from enum import StrEnum
from typing import BinaryIO, TypeAlias

from zimdecode.reader import read_cstring, read_exact, read_u32, seek_to

log = logging.getLogger(__name__)

REDIRECT_MIME_TYPE = 0xFFFF
LINK_TARGET_MIME_TYPE = 0xFFFE
DELETED_MIME_TYPE = 0xFFFD

DIRENT_PREFIX = struct.Struct("<HBBI")
_CONTENT = struct.Struct("<II")


class DirentKind(StrEnum):
    CONTENT = "content"
    REDIRECT = "redirect"
    LINK_TARGET = "link_target"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class ContentPayload:
    cluster_number: int
    blob_number: int
    kind: DirentKind = field(default=DirentKind.CONTENT, init=False)


@dataclass(frozen=True, slots=True)
class RedirectPayload:
    redirect_index: int
    kind: DirentKind = field(default=DirentKind.REDIRECT, init=False)


@dataclass(frozen=True, slots=True)
class LinkTargetPayload:
    kind: DirentKind = field(default=DirentKind.LINK_TARGET, init=False)


@dataclass(frozen=True, slots=True)
class DeletedPayload:
    kind: DirentKind = field(default=DirentKind.DELETED, init=False)


DirentPayload: TypeAlias = ContentPayload | RedirectPayload | LinkTargetPayload | DeletedPayload


def kind_for_mime_type(mime_type: int) -> DirentKind:
    """Map a dirent mime-type code to its variant."""
    if mime_type == REDIRECT_MIME_TYPE:
        return DirentKind.REDIRECT
    if mime_type == LINK_TARGET_MIME_TYPE:
        return DirentKind.LINK_TARGET
    if mime_type == DELETED_MIME_TYPE:
        return DirentKind.DELETED
    return DirentKind.CONTENT


@dataclass(frozen=True, slots=True)
class Dirent:
    """One decoded directory entry."""

    mime_type: int
    extra_len: int
    namespace: str
    revision: int
    payload: DirentPayload
    url: str
    title: str
    parameter: bytes = b""

    @property
    def kind(self) -> DirentKind:
        return self.payload.kind

    def is_redirect(self) -> bool:
        return self.kind is DirentKind.REDIRECT

    def is_link_target(self) -> bool:
        return self.kind is DirentKind.LINK_TARGET

    def is_deleted(self) -> bool:
        return self.kind is DirentKind.DELETED

    def is_article(self) -> bool:
        return self.kind is DirentKind.CONTENT

    def get_title(self) -> str:
        """Stored title, or the URL when the title is empty."""
        return self.title or self.url


def _read_payload(source: BinaryIO, kind: DirentKind) -> DirentPayload:
    match kind:
        case DirentKind.REDIRECT:
            target = read_u32(source, "redirect index")
            return RedirectPayload(redirect_index=target)
        case DirentKind.LINK_TARGET:
            return LinkTargetPayload()
        case DirentKind.DELETED:
            return DeletedPayload()
        case DirentKind.CONTENT:
            cluster_number, blob_number = _CONTENT.unpack(
                read_exact(source, _CONTENT.size, "content location")
            )
            return ContentPayload(cluster_number=cluster_number, blob_number=blob_number)


def parse_dirent(source: BinaryIO) -> Dirent:
    """Decode the dirent starting at the source's current position.

    The mime-type code of a content entry is not checked against the MIME
    list; see ``Archive.mime_type_for``.
    """
    mime_type, extra_len, ns_byte, revision = DIRENT_PREFIX.unpack(
        read_exact(source, DIRENT_PREFIX.size, "dirent prefix")
    )
    if ns_byte >= 0x80:
        log.debug("Dirent namespace byte 0x%02x is outside ASCII", ns_byte)

    payload = _read_payload(source, kind_for_mime_type(mime_type))
    url = read_cstring(source, "dirent url")
    title = read_cstring(source, "dirent title")
    parameter = read_exact(source, extra_len, "dirent parameter") if extra_len else b""

    return Dirent(
        mime_type=mime_type,
        extra_len=extra_len,
        namespace=chr(ns_byte),
        revision=revision,
        payload=payload,
        url=url,
        title=title,
        parameter=parameter,
    )


def read_dirent_at(source: BinaryIO, pointer: int) -> Dirent:
    """Seek to an absolute dirent pointer and decode the record there."""
    seek_to(source, pointer)
    return parse_dirent(source)
