"""Builders for synthetic ZIM byte layouts used across the test suite."""
from __future__ import annotations

import struct
from dataclasses import dataclass

MAGIC = 0x044D495A
NO_PAGE = 0xFFFFFFFF
UUID = bytes(range(16))


def build_header(
    *,
    magic: int = MAGIC,
    major: int = 6,
    minor: int = 1,
    uuid: bytes = UUID,
    article_count: int = 0,
    cluster_count: int = 0,
    path_ptr_pos: int = 0,
    title_idx_pos: int = 0,
    cluster_ptr_pos: int = 0,
    mime_list_pos: int = 80,
    main_page: int = NO_PAGE,
    layout_page: int = NO_PAGE,
    checksum_pos: int = 0,
) -> bytes:
    return struct.pack(
        "<IHH16sIIQQQQIIQ",
        magic, major, minor, uuid, article_count, cluster_count,
        path_ptr_pos, title_idx_pos, cluster_ptr_pos, mime_list_pos,
        main_page, layout_page, checksum_pos,
    )


def build_cluster(
    blobs: list[bytes],
    *,
    extended: bool = False,
    compression: int = 1,
) -> bytes:
    """Tag byte + self-describing offset table + blob bytes (uncompressed layout)."""
    tag = compression | (0x10 if extended else 0)
    if compression != 1:
        return bytes([tag]) + b"\x00" * 16
    width = 8 if extended else 4
    fmt = "<Q" if extended else "<I"
    offsets = [width * (len(blobs) + 1)]
    for blob in blobs:
        offsets.append(offsets[-1] + len(blob))
    table = b"".join(struct.pack(fmt, o) for o in offsets)
    return bytes([tag]) + table + b"".join(blobs)


def build_dirent(
    mime_type: int,
    *,
    url: str,
    title: str = "",
    namespace: int = ord("C"),
    revision: int = 0,
    cluster: int = 0,
    blob: int = 0,
    redirect: int = 0,
    parameter: bytes = b"",
) -> bytes:
    out = struct.pack("<HBBI", mime_type, len(parameter), namespace, revision)
    if mime_type == 0xFFFF:
        out += struct.pack("<I", redirect)
    elif mime_type not in (0xFFFE, 0xFFFD):
        out += struct.pack("<II", cluster, blob)
    return out + url.encode() + b"\x00" + title.encode() + b"\x00" + parameter


@dataclass(frozen=True)
class BuiltArchive:
    data: bytes
    mime_list_pos: int
    path_ptr_pos: int
    cluster_ptr_pos: int
    cluster_pointers: list[int]
    dirent_pointers: list[int]


def build_archive(
    mime_types: list[str],
    clusters: list[bytes],
    dirents: list[bytes],
    *,
    main_page: int = NO_PAGE,
) -> BuiltArchive:
    """Lay out header, MIME list, pointer tables, clusters then dirents."""
    mime_blob = b"".join(m.encode() + b"\x00" for m in mime_types) + b"\x00"
    mime_list_pos = 80
    path_ptr_pos = mime_list_pos + len(mime_blob)
    cluster_ptr_pos = path_ptr_pos + 8 * len(dirents)
    pos = cluster_ptr_pos + 8 * len(clusters)

    cluster_pointers: list[int] = []
    for c in clusters:
        cluster_pointers.append(pos)
        pos += len(c)
    dirent_pointers: list[int] = []
    for d in dirents:
        dirent_pointers.append(pos)
        pos += len(d)

    header = build_header(
        article_count=len(dirents),
        cluster_count=len(clusters),
        path_ptr_pos=path_ptr_pos,
        cluster_ptr_pos=cluster_ptr_pos,
        mime_list_pos=mime_list_pos,
        main_page=main_page,
        checksum_pos=pos,
    )
    data = (
        header
        + mime_blob
        + b"".join(struct.pack("<Q", p) for p in dirent_pointers)
        + b"".join(struct.pack("<Q", p) for p in cluster_pointers)
        + b"".join(clusters)
        + b"".join(dirents)
    )
    return BuiltArchive(
        data=data,
        mime_list_pos=mime_list_pos,
        path_ptr_pos=path_ptr_pos,
        cluster_ptr_pos=cluster_ptr_pos,
        cluster_pointers=cluster_pointers,
        dirent_pointers=dirent_pointers,
    )


def sample_archive() -> BuiltArchive:
    """Two MIME types, one plain + one zstd cluster, four dirent kinds."""
    return build_archive(
        ["text/html", "image/png"],
        [
            build_cluster([b"<html>hello</html>", b"\x89PNG"]),
            build_cluster([], compression=5, extended=True),
        ],
        [
            build_dirent(0, url="Main_Page", title="Main Page", cluster=0, blob=0),
            build_dirent(1, url="logo.png", cluster=0, blob=1, parameter=b"\x01\x02"),
            build_dirent(0xFFFF, url="Home", redirect=0, namespace=ord("A")),
            build_dirent(0xFFFE, url="anchor", title="Anchor"),
            build_dirent(0xFFFD, url="gone"),
        ],
        main_page=0,
    )
