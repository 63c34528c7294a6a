"""ZIM archive layout decoder: header, MIME list, pointer tables, clusters, dirents."""

from zimdecode.archive import (
    Archive,
    ArchiveFile,
    open_archive,
    parse_archive,
    read_clusters,
    scan_clusters,
    scan_dirents,
)
from zimdecode.cluster import Cluster, Compression, parse_cluster
from zimdecode.config import DecoderOptions
from zimdecode.dirent import (
    ContentPayload,
    DeletedPayload,
    Dirent,
    DirentKind,
    LinkTargetPayload,
    RedirectPayload,
    parse_dirent,
    read_dirent_at,
)
from zimdecode.errors import (
    ArchiveNotFoundError,
    InvalidCompressionError,
    InvalidMagicNumberError,
    InvalidMimeListBoundsError,
    InvalidUtf8Error,
    MimeListNotTerminatedError,
    ShortReadError,
    TooManyBlobsError,
    ZimError,
    ZimFormatError,
)
from zimdecode.header import HEADER_SIZE, ZIM_MAGIC_NUMBER, Header, parse_header
from zimdecode.mime import mime_list_bounds, parse_mime_list
from zimdecode.pointers import read_pointer_table
from zimdecode.types import Err, Ok, Result

__all__ = [
    "HEADER_SIZE",
    "ZIM_MAGIC_NUMBER",
    "Archive",
    "ArchiveFile",
    "ArchiveNotFoundError",
    "Cluster",
    "Compression",
    "ContentPayload",
    "DecoderOptions",
    "DeletedPayload",
    "Dirent",
    "DirentKind",
    "Err",
    "Header",
    "InvalidCompressionError",
    "InvalidMagicNumberError",
    "InvalidMimeListBoundsError",
    "InvalidUtf8Error",
    "LinkTargetPayload",
    "MimeListNotTerminatedError",
    "Ok",
    "RedirectPayload",
    "Result",
    "ShortReadError",
    "TooManyBlobsError",
    "ZimError",
    "ZimFormatError",
    "mime_list_bounds",
    "open_archive",
    "parse_archive",
    "parse_cluster",
    "parse_dirent",
    "parse_header",
    "parse_mime_list",
    "read_clusters",
    "read_dirent_at",
    "read_pointer_table",
    "scan_clusters",
    "scan_dirents",
]
