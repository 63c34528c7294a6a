"""DuckDB catalog of a decoded archive.

``write_catalog`` persists the decoded index (header, MIME list, cluster
table, and every dirent) into a DuckDB file; ``ArchiveCatalog`` opens it
read-only for later inspection without re-reading the archive.

Tables:
    header          — one row of header fields
    mime_types      — MIME list in archive order
    clusters        — one row per cluster pointer
    dirents         — one row per dirent pointer
    _schema_version — schema version tracking
"""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from zimdecode.archive import Archive, scan_dirents
from zimdecode.dirent import ContentPayload, Dirent, RedirectPayload
from zimdecode.types import Err, Ok

# Dynamic DuckDB import for pyright compatibility
_duckdb_mod = importlib.import_module("duckdb")

log = logging.getLogger(__name__)

SCHEMA_VERSION = "0.1.0"

_SCHEMA = (
    """
    CREATE TABLE _schema_version (
        table_name VARCHAR PRIMARY KEY,
        version VARCHAR NOT NULL,
        created_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE header (
        uuid VARCHAR,
        major_version INTEGER,
        minor_version INTEGER,
        article_count UBIGINT,
        cluster_count UBIGINT,
        path_ptr_pos UBIGINT,
        title_idx_pos UBIGINT,
        cluster_ptr_pos UBIGINT,
        mime_list_pos UBIGINT,
        main_page UBIGINT,
        layout_page UBIGINT,
        checksum_pos UBIGINT
    )
    """,
    """
    CREATE TABLE mime_types (
        idx INTEGER PRIMARY KEY,
        mime_type VARCHAR NOT NULL
    )
    """,
    """
    CREATE TABLE clusters (
        idx INTEGER PRIMARY KEY,
        pointer UBIGINT,
        compression VARCHAR,
        is_extended BOOLEAN,
        offset_table_deferred BOOLEAN,
        blob_count INTEGER
    )
    """,
    """
    CREATE TABLE dirents (
        idx INTEGER PRIMARY KEY,
        pointer UBIGINT,
        kind VARCHAR,
        mime_type INTEGER,
        namespace VARCHAR,
        revision UBIGINT,
        cluster_number UBIGINT,
        blob_number UBIGINT,
        redirect_index UBIGINT,
        url VARCHAR,
        title VARCHAR,
        parameter BLOB
    )
    """,
)


class SchemaVersionError(RuntimeError):
    """Raised when a catalog DB schema version does not match expected."""


@dataclass(frozen=True, slots=True)
class CatalogStats:
    """Outcome of a catalog build."""

    dirents_written: int
    dirents_failed: int


@dataclass(frozen=True, slots=True)
class DirentRecord:
    """A dirent row in the catalog."""

    idx: int
    pointer: int
    kind: str
    mime_type: int
    namespace: str
    revision: int
    cluster_number: int | None
    blob_number: int | None
    redirect_index: int | None
    url: str
    title: str
    parameter: bytes


def _dirent_row(idx: int, pointer: int, dirent: Dirent) -> tuple[Any, ...]:
    payload = dirent.payload
    cluster_number = blob_number = redirect_index = None
    if isinstance(payload, ContentPayload):
        cluster_number = payload.cluster_number
        blob_number = payload.blob_number
    elif isinstance(payload, RedirectPayload):
        redirect_index = payload.redirect_index
    return (
        idx, pointer, dirent.kind.value, dirent.mime_type, dirent.namespace,
        dirent.revision, cluster_number, blob_number, redirect_index,
        dirent.url, dirent.title, dirent.parameter,
    )


def write_catalog(
    archive: Archive,
    source: BinaryIO,
    db_path: Path,
    *,
    tolerant: bool = False,
) -> CatalogStats:
    """Write a fresh catalog for ``archive`` to ``db_path``.

    Dirents are decoded from ``source`` while writing. With ``tolerant`` a
    dirent that fails to decode is logged and skipped; otherwise the first
    failure propagates. The catalog is built in a sibling ``.tmp`` file and
    only replaces ``db_path`` once complete, so a failed build leaves any
    existing catalog untouched.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = db_path.with_name(db_path.name + ".tmp")
    tmp_path.unlink(missing_ok=True)

    dirent_rows: list[tuple[Any, ...]] = []
    failed = 0
    conn = _duckdb_mod.connect(str(tmp_path))
    try:
        for ddl in _SCHEMA:
            conn.execute(ddl)
        conn.execute(
            "INSERT INTO _schema_version VALUES ('catalog', ?, current_timestamp)",
            [SCHEMA_VERSION],
        )

        h = archive.header
        conn.execute(
            "INSERT INTO header VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                h.uuid_hex, h.major_version, h.minor_version, h.article_count,
                h.cluster_count, h.path_ptr_pos, h.title_idx_pos, h.cluster_ptr_pos,
                h.mime_list_pos, h.main_page, h.layout_page, h.checksum_pos,
            ],
        )
        if archive.mime_types:
            conn.executemany(
                "INSERT INTO mime_types VALUES (?, ?)",
                list(enumerate(archive.mime_types)),
            )

        cluster_rows: list[tuple[Any, ...]] = []
        for idx, pointer in enumerate(archive.cluster_pointers):
            cluster = archive.clusters[idx] if idx < len(archive.clusters) else None
            cluster_rows.append((
                idx,
                pointer,
                cluster.compression.name.lower() if cluster else None,
                cluster.is_extended if cluster else None,
                cluster.offset_table_deferred if cluster else None,
                cluster.blob_count() if cluster else None,
            ))
        if cluster_rows:
            conn.executemany(
                "INSERT INTO clusters VALUES (?, ?, ?, ?, ?, ?)", cluster_rows,
            )

        if tolerant:
            for idx, result in scan_dirents(source, archive):
                match result:
                    case Ok(value=dirent):
                        dirent_rows.append(
                            _dirent_row(idx, archive.dirent_pointers[idx], dirent)
                        )
                    case Err():
                        failed += 1
        else:
            for idx, dirent in enumerate(archive.iter_dirents(source)):
                dirent_rows.append(_dirent_row(idx, archive.dirent_pointers[idx], dirent))
        if dirent_rows:
            conn.executemany(
                "INSERT INTO dirents VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                dirent_rows,
            )
    except BaseException:
        conn.close()
        tmp_path.unlink(missing_ok=True)
        raise
    conn.close()
    tmp_path.replace(db_path)

    log.info("Wrote catalog %s: %d dirents (%d failed)", db_path, len(dirent_rows), failed)
    return CatalogStats(dirents_written=len(dirent_rows), dirents_failed=failed)


def _read_schema_version(conn: Any) -> str:
    try:
        result = conn.execute(
            "SELECT version FROM _schema_version WHERE table_name = 'catalog'"
        ).fetchone()
        return str(result[0]) if result else "unknown"
    except _duckdb_mod.Error:
        return "unknown"


class ArchiveCatalog:
    """Read-only access to a catalog written by ``write_catalog``.

    Usage::

        with ArchiveCatalog(Path("wiki.duckdb")) as cat:
            print(cat.kind_counts())
    """

    def __init__(self, db_path: Path) -> None:
        if not db_path.exists():
            raise FileNotFoundError(f"Catalog not found: {db_path}")
        self._db_path = db_path
        self._conn = _duckdb_mod.connect(str(db_path), read_only=True)
        actual = _read_schema_version(self._conn)
        if actual != SCHEMA_VERSION:
            self._conn.close()
            raise SchemaVersionError(
                f"Schema version mismatch in {db_path}: expected {SCHEMA_VERSION}, got {actual}"
            )

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> ArchiveCatalog:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def header(self) -> dict[str, Any]:
        cursor = self._conn.execute("SELECT * FROM header")
        row = cursor.fetchone()
        if row is None:
            return {}
        columns = [d[0] for d in cursor.description]
        return dict(zip(columns, row, strict=True))

    def mime_types(self) -> tuple[str, ...]:
        rows = self._conn.execute("SELECT mime_type FROM mime_types ORDER BY idx").fetchall()
        return tuple(str(r[0]) for r in rows)

    def cluster_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM clusters").fetchone()
        return int(row[0]) if row else 0

    def dirent_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM dirents").fetchone()
        return int(row[0]) if row else 0

    def dirent(self, idx: int) -> DirentRecord | None:
        row = self._conn.execute(
            "SELECT * FROM dirents WHERE idx = ?", [idx]
        ).fetchone()
        if row is None:
            return None
        return DirentRecord(
            idx=int(row[0]),
            pointer=int(row[1]),
            kind=str(row[2]),
            mime_type=int(row[3]),
            namespace=str(row[4]),
            revision=int(row[5]),
            cluster_number=None if row[6] is None else int(row[6]),
            blob_number=None if row[7] is None else int(row[7]),
            redirect_index=None if row[8] is None else int(row[8]),
            url=str(row[9]),
            title=str(row[10]),
            parameter=bytes(row[11]) if row[11] is not None else b"",
        )

    def kind_counts(self) -> dict[str, int]:
        rows = self._conn.execute(
            "SELECT kind, COUNT(*) FROM dirents GROUP BY kind ORDER BY kind"
        ).fetchall()
        return {str(r[0]): int(r[1]) for r in rows}
