"""Decoder options, with defaults and JSON loading."""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from zimdecode.io_utils import load_json

MAX_BLOBS = 1_000_000
MIME_LIST_WARN_BYTES = 1024 * 1024


@dataclass(frozen=True, slots=True)
class DecoderOptions:
    """Knobs for whole-archive decoding.

    max_blobs            — per-cluster cap on the self-described offset count;
                           guards allocation on corrupt input, not a format limit
    mime_list_warn_bytes — MIME regions larger than this are logged, never rejected
    decode_clusters      — when False only the cluster pointer table is read
    """

    max_blobs: int = MAX_BLOBS
    mime_list_warn_bytes: int = MIME_LIST_WARN_BYTES
    decode_clusters: bool = True

    def __post_init__(self) -> None:
        for name in ("max_blobs", "mime_list_warn_bytes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if not isinstance(self.decode_clusters, bool):
            raise ValueError(f"decode_clusters must be a boolean, got {self.decode_clusters!r}")
        if self.max_blobs < 1:
            raise ValueError(f"max_blobs must be >= 1, got {self.max_blobs}")
        if self.mime_list_warn_bytes < 1:
            raise ValueError(
                f"mime_list_warn_bytes must be >= 1, got {self.mime_list_warn_bytes}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecoderOptions:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown decoder option(s): {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> DecoderOptions:
        data = load_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"Invalid decoder options payload in {path}")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_OPTIONS = DecoderOptions()
