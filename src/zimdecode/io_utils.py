"""JSON I/O for decoded archive structures.

orjson serializes dataclasses and enums natively; ``to_jsonable`` adds the
pieces it does not cover (raw bytes as hex, derived cluster/dirent fields)
so CLI output and saved reports share one shape.
"""
from __future__ import annotations

import sys
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, cast

import orjson

_DUMP_OPTS = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = _DUMP_OPTS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(to_jsonable(obj), option=opts))


def dump_json(obj: Any) -> None:
    """Write indented JSON to stdout."""
    sys.stdout.buffer.write(orjson.dumps(to_jsonable(obj), option=_DUMP_OPTS))
    sys.stdout.buffer.write(b"\n")


def to_jsonable(obj: Any) -> Any:
    """Recursively convert decoded records into plain JSON values."""
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, Enum):
        return obj.name.lower()
    if is_dataclass(obj) and not isinstance(obj, type):
        out = {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
        out.update({k: to_jsonable(v) for k, v in _derived_fields(obj).items()})
        return out
    if isinstance(obj, dict):
        obj_dict = cast(dict[Any, Any], obj)
        return {str(k): to_jsonable(v) for k, v in obj_dict.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in cast(list[Any], obj)]
    return obj


def _derived_fields(obj: Any) -> dict[str, Any]:
    # Imported lazily: the record modules depend on config, which depends on us.
    from zimdecode.cluster import Cluster
    from zimdecode.dirent import Dirent
    from zimdecode.header import Header

    if isinstance(obj, Cluster):
        return {"blob_count": obj.blob_count()}
    if isinstance(obj, Dirent):
        return {"kind": obj.kind.value, "effective_title": obj.get_title()}
    if isinstance(obj, Header):
        return {"version": obj.version}
    return {}
