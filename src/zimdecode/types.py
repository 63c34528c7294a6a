"""Shared result type for tolerant, per-unit decoding.

Whole-archive decoding raises on the first failure. Callers that want to
skip individual bad clusters or dirents use the scan helpers in
``zimdecode.archive``, which wrap each unit in ``Ok`` or ``Err``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success case of Result[T, E].

    Usage::

        for index, result in scan_dirents(source, archive):
            match result:
                case Ok(value=dirent): print(dirent.url)
                case Err(error=exc): print(index, exc)
    """
    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure case of Result[T, E]. Keeps the exception that was raised."""
    error: E


Result: TypeAlias = Ok[T] | Err[E]
