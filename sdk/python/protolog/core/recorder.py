"""
Recording encoders that keep the primitive kind of every value.

The plain :class:`~protolog.core.encoder.DictEncoder` stores ``1.0`` the same
whether it came from ``add_float32`` or ``add_float64``.  The recorders here
wrap each primitive in a small value type so assertions can tell them apart::

    enc = ObjectRecorder()
    enc.add_int32("n", -3)
    enc.result == {"n": Int32(-3)}      # True
    enc.result == {"n": Int64(-3)}      # False
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .encoder import DictEncoder, ListEncoder


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Float32:
    value: float


@dataclass(frozen=True)
class Float64:
    value: float


@dataclass(frozen=True)
class Int32:
    value: int


@dataclass(frozen=True)
class Int64:
    value: int


@dataclass(frozen=True)
class Uint32:
    value: int


@dataclass(frozen=True)
class Uint64:
    value: int


_KINDS = {
    "bool":    Bool,
    "string":  String,
    "float32": Float32,
    "float64": Float64,
    "int32":   Int32,
    "int64":   Int64,
    "uint32":  Uint32,
    "uint64":  Uint64,
}


class ObjectRecorder(DictEncoder):
    """Object encoder recording ``{key: Value}``; nested values are dicts/lists."""

    def _wrap(self, kind: str, value: Any) -> Any:
        return _KINDS[kind](value)

    def _object_encoder(self) -> "ObjectRecorder":
        return ObjectRecorder()

    def _array_encoder(self) -> "ArrayRecorder":
        return ArrayRecorder()


class ArrayRecorder(ListEncoder):
    """Array counterpart of :class:`ObjectRecorder`."""

    def _wrap(self, kind: str, value: Any) -> Any:
        return _KINDS[kind](value)

    def _object_encoder(self) -> ObjectRecorder:
        return ObjectRecorder()

    def _array_encoder(self) -> "ArrayRecorder":
        return ArrayRecorder()
