"""
Structured encoder contract.

Two encoder roles share one primitive set: an object encoder adds keyed
entries, an array encoder appends unkeyed ones.  Nested values are passed as
marshalers, deferred callbacks that perform their traversal only when a
destination encoder invokes them::

    from protolog.core.encoder import DictEncoder, ObjectMarshalerFunc

    def fill(enc):
        enc.add_string("text", "hello")

    DictEncoder.encode(ObjectMarshalerFunc(fill))   # {"text": "hello"}

``DictEncoder`` and ``ListEncoder`` are the default destinations; they build
plain containers that ``json.dumps`` can serialize as strict JSON.  Non-finite
floats become the strings ``"NaN"``, ``"+Inf"`` and ``"-Inf"``; 32-bit floats
keep their own shortest decimal form, so a ``float`` field holding 0.1 is
stored as ``0.1``.
"""

from __future__ import annotations

import math
import struct
from typing import Any, Callable, Protocol


class ObjectEncoder(Protocol):
    def add_object(self, key: str, marshaler: "ObjectMarshaler") -> None: ...
    def add_array(self, key: str, marshaler: "ArrayMarshaler") -> None: ...
    def add_bool(self, key: str, value: bool) -> None: ...
    def add_string(self, key: str, value: str) -> None: ...
    def add_float32(self, key: str, value: float) -> None: ...
    def add_float64(self, key: str, value: float) -> None: ...
    def add_int32(self, key: str, value: int) -> None: ...
    def add_int64(self, key: str, value: int) -> None: ...
    def add_uint32(self, key: str, value: int) -> None: ...
    def add_uint64(self, key: str, value: int) -> None: ...


class ArrayEncoder(Protocol):
    def append_object(self, marshaler: "ObjectMarshaler") -> None: ...
    def append_array(self, marshaler: "ArrayMarshaler") -> None: ...
    def append_bool(self, value: bool) -> None: ...
    def append_string(self, value: str) -> None: ...
    def append_float32(self, value: float) -> None: ...
    def append_float64(self, value: float) -> None: ...
    def append_int32(self, value: int) -> None: ...
    def append_int64(self, value: int) -> None: ...
    def append_uint32(self, value: int) -> None: ...
    def append_uint64(self, value: int) -> None: ...


class ObjectMarshaler(Protocol):
    def marshal_log_object(self, enc: ObjectEncoder) -> None: ...


class ArrayMarshaler(Protocol):
    def marshal_log_array(self, enc: ArrayEncoder) -> None: ...


_NON_FINITE = {math.inf: "+Inf", -math.inf: "-Inf"}


def _finite_or_str(value: float) -> float | str:
    if math.isnan(value):
        return "NaN"
    return _NON_FINITE.get(value, value)


def _shortest_float32(value: float) -> float:
    """Shortest decimal that reads back as the same 32-bit float."""
    try:
        packed = struct.pack("<f", value)
    except OverflowError:
        return value
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        try:
            if struct.pack("<f", candidate) == packed:
                return candidate
        except OverflowError:
            continue
    return value


def _plain(kind: str, value: Any) -> Any:
    if kind == "float32":
        value = _finite_or_str(value)
        return value if isinstance(value, str) else _shortest_float32(value)
    if kind == "float64":
        return _finite_or_str(value)
    return value


class ObjectMarshalerFunc:
    """Adapt a plain ``fn(enc)`` callable into an :class:`ObjectMarshaler`."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[ObjectEncoder], None]) -> None:
        self._fn = fn

    def marshal_log_object(self, enc: ObjectEncoder) -> None:
        self._fn(enc)


class ArrayMarshalerFunc:
    """Adapt a plain ``fn(enc)`` callable into an :class:`ArrayMarshaler`."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[ArrayEncoder], None]) -> None:
        self._fn = fn

    def marshal_log_array(self, enc: ArrayEncoder) -> None:
        self._fn(enc)


class DictEncoder:
    """
    Object encoder that builds a plain ``dict``.

    Subclasses customise the stored representation through :meth:`_wrap`.
    A nested marshaler that raises leaves its key unwritten.
    """

    def __init__(self) -> None:
        self.result: dict[str, Any] = {}

    @classmethod
    def encode(cls, marshaler: ObjectMarshaler) -> dict[str, Any]:
        """Run *marshaler* against a fresh encoder and return what it built."""
        enc = cls()
        marshaler.marshal_log_object(enc)
        return enc.result

    def _wrap(self, kind: str, value: Any) -> Any:
        return _plain(kind, value)

    def _object_encoder(self) -> "DictEncoder":
        return DictEncoder()

    def _array_encoder(self) -> "ListEncoder":
        return ListEncoder()

    def add_object(self, key: str, marshaler: ObjectMarshaler) -> None:
        nested = self._object_encoder()
        marshaler.marshal_log_object(nested)
        self.result[key] = nested.result

    def add_array(self, key: str, marshaler: ArrayMarshaler) -> None:
        nested = self._array_encoder()
        marshaler.marshal_log_array(nested)
        self.result[key] = nested.result

    def add_bool(self, key: str, value: bool) -> None:
        self.result[key] = self._wrap("bool", bool(value))

    def add_string(self, key: str, value: str) -> None:
        self.result[key] = self._wrap("string", value)

    def add_float32(self, key: str, value: float) -> None:
        self.result[key] = self._wrap("float32", float(value))

    def add_float64(self, key: str, value: float) -> None:
        self.result[key] = self._wrap("float64", float(value))

    def add_int32(self, key: str, value: int) -> None:
        self.result[key] = self._wrap("int32", int(value))

    def add_int64(self, key: str, value: int) -> None:
        self.result[key] = self._wrap("int64", int(value))

    def add_uint32(self, key: str, value: int) -> None:
        self.result[key] = self._wrap("uint32", int(value))

    def add_uint64(self, key: str, value: int) -> None:
        self.result[key] = self._wrap("uint64", int(value))


class ListEncoder:
    """Array encoder that builds a plain ``list``.  See :class:`DictEncoder`."""

    def __init__(self) -> None:
        self.result: list[Any] = []

    @classmethod
    def encode(cls, marshaler: ArrayMarshaler) -> list[Any]:
        """Run *marshaler* against a fresh encoder and return what it built."""
        enc = cls()
        marshaler.marshal_log_array(enc)
        return enc.result

    def _wrap(self, kind: str, value: Any) -> Any:
        return _plain(kind, value)

    def _object_encoder(self) -> DictEncoder:
        return DictEncoder()

    def _array_encoder(self) -> "ListEncoder":
        return ListEncoder()

    def append_object(self, marshaler: ObjectMarshaler) -> None:
        nested = self._object_encoder()
        marshaler.marshal_log_object(nested)
        self.result.append(nested.result)

    def append_array(self, marshaler: ArrayMarshaler) -> None:
        nested = self._array_encoder()
        marshaler.marshal_log_array(nested)
        self.result.append(nested.result)

    def append_bool(self, value: bool) -> None:
        self.result.append(self._wrap("bool", bool(value)))

    def append_string(self, value: str) -> None:
        self.result.append(self._wrap("string", value))

    def append_float32(self, value: float) -> None:
        self.result.append(self._wrap("float32", float(value)))

    def append_float64(self, value: float) -> None:
        self.result.append(self._wrap("float64", float(value)))

    def append_int32(self, value: int) -> None:
        self.result.append(self._wrap("int32", int(value)))

    def append_int64(self, value: int) -> None:
        self.result.append(self._wrap("int64", int(value)))

    def append_uint32(self, value: int) -> None:
        self.result.append(self._wrap("uint32", int(value)))

    def append_uint64(self, value: int) -> None:
        self.result.append(self._wrap("uint64", int(value)))
