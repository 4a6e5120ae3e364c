"""
Reflective protobuf → structured encoder traversal.

Walks a message through its descriptor and emits every present field as a
call on an :class:`~protolog.core.encoder.ObjectEncoder`.  Nothing is
serialized up front: :meth:`Options.marshaler_of` returns a marshaler and
the walk happens when a destination encoder invokes it.

    from protolog.core.encoder   import DictEncoder
    from protolog.core.marshaler import Options

    DictEncoder.encode(Options(typed=True).marshaler_of(msg))
    # {"@type": "type.googleapis.com/pkg.Msg", "text": "hello", ...}

Field keys are the descriptor's JSON names; fields are emitted in field-number
order.  ``google.protobuf.Any`` values
are unpacked and emitted as their payload, always prefixed with ``@type``.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from google.protobuf import any_pb2, descriptor_pool, message_factory
from google.protobuf.descriptor import Descriptor, FieldDescriptor
from google.protobuf.message import DecodeError, Message

from .config import resolve_flag
from .encoder import ArrayEncoder, ObjectEncoder, ObjectMarshaler, ObjectMarshalerFunc
from .errors import AnyUnpackError, UnsupportedFieldKindError

TYPE_URL_PREFIX = "type.googleapis.com/"
TYPE_KEY        = "@type"

_ANY_FULL_NAME = any_pb2.Any.DESCRIPTOR.full_name

_INT32_KINDS  = (FieldDescriptor.TYPE_INT32, FieldDescriptor.TYPE_SINT32, FieldDescriptor.TYPE_SFIXED32)
_UINT32_KINDS = (FieldDescriptor.TYPE_UINT32, FieldDescriptor.TYPE_FIXED32)
_INT64_KINDS  = (FieldDescriptor.TYPE_INT64, FieldDescriptor.TYPE_SINT64, FieldDescriptor.TYPE_SFIXED64)
_UINT64_KINDS = (FieldDescriptor.TYPE_UINT64, FieldDescriptor.TYPE_FIXED64)


class _FieldEncoder:
    """Presents one key of an object encoder through the array encoder shape."""

    __slots__ = ("_enc", "_key")

    def __init__(self, enc: ObjectEncoder, key: str) -> None:
        self._enc = enc
        self._key = key

    def append_object(self, marshaler):
        self._enc.add_object(self._key, marshaler)

    def append_array(self, marshaler):
        self._enc.add_array(self._key, marshaler)

    def append_bool(self, value):
        self._enc.add_bool(self._key, value)

    def append_string(self, value):
        self._enc.add_string(self._key, value)

    def append_float32(self, value):
        self._enc.add_float32(self._key, value)

    def append_float64(self, value):
        self._enc.add_float64(self._key, value)

    def append_int32(self, value):
        self._enc.add_int32(self._key, value)

    def append_int64(self, value):
        self._enc.add_int64(self._key, value)

    def append_uint32(self, value):
        self._enc.add_uint32(self._key, value)

    def append_uint64(self, value):
        self._enc.add_uint64(self._key, value)


def _is_map(fd: FieldDescriptor) -> bool:
    return (
        fd.type == FieldDescriptor.TYPE_MESSAGE
        and fd.message_type.GetOptions().map_entry
    )


def _map_key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _enum_name(fd: FieldDescriptor, number: int) -> str:
    value = fd.enum_type.values_by_number.get(number)
    if value is None:
        # Open enums may carry numbers the schema does not name.
        return str(number)
    return value.name


def append_field(enc: ArrayEncoder, fd: FieldDescriptor, value: Any, typed: bool = False) -> None:
    """Route one present field to the map, list or singular encoding path."""
    if _is_map(fd):
        enc.append_object(MapMarshaler(fd.message_type.fields_by_name["value"], value, typed))
    elif fd.is_repeated:
        enc.append_array(ListMarshaler(fd, value, typed))
    else:
        append_value(enc, fd, value, typed)


def append_value(enc: ArrayEncoder, fd: FieldDescriptor, value: Any, typed: bool = False) -> None:
    """
    Emit one singular value according to the field's declared kind.

    Every wire variant of a given width and signedness collapses to the same
    primitive call.  Nested messages inherit *typed*.  Raises
    :class:`UnsupportedFieldKindError` for kinds outside the table (proto2
    groups).
    """
    kind = fd.type

    if kind == FieldDescriptor.TYPE_MESSAGE:
        enc.append_object(MessageMarshaler(value, typed))
    elif kind == FieldDescriptor.TYPE_BOOL:
        enc.append_bool(value)
    elif kind == FieldDescriptor.TYPE_BYTES:
        enc.append_string(base64.b64encode(value).decode("ascii"))
    elif kind == FieldDescriptor.TYPE_ENUM:
        enc.append_string(_enum_name(fd, value))
    elif kind == FieldDescriptor.TYPE_FLOAT:
        enc.append_float32(value)
    elif kind == FieldDescriptor.TYPE_DOUBLE:
        enc.append_float64(value)
    elif kind == FieldDescriptor.TYPE_STRING:
        enc.append_string(value)
    elif kind in _INT32_KINDS:
        enc.append_int32(value)
    elif kind in _UINT32_KINDS:
        enc.append_uint32(value)
    elif kind in _INT64_KINDS:
        enc.append_int64(value)
    elif kind in _UINT64_KINDS:
        enc.append_uint64(value)
    else:
        raise UnsupportedFieldKindError(fd.full_name, kind)


class ListMarshaler:
    """Array marshaler over the elements of a repeated field."""

    __slots__ = ("desc", "values", "typed")

    def __init__(self, desc: FieldDescriptor, values: Any, typed: bool = False) -> None:
        self.desc   = desc
        self.values = values
        self.typed  = typed

    def marshal_log_array(self, enc: ArrayEncoder) -> None:
        for value in self.values:
            append_value(enc, self.desc, value, self.typed)


class MapMarshaler:
    """Object marshaler over the entries of a map field, keyed by string form."""

    __slots__ = ("value_desc", "entries", "typed")

    def __init__(self, value_desc: FieldDescriptor, entries: Any, typed: bool = False) -> None:
        self.value_desc = value_desc
        self.entries    = entries
        self.typed      = typed

    def marshal_log_object(self, enc: ObjectEncoder) -> None:
        for key in self.entries:
            append_value(_FieldEncoder(enc, _map_key(key)), self.value_desc, self.entries[key], self.typed)


def _unpack_any(wrapper: Message) -> Message:
    """Resolve an ``Any`` to a concrete message from the default pool."""
    type_url = wrapper.type_url
    if not type_url:
        raise AnyUnpackError("invalid empty type URL", type_url)

    full_name = type_url.rpartition("/")[2]
    try:
        desc: Descriptor = descriptor_pool.Default().FindMessageTypeByName(full_name)
    except KeyError as e:
        raise AnyUnpackError(
            f"unable to resolve {type_url!r}: message type not found", type_url
        ) from e

    payload = message_factory.GetMessageClass(desc)()
    try:
        payload.ParseFromString(wrapper.value)
    except DecodeError as e:
        raise AnyUnpackError(f"unable to unpack {type_url!r}: {e}", type_url) from e
    return payload


class MessageMarshaler:
    """
    Object marshaler over the present fields of one message.

    ``typed`` is the marshal option handed down to nested messages; ``prefix``
    decides whether this message itself starts with ``@type`` and defaults to
    ``typed``.  When set, ``@type`` is always the first key written.

    An ``Any`` contributes no fields of its own: its payload is marshaled in
    its place with ``prefix`` forced on.
    """

    __slots__ = ("message", "typed", "prefix")

    def __init__(self, message: Message, typed: bool = False, prefix: bool | None = None) -> None:
        self.message = message
        self.typed   = typed
        self.prefix  = typed if prefix is None else prefix

    def marshal_log_object(self, enc: ObjectEncoder) -> None:
        desc = self.message.DESCRIPTOR

        if desc.full_name == _ANY_FULL_NAME:
            MessageMarshaler(_unpack_any(self.message), self.typed, prefix=True).marshal_log_object(enc)
            return

        if self.prefix:
            enc.add_string(TYPE_KEY, TYPE_URL_PREFIX + desc.full_name)

        for fd, value in self.message.ListFields():
            append_field(_FieldEncoder(enc, fd.json_name), fd, value, self.typed)


_EMPTY = ObjectMarshalerFunc(lambda enc: None)


@dataclass(frozen=True)
class Options:
    """Marshal options.  ``typed`` prefixes every encoded message with ``@type``."""

    typed: bool = False

    @classmethod
    def from_env(cls, typed: bool | None = None) -> "Options":
        """Build options from *typed*, falling back to ``$PROTOLOG_TYPED``."""
        return cls(typed=resolve_flag(typed, "PROTOLOG_TYPED", False))

    def marshaler_of(self, msg: Message | None) -> ObjectMarshaler:
        """Return a deferred marshaler for *msg*; ``None`` encodes as ``{}``."""
        if msg is None:
            return _EMPTY
        return MessageMarshaler(msg, typed=self.typed)


def marshaler_of(msg: Message | None) -> ObjectMarshaler:
    """Shorthand for ``Options().marshaler_of(msg)``."""
    return Options().marshaler_of(msg)
