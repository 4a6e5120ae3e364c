"""
Log fields carrying protobuf messages.

Each helper returns a :class:`Field` wrapping a deferred marshaler, so the
message is only walked if the record is actually formatted::

    from protolog.field import message, typed_messages

    logger.info("order placed", extra={"fields": [
        message("order", order),
        typed_messages("items", order.items),
    ]})
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable

from google.protobuf.message import Message

from ..core.encoder   import ArrayEncoder, ObjectEncoder
from ..core.marshaler import Options


class FieldType(enum.Enum):
    OBJECT = "object"
    ARRAY  = "array"
    INLINE = "inline"   # marshaler writes straight into the parent object


@dataclass(frozen=True)
class Field:
    """A single named log field backed by a deferred marshaler."""
    key:       str
    type:      FieldType
    marshaler: Any

    def add_to(self, enc: ObjectEncoder) -> None:
        """Write this field into *enc*; marshaler errors propagate."""
        if self.type is FieldType.OBJECT:
            enc.add_object(self.key, self.marshaler)
        elif self.type is FieldType.ARRAY:
            enc.add_array(self.key, self.marshaler)
        else:
            self.marshaler.marshal_log_object(enc)


class _MessagesMarshaler:
    """Array marshaler emitting one independently marshaled object per message."""

    __slots__ = ("options", "messages")

    def __init__(self, options: Options, messages: Iterable[Message]) -> None:
        self.options  = options
        self.messages = messages

    def marshal_log_array(self, enc: ArrayEncoder) -> None:
        for msg in self.messages:
            enc.append_object(self.options.marshaler_of(msg))


def message(key: str, msg: Message | None) -> Field:
    """Field for *msg* under *key*.  ``None`` logs an empty object."""
    return Field(key, FieldType.OBJECT, Options().marshaler_of(msg))


def typed_message(key: str, msg: Message | None) -> Field:
    """Like :func:`message`, with ``@type`` written before the message fields."""
    return Field(key, FieldType.OBJECT, Options(typed=True).marshaler_of(msg))


def messages(key: str, msgs: Iterable[Message]) -> Field:
    """Field logging *msgs* as an array of objects, in order."""
    return Field(key, FieldType.ARRAY, _MessagesMarshaler(Options(), list(msgs)))


def typed_messages(key: str, msgs: Iterable[Message]) -> Field:
    """Like :func:`messages`, each element carrying its own ``@type``."""
    return Field(key, FieldType.ARRAY, _MessagesMarshaler(Options(typed=True), list(msgs)))
