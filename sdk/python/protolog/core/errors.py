"""
Exceptions raised while marshaling protobuf messages into log fields.

Errors raised by the destination encoder or by caller-supplied marshalers
are never wrapped; they propagate through the traversal unchanged.
"""

from __future__ import annotations


class MarshalError(RuntimeError):
    """Base class for failures raised by the message traversal."""


class UnsupportedFieldKindError(MarshalError):
    """A field's declared kind has no entry in the value encoding table."""

    def __init__(self, full_name: str, kind: int) -> None:
        super().__init__(f"cannot marshal value for protobuf field {full_name}")
        self.full_name = full_name
        self.kind      = kind


class AnyUnpackError(MarshalError):
    """A ``google.protobuf.Any`` payload could not be resolved to a message."""

    def __init__(self, message: str, type_url: str = "") -> None:
        super().__init__(message)
        self.type_url = type_url
