"""Log field constructors for protobuf messages and trace context."""

from .message import Field, FieldType, message, typed_message, messages, typed_messages  # noqa: F401
from .        import trace  # noqa: F401
