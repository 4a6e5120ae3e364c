"""
protolog — structured logging for protobuf messages.

Turns any protobuf message into a structured log field without per-message
serialization code.  Messages are walked through their descriptors, lazily,
only when a record is actually written.

Usage::

    import protolog
    from protolog.field import message, typed_message, messages, trace

    log = protolog.get_logger("orders")

    log.info("order placed", extra={"fields": [
        message("order", order),                  # {"id": "o-1", "total": 12.5}
        typed_message("event", event),            # {"@type": "type.googleapis.com/...", ...}
        messages("items", order.items),           # [{...}, {...}]
        trace.context(),                          # traceId / spanId, if a span is active
    ]})

Driving your own encoder::

    from protolog.core import DictEncoder, Options

    DictEncoder.encode(Options(typed=True).marshaler_of(order))

Encoding rules:

- Keys are the fields' JSON names; unset fields are skipped.
- ``bytes`` → base64 text, enums → symbolic name, maps → objects keyed by
  the string form of the map key, repeated fields → arrays.
- ``google.protobuf.Any`` is replaced by its payload, prefixed with ``@type``.

Environment::

    PROTOLOG_LEVEL=DEBUG      # default level for get_logger()
    PROTOLOG_TYPED=1          # Options.from_env() returns typed options
"""

from __future__ import annotations

from .core    import Options, marshaler_of, MarshalError  # noqa: F401
from .handler import FieldFormatter, get_logger          # noqa: F401
