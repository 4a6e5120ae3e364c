"""
JSON log formatting for protolog fields.

Fields travel on the record through ``extra={"fields": [...]}`` and are only
marshaled when the record is formatted, so records below the logger's level
never walk their messages::

    import protolog
    from protolog.field import message

    log = protolog.get_logger("orders")
    log.info("order placed", extra={"fields": [message("order", order)]})
    # {"ts": "...", "level": "INFO", "logger": "orders", "msg": "order placed",
    #  "order": {"id": "o-1", "items": [...]}}

A field that fails to encode is replaced by ``<key>Error`` (``fieldError`` for
an inline field, which has no key) carrying the error text; the remaining
fields are still written.  Non-finite floats are written as ``"NaN"``,
``"+Inf"`` and ``"-Inf"``, so every line is strict JSON.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO

from .core.config  import resolve_level
from .core.encoder import DictEncoder

logger = logging.getLogger("protolog")

FIELDS_ATTR     = "fields"
FIELD_ERROR_KEY = "fieldError"


class FieldFormatter(logging.Formatter):
    """Render a record and its protolog fields as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        enc = DictEncoder()
        enc.add_string("ts", datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat())
        enc.add_string("level", record.levelname)
        enc.add_string("logger", record.name)
        enc.add_string("msg", record.getMessage())

        for f in getattr(record, FIELDS_ATTR, None) or ():
            # Encode aside so a failing inline field leaves no partial keys.
            scratch = DictEncoder()
            try:
                f.add_to(scratch)
            except Exception as e:
                logger.debug("Field %r failed to encode: %s", f.key, e)
                enc.add_string(f"{f.key}Error" if f.key else FIELD_ERROR_KEY, str(e))
            else:
                enc.result.update(scratch.result)

        if record.exc_info:
            enc.add_string("exc", self.formatException(record.exc_info))

        return json.dumps(enc.result, ensure_ascii=False, allow_nan=False)


def get_logger(
    name:   str,
    level:  int | str | None = None,
    stream: IO[str] | None   = None,
) -> logging.Logger:
    """
    Return *name*'s logger writing JSON lines through :class:`FieldFormatter`.

    :param name:   Logger name.
    :param level:  Level number or name.  Defaults to ``$PROTOLOG_LEVEL`` or INFO.
    :param stream: Output stream, ``sys.stderr`` by default.
    :returns:      The configured logger.  Calling again does not add handlers.
    """
    log = logging.getLogger(name)
    log.setLevel(resolve_level(level))
    if any(isinstance(h.formatter, FieldFormatter) for h in log.handlers):
        return log

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(FieldFormatter())
    log.addHandler(handler)
    log.propagate = False
    return log
