"""Tests for the JSON log formatter and logger setup."""

import io
import json
import logging
import math
import unittest
from unittest.mock import patch

from google.protobuf import any_pb2

from protolog import FieldFormatter, get_logger
from protolog.core.encoder import ObjectMarshalerFunc
from protolog.field import Field, FieldType, message, messages, typed_message

from testprotos import MESSAGE_TYPE_URL, Marshaler, Message


def _reject(token):
    raise ValueError(f"non-standard JSON constant {token}")


def _own_handlers(log):
    return [h for h in log.handlers if isinstance(h.formatter, FieldFormatter)]


class TestFieldFormatter(unittest.TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.log = get_logger("protolog.test.handler", level=logging.DEBUG, stream=self.stream)

    def tearDown(self):
        for h in _own_handlers(self.log):
            self.log.removeHandler(h)

    def _lines(self):
        return [json.loads(line, parse_constant=_reject) for line in self.stream.getvalue().splitlines()]

    def test_record_with_fields(self):
        self.log.info("order %s", "placed", extra={"fields": [
            message("order", Marshaler(string="o-1", array=["a", "b"], bytes=b"\x00\x01")),
            typed_message("event", Message(text="hello")),
        ]})
        (line,) = self._lines()
        self.assertEqual(line["level"], "INFO")
        self.assertEqual(line["logger"], "protolog.test.handler")
        self.assertEqual(line["msg"], "order placed")
        self.assertEqual(line["order"], {"array": ["a", "b"], "string": "o-1", "bytes": "AAE="})
        self.assertEqual(line["event"], {"@type": MESSAGE_TYPE_URL, "text": "hello"})
        self.assertEqual(list(line)[:4], ["ts", "level", "logger", "msg"])

    def test_record_without_fields(self):
        self.log.warning("plain")
        (line,) = self._lines()
        self.assertEqual(line["msg"], "plain")
        self.assertEqual(set(line), {"ts", "level", "logger", "msg"})

    def test_failed_field_replaced_by_error(self):
        self.log.info("bad", extra={"fields": [
            message("broken", any_pb2.Any()),
            messages("items", [Message(text="ok")]),
        ]})
        (line,) = self._lines()
        self.assertNotIn("broken", line)
        self.assertIn("empty type URL", line["brokenError"])
        self.assertEqual(line["items"], [{"text": "ok"}])

    def test_floats_render_as_strict_json(self):
        self.log.info("floats", extra={"fields": [
            message("m", Marshaler(float=0.1, double=math.nan)),
            message("n", Marshaler(double=-math.inf)),
        ]})
        (line,) = self._lines()
        self.assertEqual(line["m"], {"float": 0.1, "double": "NaN"})
        self.assertEqual(line["n"], {"double": "-Inf"})

    def test_failed_inline_field_leaves_no_partial_keys(self):
        def partial(enc):
            enc.add_string("traceId", "abc")
            raise RuntimeError("inline failed")

        self.log.info("bad", extra={"fields": [
            Field("", FieldType.INLINE, ObjectMarshalerFunc(partial)),
            message("m", Message(text="ok")),
        ]})
        (line,) = self._lines()
        self.assertNotIn("traceId", line)
        self.assertNotIn("Error", line)
        self.assertEqual(line["fieldError"], "inline failed")
        self.assertEqual(line["m"], {"text": "ok"})

    def test_filtered_record_never_marshals(self):
        self.log.setLevel(logging.WARNING)
        with patch("protolog.core.marshaler.MessageMarshaler.marshal_log_object") as walk:
            self.log.info("skipped", extra={"fields": [message("m", Message(text="x"))]})
        walk.assert_not_called()
        self.assertEqual(self.stream.getvalue(), "")

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            self.log.exception("failed")
        (line,) = self._lines()
        self.assertIn("ValueError: boom", line["exc"])

    def test_formatter_standalone(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hi", None, None)
        record.fields = [message("m", Message(text="t"))]
        line = json.loads(FieldFormatter().format(record))
        self.assertEqual(line["m"], {"text": "t"})


class TestGetLogger(unittest.TestCase):
    def tearDown(self):
        log = logging.getLogger("protolog.test.setup")
        for h in _own_handlers(log):
            log.removeHandler(h)

    def test_no_duplicate_handlers(self):
        log1 = get_logger("protolog.test.setup", stream=io.StringIO())
        log2 = get_logger("protolog.test.setup", stream=io.StringIO())
        self.assertIs(log1, log2)
        self.assertEqual(len(_own_handlers(log2)), 1)
        self.assertFalse(log2.propagate)

    def test_level_from_env(self):
        with patch.dict("os.environ", {"PROTOLOG_LEVEL": "debug"}):
            log = get_logger("protolog.test.setup", stream=io.StringIO())
        self.assertEqual(log.level, logging.DEBUG)

    def test_explicit_level_wins(self):
        with patch.dict("os.environ", {"PROTOLOG_LEVEL": "DEBUG"}):
            log = get_logger("protolog.test.setup", level="ERROR", stream=io.StringIO())
        self.assertEqual(log.level, logging.ERROR)


if __name__ == "__main__":
    unittest.main()
