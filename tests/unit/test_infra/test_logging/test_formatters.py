"""Tests for the JSON log formatter."""

import json
import logging
import sys

from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from objstore.infra.logging.formatters import JSONFormatter


def make_record(msg: str = "File uploaded to storage", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="objstore.infra.storage.client",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "objstore.infra.storage.client"
        assert data["message"] == "File uploaded to storage"
        assert data["timestamp"].endswith("Z")
        assert "trace_id" not in data

    def test_message_args_are_interpolated(self):
        record = make_record("%s out of %s presigned URLs failed to generate")
        record.args = (1, 3)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "1 out of 3 presigned URLs failed to generate"

    def test_extra_and_static_fields(self):
        formatter = JSONFormatter(static={"service": "objstore"})

        data = json.loads(formatter.format(make_record(key="invoice-42/scan.pdf", size_bytes=8)))

        assert data["service"] == "objstore"
        assert data["key"] == "invoice-42/scan.pdf"
        assert data["size_bytes"] == 8
        assert "pathname" not in data

    def test_exception_stays_on_one_line(self):
        try:
            raise RuntimeError("signing failed")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "RuntimeError: signing failed" in json.loads(output)["exception"]

    def test_trace_correlation(self):
        span_context = SpanContext(
            trace_id=0x1234,
            span_id=0x5678,
            is_remote=False,
            trace_flags=TraceFlags(TraceFlags.SAMPLED),
        )

        with trace.use_span(NonRecordingSpan(span_context)):
            data = json.loads(JSONFormatter().format(make_record()))

        assert data["trace_id"] == format(0x1234, "032x")
        assert data["span_id"] == format(0x5678, "016x")
