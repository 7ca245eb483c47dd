"""
Tests for log formatting.
"""

import logging

import orjson

from banddesigner.core.logging import ConsoleFormatter, JSONFormatter, LoggerMixin, extra_fields


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="banddesigner.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=12,
        msg="Object %s failed",
        args=("sum",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFields:
    def test_only_caller_context(self):
        record = make_record(band_id="detail", _private=1)
        assert extra_fields(record) == {"band_id": "detail"}

    def test_plain_record_has_none(self):
        assert extra_fields(make_record()) == {}


class TestJSONFormatter:
    def test_message_and_level(self):
        data = orjson.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "WARNING"
        assert data["logger"] == "banddesigner.test"
        assert data["message"] == "Object sum failed"
        assert "extra" not in data

    def test_extra_nested(self):
        data = orjson.loads(JSONFormatter().format(make_record(band_id="detail", object_id="sum")))
        assert data["extra"] == {"band_id": "detail", "object_id": "sum"}


class TestConsoleFormatter:
    def test_context_appended(self):
        formatter = ConsoleFormatter("%(levelname)s %(message)s", colors=False)
        text = formatter.format(make_record(band_id="detail", object_id="sum"))
        assert text == "WARNING Object sum failed [band_id=detail object_id=sum]"

    def test_colors_do_not_leak_into_record(self):
        formatter = ConsoleFormatter("%(levelname)s %(message)s", colors=True)
        record = make_record()
        text = formatter.format(record)
        assert "\033[33m" in text
        assert record.levelname == "WARNING"


class Widget(LoggerMixin):
    pass


def test_logger_mixin_named_after_class():
    assert Widget().logger.name == f"{__name__}.Widget"
