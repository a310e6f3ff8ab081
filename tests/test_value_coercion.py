from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
import uuid

import asyncpg
import pytest

from pgconsole.core.errors import ValidationError
from pgconsole.services.value_coercion import coerce_row, coerce_value, serialize_row, to_json_value


@pytest.mark.parametrize("data_type, raw, expected", [
    ("integer", "42", 42),
    ("bigint", 7, 7),
    ("smallint", 3.0, 3),
    ("numeric", "12.50", Decimal("12.50")),
    ("numeric", 3, Decimal("3")),
    ("double precision", "1.5", 1.5),
    ("boolean", "true", True),
    ("boolean", "off", False),
    ("boolean", 1, True),
    ("text", 12, "12"),
    ("character varying", True, "true"),
    ("date", "2026-03-01", date(2026, 3, 1)),
    ("date", "2026-03-01T10:00:00", date(2026, 3, 1)),
    ("time without time zone", "10:30:00", time(10, 30)),
    ("jsonb", '{"a": 1}', {"a": 1}),
    ("json", "not json", "not json"),
    ("jsonb", [1, 2], [1, 2]),
    ("bytea", "abc", b"abc"),
])
def test_known_types(data_type, raw, expected):
    assert coerce_value(data_type, raw) == expected


def test_none_passes_through_for_any_type():
    assert coerce_value("integer", None) is None
    assert coerce_value("text", None) is None


def test_unknown_type_is_left_alone():
    assert coerce_value("tsvector", "'a' 'b'") == "'a' 'b'"


def test_type_names_are_case_insensitive():
    assert coerce_value("INTEGER", "5") == 5


def test_uuid():
    value = "5f0c7a52-9a4b-4a36-8d7a-2f9d1c7c6f11"
    assert coerce_value("uuid", value) == uuid.UUID(value)


def test_text_dumps_structures_as_json():
    assert coerce_value("text", {"a": 1}) == '{"a": 1}'


def test_timestamptz_assumes_utc_for_naive_input():
    result = coerce_value("timestamp with time zone", "2026-03-01T10:00:00")
    assert result == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def test_timestamptz_accepts_zulu_suffix():
    result = coerce_value("timestamp with time zone", "2026-03-01T10:00:00Z")
    assert result.tzinfo is not None
    assert result.astimezone(timezone.utc).hour == 10


def test_timestamp_drops_offset_after_normalising_to_utc():
    result = coerce_value("timestamp without time zone", "2026-03-01T12:00:00+02:00")
    assert result == datetime(2026, 3, 1, 10, 0)
    assert result.tzinfo is None


@pytest.mark.parametrize("data_type, raw", [
    ("integer", "forty-two"),
    ("integer", 1.5),
    ("integer", True),
    ("numeric", "abc"),
    ("boolean", "maybe"),
    ("date", "yesterday"),
    ("uuid", "not-a-uuid"),
])
def test_invalid_values_raise_validation_error(data_type, raw):
    with pytest.raises(ValidationError):
        coerce_value(data_type, raw)


def test_error_names_the_column():
    with pytest.raises(ValidationError) as exc_info:
        coerce_value("integer", "x", column="quantity")
    assert "quantity" in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_coerce_row():
    column_types = {"id": "integer", "customer": "text", "total": "numeric"}
    row = coerce_row({"id": "1", "customer": "Alice", "total": "9.99"}, column_types)
    assert row == {"id": 1, "customer": "Alice", "total": Decimal("9.99")}


class TestInterval:

    @pytest.mark.parametrize("raw, expected", [
        ("1 day", timedelta(days=1)),
        ("3 hours", timedelta(hours=3)),
        ("2 weeks 1 day", timedelta(days=15)),
        ("1 day 02:30:00", timedelta(days=1, hours=2, minutes=30)),
        ("01:00:30.5", timedelta(hours=1, seconds=30.5)),
        ("-1 days +02:00:00", timedelta(days=-1, hours=2)),
        (90, timedelta(seconds=90)),
        ("90", timedelta(seconds=90)),
    ])
    def test_accepted_forms(self, raw, expected):
        assert coerce_value("interval", raw) == expected

    @pytest.mark.parametrize("raw", ["1 month", "2 years", "soon", "1 day later", ""])
    def test_rejected_forms(self, raw):
        with pytest.raises(ValidationError):
            coerce_value("interval", raw, column="duration")


def test_time_with_time_zone():
    assert coerce_value("time with time zone", "10:30:00+02:00").utcoffset() == timedelta(hours=2)
    assert coerce_value("time with time zone", "10:30:00").tzinfo == timezone.utc


class TestBytea:

    def test_hex_text_is_decoded(self):
        assert coerce_value("bytea", "\\x89504e47ff") == b"\x89PNG\xff"

    def test_plain_text_is_encoded(self):
        assert coerce_value("bytea", "hello") == b"hello"

    def test_bad_hex(self):
        with pytest.raises(ValidationError):
            coerce_value("bytea", "\\xzz")

    def test_result_form_is_accepted_back(self):
        stored = b"\x00\x01\xfe\xff"
        assert coerce_value("bytea", to_json_value(stored)) == stored


class TestBits:

    @pytest.mark.parametrize("data_type", ["bit", "bit varying"])
    def test_text(self, data_type):
        assert coerce_value(data_type, "1010") == asyncpg.BitString("1010")

    def test_grouped_text(self):
        assert coerce_value("bit varying", "1010 11") == asyncpg.BitString("101011")

    def test_invalid(self):
        with pytest.raises(ValidationError):
            coerce_value("bit", "1021")

    def test_result_form_is_accepted_back(self):
        bits = asyncpg.BitString("110010101")
        assert to_json_value(bits) == "110010101"
        assert coerce_value("bit varying", to_json_value(bits)) == bits


class TestRanges:

    def test_text_form(self):
        result = coerce_value("int4range", "[1,10)")
        assert result == asyncpg.Range(1, 10, lower_inc=True, upper_inc=False)

    def test_unbounded_side(self):
        result = coerce_value("numrange", "(,5.5]")
        assert result.lower is None
        assert result.upper == Decimal("5.5")
        assert result.upper_inc is True

    def test_quoted_timestamp_bounds(self):
        result = coerce_value("tstzrange", '["2026-01-01 10:00:00+00:00","2026-01-02 00:00:00+00:00")')
        assert result.lower == datetime(2026, 1, 1, 10, tzinfo=timezone.utc)
        assert result.upper == datetime(2026, 1, 2, tzinfo=timezone.utc)

    def test_empty(self):
        assert coerce_value("daterange", "empty").isempty is True
        assert coerce_value("daterange", {"empty": True}).isempty is True

    def test_object_form(self):
        result = coerce_value("daterange", {
            "lower": "2026-03-01", "upper": "2026-04-01", "lowerInc": True, "upperInc": False
        })
        assert result == asyncpg.Range(date(2026, 3, 1), date(2026, 4, 1))

    def test_invalid(self):
        with pytest.raises(ValidationError):
            coerce_value("int8range", "1 to 10")

    def test_result_form_is_accepted_back(self):
        stored = asyncpg.Range(5, 20, lower_inc=True, upper_inc=True)
        assert to_json_value(stored) == {
            "lower": 5, "upper": 20, "lowerInc": True, "upperInc": True, "empty": False
        }
        assert coerce_value("int4range", to_json_value(stored)) == stored


def test_serialize_row_leaves_plain_values_alone():
    row = {
        "id": 1,
        "total": Decimal("9.99"),
        "tags": ["a", "b"],
        "blobs": [b"\x01", None],
        "payload": {"k": "v"},
    }
    assert serialize_row(row) == {
        "id": 1,
        "total": Decimal("9.99"),
        "tags": ["a", "b"],
        "blobs": ["\\x01", None],
        "payload": {"k": "v"},
    }
