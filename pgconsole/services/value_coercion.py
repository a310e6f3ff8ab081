"""
Convert between JSON values and driver-typed values

The driver binds parameters with the server-declared column type, so form
input such as "42" for an integer column or an ISO string for a timestamp
must be converted first. Conversion is keyed on information_schema's
data_type; unknown types pass through unchanged.

In the other direction, result values the JSON encoder cannot handle
(bytea, bit strings, ranges) are turned into their text-like forms, which
the input converters accept back.
"""
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional
import asyncpg
import json
import re
import uuid

from pgconsole.core.errors import ValidationError

TRUE_STRINGS = {"true", "t", "yes", "y", "on", "1"}
FALSE_STRINGS = {"false", "f", "no", "n", "off", "0"}

TEXT_TYPES = {"text", "character varying", "character", "varchar", "char", "name", "citext"}


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    return int(str(value).strip())


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{value!r} is not a number")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValueError(f"{value!r} is not a boolean")


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))


def _to_timestamp(value: Any) -> datetime:
    parsed = _parse_datetime(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _to_timestamptz(value: Any) -> datetime:
    parsed = _parse_datetime(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _to_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value).strip().replace("Z", "+00:00"))


def _to_timetz(value: Any) -> time:
    parsed = _to_time(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


INTERVAL_UNITS = {
    "microsecond": "microseconds",
    "millisecond": "milliseconds",
    "second": "seconds",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
}

_INTERVAL_PART = re.compile(
    r"([+-]?\d+(?:\.\d+)?)\s*(microsecond|millisecond|second|minute|hour|day|week|mon|month|year)s?\b",
    re.I
)
_INTERVAL_CLOCK = re.compile(r"^([+-])?(\d+):(\d{1,2})(?::(\d{1,2}(?:\.\d+)?))?$")


def _to_interval(value: Any) -> timedelta:
    """
    Accepts a timedelta, a number of seconds (the JSON form of a result
    interval) or PostgreSQL text such as "1 day 02:30:00" or "3 hours".
    Months and years have no fixed length and are rejected.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError("boolean is not an interval")
    if isinstance(value, (int, float, Decimal)):
        return timedelta(seconds=float(value))

    text = str(value).strip()
    if not text:
        raise ValueError("empty interval")

    result = timedelta()
    for amount, unit in _INTERVAL_PART.findall(text):
        unit = unit.lower()
        if unit not in INTERVAL_UNITS:
            raise ValueError("month and year intervals are not supported, use days")
        result += timedelta(**{INTERVAL_UNITS[unit]: float(amount)})

    rest = _INTERVAL_PART.sub("", text).strip()
    if not rest:
        return result

    clock = _INTERVAL_CLOCK.match(rest)
    if clock:
        sign, hours, minutes, seconds = clock.groups()
        span = timedelta(hours=int(hours), minutes=int(minutes), seconds=float(seconds or 0))
        return result - span if sign == "-" else result + span

    if rest == text:
        try:
            return timedelta(seconds=float(text))
        except ValueError:
            pass
    raise ValueError(f"{value!r} is not an interval")


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())


def _to_json(value: Any) -> Any:
    # Text input holding a JSON document is stored as that document
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _to_bytes(value: Any) -> bytes:
    """\\x-prefixed hex is decoded, anything else is taken as UTF-8 text"""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    if text.startswith("\\x"):
        return bytes.fromhex(text[2:])
    return text.encode("utf-8")


def _to_bits(value: Any) -> asyncpg.BitString:
    if isinstance(value, asyncpg.BitString):
        return value
    if isinstance(value, bool):
        raise ValueError("boolean is not a bit string")
    text = str(value).strip()
    if set(text) - {"0", "1", " "}:
        raise ValueError(f"{value!r} is not a bit string")
    return asyncpg.BitString(text)


_RANGE_TEXT = re.compile(r'^([\[(])\s*("?)(.*?)\2\s*,\s*("?)(.*?)\4\s*([\])])$')


def _range_converter(bound: Callable[[Any], Any]) -> Callable[[Any], asyncpg.Range]:
    """
    Build a converter for a range type whose bounds are converted by `bound`.
    Accepts an asyncpg Range, the {lower, upper, lowerInc, upperInc, empty}
    object produced for results, or PostgreSQL text such as "[1,10)".
    """

    def optional(raw: Any) -> Optional[Any]:
        if raw is None or raw == "":
            return None
        return bound(raw)

    def convert(value: Any) -> asyncpg.Range:
        if isinstance(value, asyncpg.Range):
            return value

        if isinstance(value, dict):
            if value.get("empty"):
                return asyncpg.Range(empty=True)
            return asyncpg.Range(
                optional(value.get("lower")),
                optional(value.get("upper")),
                lower_inc=bool(value.get("lowerInc", value.get("lower_inc", True))),
                upper_inc=bool(value.get("upperInc", value.get("upper_inc", False)))
            )

        text = str(value).strip()
        if text.lower() == "empty":
            return asyncpg.Range(empty=True)

        match = _RANGE_TEXT.match(text)
        if not match:
            raise ValueError(f"{value!r} is not a range")
        opening, _, lower, _, upper, closing = match.groups()
        return asyncpg.Range(
            optional(lower),
            optional(upper),
            lower_inc=opening == "[",
            upper_inc=closing == "]"
        )

    return convert


CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "smallint": _to_int,
    "integer": _to_int,
    "bigint": _to_int,
    "numeric": _to_decimal,
    "decimal": _to_decimal,
    "real": _to_float,
    "double precision": _to_float,
    "boolean": _to_bool,
    "date": _to_date,
    "timestamp without time zone": _to_timestamp,
    "timestamp with time zone": _to_timestamptz,
    "time without time zone": _to_time,
    "time with time zone": _to_timetz,
    "interval": _to_interval,
    "uuid": _to_uuid,
    "json": _to_json,
    "jsonb": _to_json,
    "bytea": _to_bytes,
    "bit": _to_bits,
    "bit varying": _to_bits,
    "int4range": _range_converter(_to_int),
    "int8range": _range_converter(_to_int),
    "numrange": _range_converter(_to_decimal),
    "daterange": _range_converter(_to_date),
    "tsrange": _range_converter(_to_timestamp),
    "tstzrange": _range_converter(_to_timestamptz),
}


def coerce_value(data_type: str, value: Any, column: str = "") -> Any:
    """Convert a single value for a column of the given declared type"""
    if value is None:
        return None

    normalized = data_type.lower()
    if normalized in TEXT_TYPES:
        return _to_text(value)

    converter = CONVERTERS.get(normalized)
    if converter is None:
        return value

    try:
        return converter(value)
    except (ValueError, TypeError) as e:
        label = f"column '{column}'" if column else data_type
        raise ValidationError(f"Invalid value for {label} ({data_type}): {e}")


def coerce_row(data: Dict[str, Any], column_types: Dict[str, str]) -> Dict[str, Any]:
    """Convert every value of a record; keys must already be known columns"""
    return {
        column: coerce_value(column_types[column], value, column)
        for column, value in data.items()
    }


def to_json_value(value: Any) -> Any:
    """Driver result value in a form the JSON encoder accepts"""
    if isinstance(value, (bytes, bytearray)):
        return "\\x" + bytes(value).hex()
    if isinstance(value, asyncpg.BitString):
        return value.as_string().replace(" ", "")
    if isinstance(value, asyncpg.Range):
        return {
            "lower": to_json_value(value.lower),
            "upper": to_json_value(value.upper),
            "lowerInc": value.lower_inc,
            "upperInc": value.upper_inc,
            "empty": value.isempty,
        }
    if isinstance(value, list):
        return [to_json_value(item) for item in value]
    return value


def serialize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {column: to_json_value(value) for column, value in row.items()}
