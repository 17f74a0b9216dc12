"""Classification and coercion of stored configuration values.

Values in a store are plain Python objects: whatever ``json.load`` produced,
or whatever a caller handed to ``ConfigStore.set_value``. Readers never
inspect them ad hoc; they classify a value into a ``Kind`` first and
dispatch on that tag.

String rendering uses Go's formatting conventions, so services written in
either language read the same file the same way:

- floats print in positional notation with the shortest round-trip digits
  (``8080.0`` -> ``"8080"``, ``1e21`` -> ``"1000000000000000000000"``)
- durations print as ``"1h2m3.5s"``, ``"250ms"``, ``"0s"``
- timestamps print as RFC 3339 with second precision
"""

import math
import re
import struct
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from .errors import ConversionError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
UINT64_MAX = 2 ** 64 - 1

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")
_FLOAT_LITERAL = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000


class Kind(Enum):
    """Dynamic type of a stored value."""
    STRING = "string"
    BOOL = "bool"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DURATION = "duration"
    TIMESTAMP = "timestamp"
    NULL = "null"
    OTHER = "other"
    ABSENT = "absent"


class _Absent:
    """Sentinel type for a missing section or key."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


class Float32(float):
    """A float held at single precision.

    The value is rounded to the nearest IEEE 754 binary32 on construction;
    magnitudes beyond the binary32 range become infinities.
    """

    def __new__(cls, value=0.0):
        number = float(value)
        try:
            number = struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError:
            number = math.copysign(math.inf, number)
        return super().__new__(cls, number)

    def __repr__(self) -> str:
        return f"Float32({float(self)!r})"


def kind_of(value: Any) -> Kind:
    """Classify a stored value."""
    if value is ABSENT:
        return Kind.ABSENT
    if value is None:
        return Kind.NULL
    # bool is an int subclass, so it must be tested first
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return Kind.INT64
        if 0 <= value <= UINT64_MAX:
            return Kind.UINT64
        return Kind.OTHER
    if isinstance(value, Float32):
        return Kind.FLOAT32
    if isinstance(value, float):
        return Kind.FLOAT64
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, timedelta):
        return Kind.DURATION
    if isinstance(value, datetime):
        return Kind.TIMESTAMP
    return Kind.OTHER


def wrap_int64(number: int) -> int:
    """Wrap an integer into the signed 64-bit range (two's complement)."""
    return ((number - INT64_MIN) % 2 ** 64) + INT64_MIN


def format_float(number: float) -> str:
    """Shortest round-trip decimal text for a float, never in exponent form."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    text = format(Decimal(repr(float(number))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_fraction(whole: int, frac: int, digits: int) -> str:
    if not frac:
        return str(whole)
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_duration(delta: timedelta) -> str:
    """Render a duration the way Go's ``time.Duration.String`` does.

    Durations under a second use the largest fitting unit among ns, µs and
    ms with a trimmed fraction. Longer ones are written as hours, minutes
    and (fractional) seconds, e.g. ``"1h0m0s"`` or ``"2m3.5s"``.
    """
    nanos = ((delta.days * 86400 + delta.seconds) * _NANOS_PER_SECOND
             + delta.microseconds * _NANOS_PER_MICRO)
    if nanos == 0:
        return "0s"

    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _NANOS_PER_SECOND:
        if nanos < _NANOS_PER_MICRO:
            return f"{sign}{nanos}ns"
        if nanos < _NANOS_PER_MILLI:
            whole, frac = divmod(nanos, _NANOS_PER_MICRO)
            return f"{sign}{_format_fraction(whole, frac, 3)}µs"
        whole, frac = divmod(nanos, _NANOS_PER_MILLI)
        return f"{sign}{_format_fraction(whole, frac, 6)}ms"

    total_seconds, frac = divmod(nanos, _NANOS_PER_SECOND)
    total_minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(total_minutes, 60)

    text = f"{_format_fraction(seconds, frac, 9)}s"
    if total_minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 with second precision. Naive datetimes are taken as UTC."""
    offset = moment.utcoffset()
    if offset is None:
        offset = timedelta(0)
        moment = moment.replace(tzinfo=timezone.utc)

    text = (f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
            f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}")

    offset_minutes = int(offset.total_seconds()) // 60
    if offset_minutes == 0:
        return text + "Z"
    sign = "+" if offset_minutes > 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def as_string(value: Any) -> str:
    """Render any stored value as text.

    Never raises: null, absent and unsupported values render as ``""``.
    """
    kind = kind_of(value)
    if kind is Kind.STRING:
        return value
    if kind in (Kind.INT64, Kind.UINT64):
        return str(int(value))
    if kind is Kind.BOOL:
        return "true" if value else "false"
    if kind in (Kind.FLOAT32, Kind.FLOAT64):
        return format_float(value)
    if kind is Kind.DURATION:
        return format_duration(value)
    if kind is Kind.TIMESTAMP:
        return format_timestamp(value)
    return ""


def parse_int(text: str) -> int:
    """Parse a base-10 integer literal into the signed 64-bit range.

    Only ASCII digits with an optional sign are accepted: no surrounding
    whitespace, no ``_`` separators.

    Raises:
        ValueError: The text is not a literal or is out of range.
    """
    if not _INT_LITERAL.fullmatch(text):
        raise ValueError(f"invalid literal for int() with base 10: {text!r}")
    number = int(text, 10)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f"value out of range for int64: {text!r}")
    return number


def parse_float(text: str) -> float:
    """Parse a base-10 floating point literal.

    Accepts decimal and exponent forms plus ``inf``/``infinity``/``nan`` in
    any case. Finite literals that overflow a double are rejected.

    Raises:
        ValueError: The text is not a literal or is out of range.
    """
    if not _FLOAT_LITERAL.fullmatch(text):
        raise ValueError(f"could not convert string to float: {text!r}")
    number = float(text)
    if math.isinf(number) and "inf" not in text.lower():
        raise ValueError(f"value out of range for float64: {text!r}")
    return number


def as_float(value: Any, section: str, key: str) -> float:
    """Coerce a stored value to float.

    Strings go through ``parse_float`` and its ``ValueError`` propagates.
    Integers, booleans and every non-float kind raise ``ConversionError``.
    """
    kind = kind_of(value)
    if kind is Kind.STRING:
        return parse_float(value)
    if kind in (Kind.FLOAT32, Kind.FLOAT64):
        return float(value)
    raise ConversionError("float64", section, key)


def as_int(value: Any, section: str, key: str) -> int:
    """Coerce a stored value to a signed 64-bit int.

    Strings go through ``parse_int`` and its ``ValueError`` propagates.
    Unsigned values above the signed range wrap around, floats truncate
    toward zero; neither is range-checked.
    """
    kind = kind_of(value)
    if kind is Kind.STRING:
        return parse_int(value)
    if kind is Kind.INT64:
        return int(value)
    if kind is Kind.UINT64:
        return wrap_int64(value)
    if kind is Kind.BOOL:
        return 1 if value else 0
    if kind in (Kind.FLOAT32, Kind.FLOAT64):
        if not math.isfinite(value):
            raise ConversionError("int", section, key, detail=format_float(value))
        return wrap_int64(int(value))
    raise ConversionError("int", section, key)
