"""Field access and value coercion for dashboard records.

Records arrive from the data layer as plain mappings (decoded JSON, ORM rows
converted to dicts) and sometimes as objects with attributes. Everything in
here is total: bad input produces ``None``/defaults, never an exception.
"""

import math
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence


def ensure_records(collection: Optional[Iterable[Any]]) -> List[Any]:
    """
    Normalize a collection supplied by the data layer.

    Args:
        collection: A list of records, any iterable of records, or None.

    Returns:
        A new list (empty when the collection is absent).
    """
    if collection is None:
        return []
    if isinstance(collection, (str, bytes, Mapping)):
        # A single record or a stray string is not a collection
        return []
    try:
        return list(collection)
    except TypeError:
        return []


def get_field(record: Any, path: str) -> Any:
    """
    Read a possibly nested field using a dotted path.

    ``get_field(stock, "item.number")`` returns ``stock["item"]["number"]``.
    Numeric segments index into lists. Any missing segment yields None.
    """
    if record is None or not path:
        return None

    current = record
    for segment in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.isdigit():
                return None
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            current = getattr(current, segment, None)
    return current


def get_children(record: Any, path: str) -> List[Any]:
    """Read a nested list field, returning an empty list when absent."""
    value = get_field(record, path)
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def to_optional_number(value: Any) -> Optional[float]:
    """Coerce a value to float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            # ints beyond float range, signalling NaN decimals
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        try:
            number = float(Decimal(str(value)))
        except (InvalidOperation, OverflowError, ValueError):
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a value to float, using ``default`` for anything non-numeric."""
    number = to_optional_number(value)
    return default if number is None else number


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a datetime from a datetime, date, or ISO-8601 string.

    Plain dates become midnight of that day. A trailing ``Z`` is read as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def to_date(value: Any) -> Optional[date]:
    """Parse a calendar date (see ``to_datetime``)."""
    parsed = to_datetime(value)
    return parsed.date() if parsed is not None else None


def align_datetimes(a: datetime, b: datetime):
    """
    Make two datetimes comparable.

    When exactly one of them is timezone-aware, it is converted to UTC and made
    naive; naive values are taken to be UTC.
    """
    a_aware = a.tzinfo is not None and a.utcoffset() is not None
    b_aware = b.tzinfo is not None and b.utcoffset() is not None
    if a_aware == b_aware:
        return a, b
    if a_aware:
        a = a.astimezone(timezone.utc).replace(tzinfo=None)
    else:
        b = b.astimezone(timezone.utc).replace(tzinfo=None)
    return a, b


def stringify(value: Any) -> str:
    """
    Convert a field value to the string the dashboard displays for it.

    Integral floats drop their fraction (``15.0`` -> ``"15"``), booleans are
    lower-case, None is the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, Enum):
        return stringify(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if value.is_nan():
            return "NaN"
        if value.is_infinite():
            return "Infinity" if value > 0 else "-Infinity"
        if value == value.to_integral_value():
            return format(value.to_integral_value(), "f")
        return str(value.normalize())
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def normalize_status(value: Any) -> str:
    """Normalize a lifecycle status for case-insensitive comparison."""
    return stringify(value).strip().upper()
