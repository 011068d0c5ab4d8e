"""Record access helpers shared by the filtering and analysis modules."""

from .fields import (
    ensure_records,
    get_field,
    get_children,
    to_number,
    to_optional_number,
    to_datetime,
    to_date,
    align_datetimes,
    stringify,
    normalize_status,
)

__all__ = [
    "ensure_records",
    "get_field",
    "get_children",
    "to_number",
    "to_optional_number",
    "to_datetime",
    "to_date",
    "align_datetimes",
    "stringify",
    "normalize_status",
]
