"""Per-field filter constraints.

A constraint is one of four explicit variants instead of a magic string:

- ``Unconstrained``: the field imposes nothing (``UNCONSTRAINED`` singleton)
- ``EqualTo(value)``: the field must match one value
- ``OneOf(values)``: the field must match any of several values
- ``Range(minimum, maximum)``: inclusive bounds, either side optional

Raw values coming from select boxes and query strings go through
``coerce_constraint``, which is the only place the legacy ``"all"`` value is
understood.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

from config.constants import LEGACY_UNCONSTRAINED_VALUE


@dataclass(frozen=True)
class Unconstrained:
    """No constraint on the field."""

    @property
    def is_active(self) -> bool:
        return False

    def describe(self) -> str:
        return "any"


@dataclass(frozen=True)
class EqualTo:
    """Field must match a single value."""

    value: Any

    @property
    def is_active(self) -> bool:
        return True

    def describe(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OneOf:
    """Field must match at least one of several values."""

    values: Tuple[Any, ...]

    @property
    def is_active(self) -> bool:
        return True

    def describe(self) -> str:
        if len(self.values) <= 3:
            return ", ".join(str(v) for v in self.values)
        return f"{len(self.values)} selected"


@dataclass(frozen=True)
class Range:
    """Field must fall within inclusive bounds; a None bound is open."""

    minimum: Any = None
    maximum: Any = None

    @property
    def is_active(self) -> bool:
        return self.minimum is not None or self.maximum is not None

    def describe(self) -> str:
        low = "..." if self.minimum is None else str(self.minimum)
        high = "..." if self.maximum is None else str(self.maximum)
        return f"{low} to {high}"


Constraint = Union[Unconstrained, EqualTo, OneOf, Range]

UNCONSTRAINED = Unconstrained()

_CONSTRAINT_TYPES = (Unconstrained, EqualTo, OneOf, Range)


def coerce_constraint(raw: Any) -> Constraint:
    """
    Convert a raw filter value into a constraint.

    Args:
        raw: An existing constraint, or a raw value from the presentation
            layer. None, "" and "all" mean unconstrained; lists become
            ``OneOf``; ``{"min": .., "max": ..}`` becomes ``Range``.

    Returns:
        The matching constraint variant.
    """
    if isinstance(raw, _CONSTRAINT_TYPES):
        return raw if raw.is_active else UNCONSTRAINED

    if raw is None:
        return UNCONSTRAINED

    if isinstance(raw, str):
        if raw == "" or raw == LEGACY_UNCONSTRAINED_VALUE:
            return UNCONSTRAINED
        return EqualTo(raw)

    if isinstance(raw, Mapping):
        minimum = raw.get("min")
        maximum = raw.get("max")
        if minimum in ("", None) and maximum in ("", None):
            return UNCONSTRAINED
        return Range(
            minimum=None if minimum == "" else minimum,
            maximum=None if maximum == "" else maximum,
        )

    if isinstance(raw, (list, tuple, set, frozenset)):
        values = [v for v in raw if v is not None and v != ""]
        if not values:
            return UNCONSTRAINED
        if isinstance(raw, (set, frozenset)):
            values = sorted(values, key=str)
        if len(values) == 1:
            return EqualTo(values[0])
        return OneOf(tuple(values))

    return EqualTo(raw)


def constraint_to_dict(constraint: Constraint) -> Dict[str, Any]:
    """
    Serialize a constraint with an explicit tag.

    The tag keeps ``EqualTo("all")`` distinct from ``Unconstrained`` across a
    round trip, which a bare raw value could not.
    """
    if isinstance(constraint, EqualTo):
        return {"type": "equal_to", "value": constraint.value}
    if isinstance(constraint, OneOf):
        return {"type": "one_of", "values": list(constraint.values)}
    if isinstance(constraint, Range):
        return {"type": "range", "min": constraint.minimum, "max": constraint.maximum}
    return {"type": "unconstrained"}


def constraint_from_dict(data: Mapping[str, Any]) -> Constraint:
    """Deserialize a tagged constraint; unknown tags are read as raw values."""
    tag = data.get("type")
    if tag == "unconstrained":
        return UNCONSTRAINED
    if tag == "equal_to":
        return EqualTo(data.get("value"))
    if tag == "one_of":
        values = tuple(data.get("values") or ())
        return OneOf(values) if values else UNCONSTRAINED
    if tag == "range":
        result = Range(minimum=data.get("min"), maximum=data.get("max"))
        return result if result.is_active else UNCONSTRAINED
    return coerce_constraint(data)
