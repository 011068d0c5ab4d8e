"""Record filtering engine.

One declarative ``FilterConfig`` per entity type (inventory items, rentals,
employees, ...) drives the same matching logic everywhere:

- the search text must appear (case-insensitively) in at least one of the
  configured search fields, unless it is empty;
- every constrained field must satisfy its constraint under the field's
  comparison mode.

Filtering keeps the source order, never mutates its input and always returns
a new list, so an empty result is ``[]`` rather than None.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from config.config_loader import ConfigurationError, get_filter_config_data
from config.logging_config import get_logger
from src.records import (
    ensure_records,
    get_field,
    stringify,
    to_date,
    to_optional_number,
)
from .constraints import Constraint, EqualTo, OneOf, Range
from .filter_state import FilterState

logger = get_logger("filters")

DerivedField = Callable[[Any], Any]


class ComparisonMode(str, Enum):
    """How a filter value is compared with a record field."""

    EQUALS_STRING = "equals-string"
    CASE_INSENSITIVE_SUBSTRING = "equals-case-insensitive-substring"
    NUMERIC_EQUALS = "numeric-equals"
    DATE_EQUALS = "date-equals"

    @classmethod
    def parse(cls, value: Any) -> "ComparisonMode":
        """Parse a mode name, raising ConfigurationError when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConfigurationError(
                f"Unknown comparison mode '{value}' (expected one of: {valid})"
            )


@dataclass(frozen=True)
class FilterConfig:
    """Declarative filter configuration for one entity type."""

    entity: str = "records"
    search_fields: Tuple[str, ...] = ()
    fields: Mapping[str, ComparisonMode] = field(default_factory=dict)
    derived: Mapping[str, DerivedField] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "search_fields", tuple(self.search_fields))
        object.__setattr__(
            self,
            "fields",
            {name: ComparisonMode.parse(mode) for name, mode in dict(self.fields).items()},
        )
        object.__setattr__(self, "derived", dict(self.derived))

    def mode_for(self, name: str) -> Optional[ComparisonMode]:
        """Get the comparison mode of a field (derived fields compare as strings)."""
        if name in self.fields:
            return self.fields[name]
        if name in self.derived:
            return ComparisonMode.EQUALS_STRING
        return None

    def value_of(self, record: Any, name: str) -> Any:
        """Read a field from a record, computing it if it is derived."""
        compute = self.derived.get(name)
        if compute is not None:
            return compute(record)
        return get_field(record, name)

    @classmethod
    def from_dict(
        cls,
        entity: str,
        data: Mapping[str, Any],
        derived_registry: Optional[Mapping[str, DerivedField]] = None,
    ) -> "FilterConfig":
        """
        Build a config from its YAML/dict form.

        Args:
            entity: Entity name.
            data: Mapping with ``search_fields``, ``fields`` and ``derived``.
            derived_registry: Callables available for ``derived`` names.

        Raises:
            ConfigurationError: On unknown comparison modes or derived fields.
        """
        registry = derived_registry or {}
        derived = {}
        for name in data.get("derived") or []:
            if name not in registry:
                raise ConfigurationError(
                    f"Unknown derived field '{name}' for entity '{entity}'"
                )
            derived[name] = registry[name]

        return cls(
            entity=entity,
            search_fields=tuple(data.get("search_fields") or ()),
            fields=dict(data.get("fields") or {}),
            derived=derived,
        )


def load_filter_config(entity: str, rules: Optional[Dict[str, Any]] = None) -> FilterConfig:
    """Build the configured ``FilterConfig`` for an entity."""
    from src.analysis.classifiers import get_derived_fields

    data = get_filter_config_data(entity, rules)
    return FilterConfig.from_dict(entity, data, derived_registry=get_derived_fields(rules))


# =============================================================================
# Matching
# =============================================================================


def _equals(value: Any, target: Any, mode: ComparisonMode) -> bool:
    """Check a record value against a single filter value."""
    if mode is ComparisonMode.CASE_INSENSITIVE_SUBSTRING:
        if value is None:
            return False
        return stringify(target).lower() in stringify(value).lower()

    if mode is ComparisonMode.DATE_EQUALS:
        value_date = to_date(value)
        return value_date is not None and value_date == to_date(target)

    # equals-string and numeric-equals both compare the displayed strings;
    # numeric filters are exact matches, not ranges
    return stringify(value) == stringify(target)


def _in_range(value: Any, constraint: Range, mode: ComparisonMode) -> bool:
    """Check a record value against inclusive range bounds."""
    if mode is ComparisonMode.NUMERIC_EQUALS:
        convert = to_optional_number
    elif mode is ComparisonMode.DATE_EQUALS:
        convert = to_date
    elif mode is ComparisonMode.CASE_INSENSITIVE_SUBSTRING:
        convert = lambda v: None if v is None else stringify(v).lower()  # noqa: E731
    else:
        convert = lambda v: None if v is None else stringify(v)  # noqa: E731

    current = convert(value)
    if current is None:
        return False

    if constraint.minimum is not None:
        low = convert(constraint.minimum)
        if low is None or current < low:
            return False
    if constraint.maximum is not None:
        high = convert(constraint.maximum)
        if high is None or current > high:
            return False
    return True


def constraint_matches(value: Any, constraint: Constraint, mode: ComparisonMode) -> bool:
    """
    Check whether a field value satisfies a constraint.

    Args:
        value: The record's value for the field.
        constraint: Constraint from the filter state.
        mode: Comparison mode of the field.

    Returns:
        True if the value satisfies the constraint.
    """
    if isinstance(constraint, EqualTo):
        return _equals(value, constraint.value, mode)
    if isinstance(constraint, OneOf):
        return any(_equals(value, target, mode) for target in constraint.values)
    if isinstance(constraint, Range):
        return not constraint.is_active or _in_range(value, constraint, mode)
    return True


class FilterEngine:
    """Applies a ``FilterState`` to record collections for one entity type."""

    def __init__(self, config: FilterConfig):
        self.config = config

    def _matches_search(self, record: Any, search: str) -> bool:
        if not search:
            return True
        needle = search.lower()
        for path in self.config.search_fields:
            value = self.config.value_of(record, path)
            if value is not None and needle in stringify(value).lower():
                return True
        return False

    def _resolve_constraints(self, state: FilterState) -> List[Tuple[str, Constraint, ComparisonMode]]:
        """Pair each active constraint with its comparison mode."""
        resolved = []
        for name, constraint in state.active_constraints.items():
            mode = self.config.mode_for(name)
            if mode is None:
                logger.warning(
                    f"Field '{name}' is not configured for {self.config.entity}; "
                    "comparing as equals-string"
                )
                mode = ComparisonMode.EQUALS_STRING
            resolved.append((name, constraint, mode))
        return resolved

    def _matches(self, record: Any, search: str, resolved) -> bool:
        if not self._matches_search(record, search):
            return False
        for name, constraint, mode in resolved:
            if not constraint_matches(self.config.value_of(record, name), constraint, mode):
                return False
        return True

    def matches(self, record: Any, state: Optional[FilterState] = None) -> bool:
        """Check whether a single record matches the state."""
        state = state or FilterState()
        return self._matches(record, state.search, self._resolve_constraints(state))

    def filter(
        self,
        records: Optional[Iterable[Any]],
        state: Optional[FilterState] = None,
    ) -> List[Any]:
        """
        Filter a collection, preserving its order.

        Args:
            records: Source collection (None is treated as empty).
            state: Filter state (None matches everything).

        Returns:
            New list of matching records.
        """
        source = ensure_records(records)
        state = state or FilterState()

        if state.is_empty:
            return source

        resolved = self._resolve_constraints(state)
        result = [r for r in source if self._matches(r, state.search, resolved)]

        logger.debug(
            f"Filtered {self.config.entity}: {len(result)}/{len(source)} "
            f"match ({state.get_summary()})"
        )
        return result

    def count(self, records: Optional[Iterable[Any]], state: Optional[FilterState] = None) -> int:
        """Count matching records."""
        return len(self.filter(records, state))


def filter_records(
    records: Optional[Iterable[Any]],
    state: Optional[FilterState],
    config: FilterConfig,
) -> List[Any]:
    """Filter ``records`` against ``state`` using ``config``."""
    return FilterEngine(config).filter(records, state)


# =============================================================================
# Table helpers
# =============================================================================


def _sort_key(value: Any):
    """Numbers sort numerically, everything else by lower-cased text."""
    number = value if isinstance(value, (int, float)) and not isinstance(value, bool) else None
    if number is not None:
        return (0, float(number), "")
    return (1, 0.0, stringify(value).lower())


def sort_records(
    records: Optional[Iterable[Any]],
    field_name: str,
    descending: bool = False,
    config: Optional[FilterConfig] = None,
) -> List[Any]:
    """
    Sort records by a field for table display.

    The sort is stable and records missing the field always go last, in
    either direction.
    """
    source = ensure_records(records)
    read = config.value_of if config is not None else get_field

    present = []
    missing = []
    for record in source:
        value = read(record, field_name)
        if value is None or value == "":
            missing.append(record)
        else:
            present.append((value, record))

    present.sort(key=lambda pair: _sort_key(pair[0]), reverse=descending)
    return [record for _, record in present] + missing


def distinct_values(
    records: Optional[Iterable[Any]],
    field_name: str,
    config: Optional[FilterConfig] = None,
) -> List[str]:
    """Get the sorted distinct non-empty values of a field (for drop-downs)."""
    read = config.value_of if config is not None else get_field
    values = set()
    for record in ensure_records(records):
        text = stringify(read(record, field_name))
        if text:
            values.add(text)
    return sorted(values, key=str.lower)
