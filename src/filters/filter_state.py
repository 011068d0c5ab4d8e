"""Filter state for dashboard tables.

A ``FilterState`` is the free-text search box plus one constraint per
filterable field. States are treated as values: the ``with_*``/``merge``
helpers return new states and leave the original untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .constraints import (
    Constraint,
    UNCONSTRAINED,
    coerce_constraint,
    constraint_from_dict,
    constraint_to_dict,
)


@dataclass
class FilterState:
    """Current search text and per-field constraints."""

    search: str = ""
    constraints: Dict[str, Constraint] = field(default_factory=dict)

    def __post_init__(self):
        self.search = "" if self.search is None else str(self.search)
        self.constraints = {
            name: coerce_constraint(value)
            for name, value in (self.constraints or {}).items()
        }

    @classmethod
    def from_raw(cls, search: Optional[str] = "", **fields: Any) -> "FilterState":
        """
        Build a state from raw select-box values.

        Example:
            FilterState.from_raw("pump", category="all", status="ACTIVE")
        """
        return cls(search=search or "", constraints=dict(fields))

    @property
    def active_constraints(self) -> Dict[str, Constraint]:
        """Constraints that actually restrict a field."""
        return {
            name: constraint
            for name, constraint in self.constraints.items()
            if constraint.is_active
        }

    @property
    def is_empty(self) -> bool:
        """Check if the state matches everything."""
        return not self.search and not self.active_constraints

    @property
    def active_filter_count(self) -> int:
        """Count of active filters (the search box counts as one)."""
        return len(self.active_constraints) + (1 if self.search else 0)

    def constraint_for(self, name: str) -> Constraint:
        """Get the constraint for a field (unconstrained if not set)."""
        return self.constraints.get(name, UNCONSTRAINED)

    def with_search(self, search: Optional[str]) -> "FilterState":
        """Return a copy with different search text."""
        return FilterState(search=search or "", constraints=dict(self.constraints))

    def with_constraint(self, name: str, value: Any) -> "FilterState":
        """Return a copy with one field constrained (raw values are coerced)."""
        constraints = dict(self.constraints)
        constraints[name] = coerce_constraint(value)
        return FilterState(search=self.search, constraints=constraints)

    def without_constraint(self, name: str) -> "FilterState":
        """Return a copy with one field unconstrained."""
        constraints = dict(self.constraints)
        constraints.pop(name, None)
        return FilterState(search=self.search, constraints=constraints)

    def copy(self) -> "FilterState":
        """Create a copy of this filter state."""
        return FilterState(search=self.search, constraints=dict(self.constraints))

    def merge(self, other: "FilterState", override: bool = True) -> "FilterState":
        """
        Merge another filter state into this one.

        Args:
            other: FilterState to merge in.
            override: If True, active values from other override this.
                      If False, only fill in fields this state leaves open.

        Returns:
            A new merged FilterState.
        """
        if override:
            search = other.search or self.search
            constraints = dict(self.active_constraints)
            constraints.update(other.active_constraints)
        else:
            search = self.search or other.search
            constraints = dict(other.active_constraints)
            constraints.update(self.active_constraints)
        return FilterState(search=search, constraints=constraints)

    def get_summary(self) -> str:
        """Get a human-readable summary of active filters."""
        parts = []

        if self.search:
            parts.append(f'Search: "{self.search}"')

        for name, constraint in sorted(self.active_constraints.items()):
            parts.append(f"{name}: {constraint.describe()}")

        return " | ".join(parts) if parts else "All records (no filters)"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "search": self.search,
            "constraints": {
                name: constraint_to_dict(constraint)
                for name, constraint in self.active_constraints.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterState":
        """Create from dictionary (see ``to_dict``)."""
        constraints = {}
        for name, value in (data.get("constraints") or {}).items():
            if isinstance(value, Mapping) and "type" in value:
                constraints[name] = constraint_from_dict(value)
            else:
                constraints[name] = coerce_constraint(value)
        return cls(search=data.get("search") or "", constraints=constraints)
