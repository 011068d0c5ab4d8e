"""Filtering module for dashboard record tables."""

from .constraints import (
    Constraint,
    Unconstrained,
    EqualTo,
    OneOf,
    Range,
    UNCONSTRAINED,
    coerce_constraint,
    constraint_to_dict,
    constraint_from_dict,
)
from .filter_state import FilterState
from .engine import (
    ComparisonMode,
    FilterConfig,
    FilterEngine,
    filter_records,
    constraint_matches,
    load_filter_config,
    sort_records,
    distinct_values,
)
from .filter_presets import (
    FilterPreset,
    get_presets,
    get_default_preset,
    apply_preset,
)

__all__ = [
    # Constraints
    "Constraint",
    "Unconstrained",
    "EqualTo",
    "OneOf",
    "Range",
    "UNCONSTRAINED",
    "coerce_constraint",
    "constraint_to_dict",
    "constraint_from_dict",
    # State
    "FilterState",
    # Engine
    "ComparisonMode",
    "FilterConfig",
    "FilterEngine",
    "filter_records",
    "constraint_matches",
    "load_filter_config",
    "sort_records",
    "distinct_values",
    # Presets
    "FilterPreset",
    "get_presets",
    "get_default_preset",
    "apply_preset",
]
