"""Named filter presets ("Low Stock", "Overdue Rentals", ...).

Presets are defined per entity in ``config/rules.yaml`` (falling back to
``config.constants.FILTER_PRESETS``).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from config.config_loader import get_filter_presets_data
from .filter_state import FilterState


@dataclass
class FilterPreset:
    """A saved filter configuration."""

    name: str
    entity: str
    search: str = ""
    constraints: Dict[str, Any] = field(default_factory=dict)
    description: str = ""
    is_default: bool = False

    def to_state(self) -> FilterState:
        """Build the filter state this preset stands for."""
        return FilterState(search=self.search, constraints=dict(self.constraints))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "entity": self.entity,
            "search": self.search,
            "constraints": dict(self.constraints),
            "description": self.description,
            "is_default": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterPreset":
        """Create from dictionary."""
        return cls(
            name=data["name"],
            entity=data.get("entity", ""),
            search=data.get("search") or "",
            constraints=dict(data.get("constraints") or {}),
            description=data.get("description") or "",
            is_default=bool(data.get("is_default", False)),
        )


def get_presets(entity: str, rules: Optional[Dict[str, Any]] = None) -> Dict[str, FilterPreset]:
    """
    Get the configured presets for an entity.

    Returns:
        Dictionary of preset name to FilterPreset (empty if none are defined).
    """
    presets = {}
    for name, data in get_filter_presets_data(entity, rules).items():
        presets[name] = FilterPreset.from_dict({**(data or {}), "name": name, "entity": entity})
    return presets


def get_default_preset(entity: str, rules: Optional[Dict[str, Any]] = None) -> Optional[FilterPreset]:
    """Get the preset flagged as default for an entity, if any."""
    for preset in get_presets(entity, rules).values():
        if preset.is_default:
            return preset
    return None


def apply_preset(
    state: FilterState,
    preset: FilterPreset,
    keep_search: bool = True,
) -> FilterState:
    """
    Apply a preset on top of a filter state.

    The preset replaces all constraints. The current search text is kept
    unless ``keep_search`` is False or the preset defines its own.

    Returns:
        A new FilterState.
    """
    preset_state = preset.to_state()
    search = preset_state.search or (state.search if keep_search else "")
    return preset_state.with_search(search)
