"""YAML Configuration Loader for the operations dashboard engine.

Loads and caches the rules file (thresholds, status sets, filter
configurations, presets) with fallback to the defaults in
``config.constants``.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from functools import lru_cache
import yaml

from config.settings import config
from config.logging_config import get_logger
from config import constants

# Get config directory
CONFIG_DIR = Path(__file__).parent

logger = get_logger("config")


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""

    pass


def _load_yaml_file(filepath: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filepath: Path of the YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigurationError: If file cannot be loaded
    """
    if not filepath.exists():
        raise ConfigurationError(f"Configuration file not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing {filepath.name}: {e}")
    except IOError as e:
        raise ConfigurationError(f"Error reading {filepath.name}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"{filepath.name} must contain a mapping at the top level")
    return data


def _fallback_rules() -> Dict[str, Any]:
    """Rules equivalent to the code defaults."""
    return {
        "windows": {
            "maintenance_days": constants.DEFAULT_MAINTENANCE_WINDOW_DAYS,
            "restock_days": constants.DEFAULT_RESTOCK_WINDOW_DAYS,
        },
        "severity": {
            "levels": list(constants.SEVERITY_LEVELS),
            "open_statuses": list(constants.OPEN_ALERT_STATUSES),
        },
        "kpi_bands": {
            "availability": list(constants.AVAILABILITY_BANDS),
            "mttr": list(constants.MTTR_BANDS),
        },
        "status_sets": {k: list(v) for k, v in constants.STATUS_SETS.items()},
        "filters": dict(constants.DEFAULT_FILTER_CONFIGS),
        "presets": dict(constants.FILTER_PRESETS),
    }


def load_rules_file(path: Path) -> Dict[str, Any]:
    """
    Load an explicit rules file.

    Unlike ``load_rules`` this never falls back: a caller that names a file
    expects that file.

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    return _load_yaml_file(Path(path))


@lru_cache(maxsize=1)
def load_rules() -> Dict[str, Any]:
    """Load the configured rules file, falling back to code defaults."""
    try:
        return _load_yaml_file(config.rules.rules_file)
    except ConfigurationError as e:
        logger.warning(f"Using default rules: {e}")
        return _fallback_rules()


def clear_config_cache() -> None:
    """Clear all cached configuration data."""
    load_rules.cache_clear()


def _section(name: str, rules: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get a top-level section of the rules as a dict."""
    data = load_rules() if rules is None else rules
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Rules section '{name}' must be a mapping")
    return value


def get_window_days(rules: Optional[Dict[str, Any]] = None) -> Dict[str, int]:
    """Get the maintenance and restock window lengths in days."""
    windows = _section("windows", rules)
    return {
        "maintenance_days": int(
            windows.get("maintenance_days", config.rules.maintenance_window_days)
        ),
        "restock_days": int(windows.get("restock_days", config.rules.restock_window_days)),
    }


def get_stock_settings(rules: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get stock classification field names and defaults."""
    return dict(_section("stock", rules))


def get_severity_settings(rules: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get severity levels, open statuses and field names."""
    settings = dict(_section("severity", rules))
    settings.setdefault("levels", list(constants.SEVERITY_LEVELS))
    settings.setdefault("open_statuses", list(constants.OPEN_ALERT_STATUSES))
    return settings


def get_kpi_bands(rules: Optional[Dict[str, Any]] = None) -> Dict[str, Tuple[float, float]]:
    """Get (success, warning) bounds for KPI bands."""
    bands = _section("kpi_bands", rules)
    result = {
        "availability": constants.AVAILABILITY_BANDS,
        "mttr": constants.MTTR_BANDS,
    }
    for name, value in bands.items():
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ConfigurationError(f"KPI band '{name}' must be a [success, warning] pair")
        result[name] = (float(value[0]), float(value[1]))
    return result


def get_filter_config_data(entity: str, rules: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get the raw filter configuration for an entity."""
    filters = _section("filters", rules)
    if entity in filters:
        return dict(filters[entity] or {})
    if entity in constants.DEFAULT_FILTER_CONFIGS:
        return dict(constants.DEFAULT_FILTER_CONFIGS[entity])
    raise ConfigurationError(f"No filter configuration for entity '{entity}'")


def get_filter_presets_data(
    entity: str, rules: Optional[Dict[str, Any]] = None
) -> Dict[str, Dict[str, Any]]:
    """Get raw preset definitions for an entity (empty if none)."""
    presets = _section("presets", rules)
    if entity in presets:
        return dict(presets[entity] or {})
    return dict(constants.FILTER_PRESETS.get(entity, {}))


@dataclass
class StatusSets:
    """Lifecycle status set accessor."""

    _data: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_rules(cls, rules: Dict[str, Any]) -> "StatusSets":
        """Build from an already-loaded rules mapping."""
        data = {k: list(v) for k, v in constants.STATUS_SETS.items()}
        data.update(_section("status_sets", rules))
        return cls(_data=data)

    def members(self, name: str) -> frozenset:
        """Get the upper-cased members of a status set."""
        return frozenset(str(v).upper() for v in self._data.get(name, []))

    def names(self) -> List[str]:
        """Get all configured status set names."""
        return sorted(self._data)
