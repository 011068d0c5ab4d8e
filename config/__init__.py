"""Configuration module for the operations dashboard engine.

Defaults live in code (``constants``); ``rules.yaml`` overrides them.
"""

from .settings import config, RulesConfig, DataConfig, AppConfig, Config
from .constants import (
    LEGACY_UNCONSTRAINED_VALUE,
    DEFAULT_MAINTENANCE_WINDOW_DAYS,
    DEFAULT_RESTOCK_WINDOW_DAYS,
    SEVERITY_LEVELS,
    OPEN_ALERT_STATUSES,
    STATUS_SETS,
    AVAILABILITY_BANDS,
    MTTR_BANDS,
    DEFAULT_FILTER_CONFIGS,
    FILTER_PRESETS,
)
from .logging_config import setup_logging, get_logger
from .config_loader import (
    ConfigurationError,
    StatusSets,
    load_rules,
    load_rules_file,
    clear_config_cache,
    get_window_days,
    get_stock_settings,
    get_severity_settings,
    get_kpi_bands,
    get_filter_config_data,
    get_filter_presets_data,
)

__all__ = [
    # Settings
    "config",
    "RulesConfig",
    "DataConfig",
    "AppConfig",
    "Config",
    # Constants
    "LEGACY_UNCONSTRAINED_VALUE",
    "DEFAULT_MAINTENANCE_WINDOW_DAYS",
    "DEFAULT_RESTOCK_WINDOW_DAYS",
    "SEVERITY_LEVELS",
    "OPEN_ALERT_STATUSES",
    "STATUS_SETS",
    "AVAILABILITY_BANDS",
    "MTTR_BANDS",
    "DEFAULT_FILTER_CONFIGS",
    "FILTER_PRESETS",
    # Logging
    "setup_logging",
    "get_logger",
    # Loader
    "ConfigurationError",
    "StatusSets",
    "load_rules",
    "load_rules_file",
    "clear_config_cache",
    "get_window_days",
    "get_stock_settings",
    "get_severity_settings",
    "get_kpi_bands",
    "get_filter_config_data",
    "get_filter_presets_data",
]
