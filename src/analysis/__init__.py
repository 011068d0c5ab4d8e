"""Analysis module: threshold classification, metrics, KPIs and exports."""

from .classifiers import (
    StockStatus,
    ScheduleStatus,
    AlertStatus,
    PresenceStatus,
    KPIVariant,
    StockRule,
    DateWindowRule,
    SeverityRule,
    PresenceRule,
    BandRule,
    AVAILABILITY_BAND,
    MTTR_BAND,
    classify,
    classify_stock,
    classify_schedule,
    classify_severity,
    classify_presence,
    classify_band,
    is_low_stock,
    is_critical,
    is_within_window,
    on_hand_quantity,
    inventory_value,
    get_derived_fields,
)
from .metrics import (
    RuleSet,
    load_rule_set,
    MetricsAggregator,
    MetricsSnapshot,
    OrderMetrics,
    OperationsMetrics,
    InventoryMetrics,
    RentalMetrics,
    HRMetrics,
    FinanceMetrics,
    CRMMetrics,
    aggregate,
    count_by,
    percentage,
)
from .kpi import (
    KPIData,
    MaintenanceActivity,
    ShutdownMetrics,
    EquipmentUtilization,
    maintenance_activity,
    shutdown_metrics,
    mean_time_to_repair,
    mean_time_between_shutdowns,
    availability,
    calculate_kpis,
    equipment_utilization,
)
from .statistics import (
    ComparisonResult,
    TrendAnalysis,
    period_key,
    maintenance_trends,
    breakdown_trends,
    compare_values,
    compare_periods,
    analyze_trend,
    summary_statistics,
)
from .export import DataExporter, records_to_dataframe, snapshot_to_dataframe
from .cached import IdentityMemo, CachedDashboard, memoize_by_identity

__all__ = [
    # Classifiers
    "StockStatus",
    "ScheduleStatus",
    "AlertStatus",
    "PresenceStatus",
    "KPIVariant",
    "StockRule",
    "DateWindowRule",
    "SeverityRule",
    "PresenceRule",
    "BandRule",
    "AVAILABILITY_BAND",
    "MTTR_BAND",
    "classify",
    "classify_stock",
    "classify_schedule",
    "classify_severity",
    "classify_presence",
    "classify_band",
    "is_low_stock",
    "is_critical",
    "is_within_window",
    "on_hand_quantity",
    "inventory_value",
    "get_derived_fields",
    # Metrics
    "RuleSet",
    "load_rule_set",
    "MetricsAggregator",
    "MetricsSnapshot",
    "OrderMetrics",
    "OperationsMetrics",
    "InventoryMetrics",
    "RentalMetrics",
    "HRMetrics",
    "FinanceMetrics",
    "CRMMetrics",
    "aggregate",
    "count_by",
    "percentage",
    # KPIs
    "KPIData",
    "MaintenanceActivity",
    "ShutdownMetrics",
    "EquipmentUtilization",
    "maintenance_activity",
    "shutdown_metrics",
    "mean_time_to_repair",
    "mean_time_between_shutdowns",
    "availability",
    "calculate_kpis",
    "equipment_utilization",
    # Statistics
    "ComparisonResult",
    "TrendAnalysis",
    "period_key",
    "maintenance_trends",
    "breakdown_trends",
    "compare_values",
    "compare_periods",
    "analyze_trend",
    "summary_statistics",
    # Export
    "DataExporter",
    "records_to_dataframe",
    "snapshot_to_dataframe",
    # Memoization
    "IdentityMemo",
    "CachedDashboard",
    "memoize_by_identity",
]
