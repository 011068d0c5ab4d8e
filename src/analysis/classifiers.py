"""Threshold classification of dashboard records.

Each rule maps one record (or one KPI value) to exactly one status from a
closed set. Classification is pure and total: missing or malformed fields
fall into a defined status instead of raising.

Rules:
    StockRule       -> StockStatus    (normal / low / out)
    DateWindowRule  -> ScheduleStatus (scheduled / due)
    SeverityRule    -> AlertStatus    (normal / critical)
    PresenceRule    -> PresenceStatus (present / absent)
    BandRule        -> KPIVariant     (success / warning / danger)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from config import constants
from config.config_loader import (
    get_kpi_bands,
    get_severity_settings,
    get_stock_settings,
    get_window_days,
)
from src.records import (
    align_datetimes,
    get_children,
    get_field,
    normalize_status,
    to_datetime,
    to_number,
)


class StockStatus(str, Enum):
    """Stock level of an inventory item."""
    NORMAL = "normal"
    LOW = "low"
    OUT = "out"


class ScheduleStatus(str, Enum):
    """Whether a dated task falls inside its look-ahead window."""
    SCHEDULED = "scheduled"
    DUE = "due"


class AlertStatus(str, Enum):
    """Alert level of a work order or issue."""
    NORMAL = "normal"
    CRITICAL = "critical"


class PresenceStatus(str, Enum):
    """Attendance of an employee."""
    PRESENT = "present"
    ABSENT = "absent"


class KPIVariant(str, Enum):
    """Display band of a KPI value."""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class StockRule:
    """
    Stock thresholds.

    Flat items carry ``quantity`` and ``minQuantity``. Hierarchical items
    carry ``branches[].locations[]``, each location with its own on-hand
    quantity, reorder point (falling back to the branch's) and cost.
    """

    quantity_field: str = "quantity"
    minimum_field: str = "minQuantity"
    default_minimum: float = 0.0
    branches_field: Optional[str] = "branches"
    locations_field: str = "locations"
    location_quantity_field: str = "quantity"
    reorder_field: str = "reorderPoint"
    cost_field: str = "averageCost"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StockRule":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "default_minimum" in known:
            known["default_minimum"] = to_number(known["default_minimum"])
        return cls(**known)


@dataclass(frozen=True)
class DateWindowRule:
    """A record is due when its date falls within ``window_days`` of now."""

    date_field: str = "nextMaintenanceDate"
    window_days: int = constants.DEFAULT_MAINTENANCE_WINDOW_DAYS


@dataclass(frozen=True)
class SeverityRule:
    """A record is critical at the top priority level while still open."""

    priority_field: str = "priority"
    status_field: str = "status"
    levels: Tuple[str, ...] = tuple(constants.SEVERITY_LEVELS)
    open_statuses: Tuple[str, ...] = tuple(constants.OPEN_ALERT_STATUSES)

    @property
    def max_level(self) -> str:
        return normalize_status(self.levels[-1]) if self.levels else ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SeverityRule":
        return cls(
            priority_field=data.get("priority_field", "priority"),
            status_field=data.get("status_field", "status"),
            levels=tuple(data.get("levels") or constants.SEVERITY_LEVELS),
            open_statuses=tuple(data.get("open_statuses") or constants.OPEN_ALERT_STATUSES),
        )


@dataclass(frozen=True)
class PresenceRule:
    """An employee is present when the check-in field is set."""

    check_in_field: str = "checkIn"


@dataclass(frozen=True)
class BandRule:
    """
    Success/warning bounds for a KPI value.

    With ``higher_is_better`` a value >= success is SUCCESS and >= warning is
    WARNING; otherwise the comparisons are <=.
    """

    success: float
    warning: float
    higher_is_better: bool = True


ThresholdRule = Union[StockRule, DateWindowRule, SeverityRule, PresenceRule, BandRule]

AVAILABILITY_BAND = BandRule(*constants.AVAILABILITY_BANDS, higher_is_better=True)
MTTR_BAND = BandRule(*constants.MTTR_BANDS, higher_is_better=False)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Use the given reference time, or read the clock once."""
    return now if now is not None else datetime.now()


# =============================================================================
# Stock
# =============================================================================


def iter_locations(record: Any, rule: StockRule) -> Optional[List[Tuple[Any, Any]]]:
    """
    List (location, reorder point) pairs of a hierarchical item.

    Returns:
        The pairs, or None when the item is flat.
    """
    branches = get_field(record, rule.branches_field) if rule.branches_field else None
    if isinstance(branches, (list, tuple)):
        pairs = []
        for branch in branches:
            branch_reorder = get_field(branch, rule.reorder_field)
            for location in get_children(branch, rule.locations_field):
                own = get_field(location, rule.reorder_field)
                pairs.append((location, branch_reorder if own is None else own))
        return pairs

    locations = get_field(record, rule.locations_field)
    if isinstance(locations, (list, tuple)):
        item_reorder = get_field(record, rule.reorder_field)
        pairs = []
        for location in locations:
            own = get_field(location, rule.reorder_field)
            pairs.append((location, item_reorder if own is None else own))
        return pairs

    return None


def on_hand_quantity(record: Any, rule: Optional[StockRule] = None) -> float:
    """Total on-hand quantity of an item across all of its locations."""
    rule = rule or StockRule()
    pairs = iter_locations(record, rule)
    if pairs is None:
        return to_number(get_field(record, rule.quantity_field))
    return sum(to_number(get_field(loc, rule.location_quantity_field)) for loc, _ in pairs)


def inventory_value(record: Any, rule: Optional[StockRule] = None) -> float:
    """Stock value of an item: quantity x cost, summed over locations."""
    rule = rule or StockRule()
    pairs = iter_locations(record, rule)
    if pairs is None:
        return to_number(get_field(record, rule.quantity_field)) * to_number(
            get_field(record, rule.cost_field)
        )
    return sum(
        to_number(get_field(loc, rule.location_quantity_field))
        * to_number(get_field(loc, rule.cost_field))
        for loc, _ in pairs
    )


def classify_stock(record: Any, rule: Optional[StockRule] = None) -> StockStatus:
    """
    Classify the stock level of an item.

    Flat items: OUT at zero (or less), LOW when 0 < quantity <= minimum,
    otherwise NORMAL. Hierarchical items: LOW when any location is at or
    below its reorder point, otherwise OUT when nothing is on hand,
    otherwise NORMAL.
    """
    rule = rule or StockRule()
    pairs = iter_locations(record, rule)

    if pairs is None:
        quantity = to_number(get_field(record, rule.quantity_field))
        raw_minimum = get_field(record, rule.minimum_field)
        minimum = to_number(raw_minimum, default=rule.default_minimum)
        if quantity <= 0:
            return StockStatus.OUT
        if quantity <= minimum:
            return StockStatus.LOW
        return StockStatus.NORMAL

    for location, reorder_point in pairs:
        quantity = to_number(get_field(location, rule.location_quantity_field))
        if quantity <= to_number(reorder_point):
            return StockStatus.LOW

    total = sum(to_number(get_field(loc, rule.location_quantity_field)) for loc, _ in pairs)
    if total <= 0:
        return StockStatus.OUT
    return StockStatus.NORMAL


def is_low_stock(record: Any, rule: Optional[StockRule] = None) -> bool:
    """Check whether an item counts as low stock."""
    return classify_stock(record, rule) is StockStatus.LOW


# =============================================================================
# Date windows
# =============================================================================


def is_within_window(target: Any, now: datetime, window_days: int) -> bool:
    """Check whether a date is on or before ``now + window_days`` (past dates count)."""
    target_dt = to_datetime(target)
    if target_dt is None:
        return False
    limit = now + timedelta(days=window_days)
    target_dt, limit = align_datetimes(target_dt, limit)
    return target_dt <= limit


def classify_schedule(
    record: Any,
    rule: Optional[DateWindowRule] = None,
    now: Optional[datetime] = None,
) -> ScheduleStatus:
    """Classify a dated record as DUE or SCHEDULED relative to ``now``."""
    rule = rule or DateWindowRule()
    target = get_field(record, rule.date_field)
    if is_within_window(target, resolve_now(now), rule.window_days):
        return ScheduleStatus.DUE
    return ScheduleStatus.SCHEDULED


# =============================================================================
# Severity and presence
# =============================================================================


def classify_severity(record: Any, rule: Optional[SeverityRule] = None) -> AlertStatus:
    """Classify a work order or issue as CRITICAL or NORMAL."""
    rule = rule or SeverityRule()
    priority = normalize_status(get_field(record, rule.priority_field))
    status = normalize_status(get_field(record, rule.status_field))
    open_statuses = {normalize_status(s) for s in rule.open_statuses}

    if priority and priority == rule.max_level and status in open_statuses:
        return AlertStatus.CRITICAL
    return AlertStatus.NORMAL


def is_critical(record: Any, rule: Optional[SeverityRule] = None) -> bool:
    """Check whether a record drives a critical alert."""
    return classify_severity(record, rule) is AlertStatus.CRITICAL


def classify_presence(record: Any, rule: Optional[PresenceRule] = None) -> PresenceStatus:
    """Classify an attendance record as PRESENT or ABSENT."""
    rule = rule or PresenceRule()
    check_in = get_field(record, rule.check_in_field)
    if check_in is None or check_in == "" or check_in is False:
        return PresenceStatus.ABSENT
    return PresenceStatus.PRESENT


# =============================================================================
# KPI bands
# =============================================================================


def classify_band(value: Any, rule: BandRule) -> KPIVariant:
    """Classify a KPI value into a display band (non-numeric values are 0)."""
    number = to_number(value)
    if rule.higher_is_better:
        if number >= rule.success:
            return KPIVariant.SUCCESS
        if number >= rule.warning:
            return KPIVariant.WARNING
        return KPIVariant.DANGER

    if number <= rule.success:
        return KPIVariant.SUCCESS
    if number <= rule.warning:
        return KPIVariant.WARNING
    return KPIVariant.DANGER


def get_band_rules(rules: Optional[Dict[str, Any]] = None) -> Dict[str, BandRule]:
    """Build the configured KPI band rules."""
    bands = get_kpi_bands(rules)
    return {
        "availability": BandRule(*bands["availability"], higher_is_better=True),
        "mttr": BandRule(*bands["mttr"], higher_is_better=False),
    }


# =============================================================================
# Dispatch
# =============================================================================


def classify(record: Any, rule: ThresholdRule, now: Optional[datetime] = None) -> Enum:
    """
    Classify a record with any threshold rule.

    Args:
        record: The record (for BandRule, the KPI value itself).
        rule: The rule to evaluate.
        now: Reference time for date-window rules.

    Returns:
        The status from the rule's closed set.
    """
    if isinstance(rule, StockRule):
        return classify_stock(record, rule)
    if isinstance(rule, DateWindowRule):
        return classify_schedule(record, rule, now)
    if isinstance(rule, SeverityRule):
        return classify_severity(record, rule)
    if isinstance(rule, PresenceRule):
        return classify_presence(record, rule)
    if isinstance(rule, BandRule):
        return classify_band(record, rule)
    raise TypeError(f"Unsupported rule type: {type(rule).__name__}")


def load_stock_rule(rules: Optional[Dict[str, Any]] = None) -> StockRule:
    """Build the configured stock rule."""
    return StockRule.from_dict(get_stock_settings(rules))


def load_severity_rule(rules: Optional[Dict[str, Any]] = None) -> SeverityRule:
    """Build the configured severity rule."""
    return SeverityRule.from_dict(get_severity_settings(rules))


def load_window_rules(rules: Optional[Dict[str, Any]] = None) -> Dict[str, DateWindowRule]:
    """Build the configured maintenance and restock window rules."""
    windows = get_window_days(rules)
    return {
        "maintenance": DateWindowRule("nextMaintenanceDate", windows["maintenance_days"]),
        "restock": DateWindowRule("nextRestockDate", windows["restock_days"]),
    }


def get_derived_fields(rules: Optional[Dict[str, Any]] = None) -> Dict[str, Callable[[Any], Any]]:
    """
    Classifier-backed virtual fields usable in filter configurations.

    Only rules that need no reference time are offered, so filtering stays a
    function of the records and the filter state.
    """
    stock_rule = load_stock_rule(rules)
    severity_rule = load_severity_rule(rules)
    return {
        "stock_status": lambda record: classify_stock(record, stock_rule),
        "is_low_stock": lambda record: is_low_stock(record, stock_rule),
        "is_critical": lambda record: is_critical(record, severity_rule),
        "presence": lambda record: classify_presence(record),
    }
