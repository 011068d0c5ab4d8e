"""Maintenance KPIs for the operations dashboard.

Computes maintenance activity, shutdown, MTTR, MTBS and availability figures
from work orders and breakdowns over an explicit reporting period, plus
per-equipment utilization from usage logs.

Breakdowns carry ``startAt``/``endAt`` timestamps; a breakdown without
``endAt`` is still active. Work orders are assigned to a period by their
``scheduledDate``.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from config.config_loader import StatusSets
from config.logging_config import get_logger
from src.records import (
    align_datetimes,
    ensure_records,
    get_children,
    get_field,
    normalize_status,
    to_datetime,
    to_number,
)
from .classifiers import KPIVariant, classify_band, get_band_rules

logger = get_logger("kpi")

SECONDS_PER_HOUR = 60 * 60


@dataclass
class MaintenanceActivity:
    """Planned (preventive) vs. actual (completed) maintenance."""

    planned: int = 0
    actual: int = 0
    ratio: float = 0.0


@dataclass
class ShutdownMetrics:
    """Shutdown figures for a period."""

    count: int = 0
    total_hours: float = 0.0
    average_duration: float = 0.0


@dataclass
class KPIData:
    """Maintenance KPIs for one reporting period."""

    maintenance_activity: MaintenanceActivity = field(default_factory=MaintenanceActivity)
    shutdown: ShutdownMetrics = field(default_factory=ShutdownMetrics)
    mttr: float = 0.0  # hours
    mtbs: float = 0.0  # hours
    availability: float = 0.0  # percent

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def variants(self, rules: Optional[Dict[str, Any]] = None) -> Dict[str, KPIVariant]:
        """Get the display band of the banded KPIs."""
        bands = get_band_rules(rules)
        return {
            "availability": classify_band(self.availability, bands["availability"]),
            "mttr": classify_band(self.mttr, bands["mttr"]),
        }


@dataclass
class EquipmentUtilization:
    """Usage and breakdown hours of one piece of equipment."""

    id: Any
    name: str
    code: str
    utilization: float
    usage_hours: float
    breakdown_hours: float
    status: str


def _hours_between(start: datetime, end: datetime) -> float:
    start, end = align_datetimes(start, end)
    return (end - start).total_seconds() / SECONDS_PER_HOUR


def period_hours(start: Any, end: Any) -> float:
    """Length of a reporting period in hours (0 if either bound is unparsable)."""
    start_dt = to_datetime(start)
    end_dt = to_datetime(end)
    if start_dt is None or end_dt is None:
        return 0.0
    return _hours_between(start_dt, end_dt)


def in_period(value: Any, start: Any, end: Any) -> bool:
    """Check whether a timestamp lies within ``[start, end]``."""
    moment = to_datetime(value)
    start_dt = to_datetime(start)
    end_dt = to_datetime(end)
    if moment is None or start_dt is None or end_dt is None:
        return False
    low, moment_a = align_datetimes(start_dt, moment)
    moment_b, high = align_datetimes(moment, end_dt)
    return low <= moment_a and moment_b <= high


def breakdown_hours(breakdown: Any) -> Optional[float]:
    """
    Duration of a resolved breakdown in hours.

    Returns:
        Hours between ``startAt`` and ``endAt``, or None while the breakdown
        is active or its timestamps are unparsable.
    """
    start = to_datetime(get_field(breakdown, "startAt"))
    end = to_datetime(get_field(breakdown, "endAt"))
    if start is None or end is None:
        return None
    return _hours_between(start, end)


def is_active_breakdown(breakdown: Any) -> bool:
    """A breakdown is active until it has an end timestamp."""
    return get_field(breakdown, "endAt") is None


def maintenance_activity(
    work_orders: Optional[Iterable[Any]],
    status_sets: Optional[StatusSets] = None,
) -> MaintenanceActivity:
    """
    Compute the maintenance activity ratio (MA/PA).

    Args:
        work_orders: Work orders of the period.
        status_sets: Status sets (code defaults if None).

    Returns:
        MaintenanceActivity with ratio = actual / planned x 100.
    """
    status_sets = status_sets or StatusSets.from_rules({})
    preventive = status_sets.members("work_order_preventive")
    completed = status_sets.members("work_order_completed")
    orders = ensure_records(work_orders)

    planned = sum(
        1 for wo in orders if normalize_status(get_field(wo, "workOrderType")) in preventive
    )
    actual = sum(1 for wo in orders if normalize_status(get_field(wo, "status")) in completed)
    ratio = actual / planned * 100 if planned > 0 else 0.0
    return MaintenanceActivity(planned=planned, actual=actual, ratio=round(ratio, 2))


def shutdown_metrics(breakdowns: Optional[Iterable[Any]]) -> ShutdownMetrics:
    """Count active shutdowns and total the hours of resolved ones."""
    records = ensure_records(breakdowns)
    durations = [h for h in (breakdown_hours(b) for b in records) if h is not None]
    total = sum(durations)
    return ShutdownMetrics(
        count=sum(1 for b in records if is_active_breakdown(b)),
        total_hours=round(total, 2),
        average_duration=round(total / len(durations), 2) if durations else 0.0,
    )


def mean_time_to_repair(breakdowns: Optional[Iterable[Any]]) -> float:
    """Average repair time in hours over resolved breakdowns."""
    durations = [h for h in (breakdown_hours(b) for b in ensure_records(breakdowns)) if h is not None]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


def mean_time_between_shutdowns(breakdowns: Optional[Iterable[Any]]) -> float:
    """Average gap in hours between consecutive breakdown starts."""
    starts = sorted(
        (s for s in (to_datetime(get_field(b, "startAt")) for b in ensure_records(breakdowns)) if s is not None),
        key=lambda s: align_datetimes(s, datetime(1970, 1, 1))[0],
    )
    if len(starts) < 2:
        return 0.0
    gaps = [_hours_between(a, b) for a, b in zip(starts, starts[1:])]
    return sum(gaps) / len(gaps)


def availability(equipment_count: int, shutdown_hours: float, start: Any, end: Any) -> float:
    """
    Percentage of available equipment-hours not lost to shutdowns.

    Returns:
        Value clamped to [0, 100]; 100 when there are no equipment-hours.
    """
    available = max(0, int(equipment_count)) * period_hours(start, end)
    if available <= 0:
        return 100.0
    value = (available - to_number(shutdown_hours)) / available * 100
    return max(0.0, min(100.0, value))


def calculate_kpis(
    work_orders: Optional[Iterable[Any]],
    breakdowns: Optional[Iterable[Any]],
    equipment_count: int,
    start: Any,
    end: Any,
    status_sets: Optional[StatusSets] = None,
) -> KPIData:
    """
    Calculate maintenance KPIs for a reporting period.

    Args:
        work_orders: All work orders (filtered by ``scheduledDate``).
        breakdowns: All breakdowns (filtered by ``startAt``).
        equipment_count: Number of pieces of equipment in service.
        start: Period start.
        end: Period end.
        status_sets: Status sets (code defaults if None).

    Returns:
        KPIData with values rounded to 2 decimals.
    """
    period_orders = [
        wo for wo in ensure_records(work_orders) if in_period(get_field(wo, "scheduledDate"), start, end)
    ]
    period_breakdowns = [
        b for b in ensure_records(breakdowns) if in_period(get_field(b, "startAt"), start, end)
    ]

    shutdown = shutdown_metrics(period_breakdowns)
    kpis = KPIData(
        maintenance_activity=maintenance_activity(period_orders, status_sets),
        shutdown=shutdown,
        mttr=round(mean_time_to_repair(period_breakdowns), 2),
        mtbs=round(mean_time_between_shutdowns(period_breakdowns), 2),
        availability=round(availability(equipment_count, shutdown.total_hours, start, end), 2),
    )

    logger.debug(
        f"KPIs for {len(period_orders)} work orders and {len(period_breakdowns)} breakdowns: "
        f"MTTR={kpis.mttr}h, availability={kpis.availability}%"
    )
    return kpis


def equipment_utilization(
    equipment: Optional[Iterable[Any]],
    start: Any,
    end: Any,
) -> List[EquipmentUtilization]:
    """
    Compute per-equipment utilization for a period.

    Each equipment record carries its ``usageLogs`` (``shiftDate``,
    ``hoursUsed``) and ``breakdowns``; only entries inside the period count.
    """
    hours = period_hours(start, end)
    results = []

    for eq in ensure_records(equipment):
        usage = sum(
            to_number(get_field(log, "hoursUsed"))
            for log in get_children(eq, "usageLogs")
            if in_period(get_field(log, "shiftDate"), start, end)
        )
        lost = sum(
            breakdown_hours(b) or 0.0
            for b in get_children(eq, "breakdowns")
            if in_period(get_field(b, "startAt"), start, end)
        )
        code = get_field(eq, "code") or ""
        results.append(
            EquipmentUtilization(
                id=get_field(eq, "id"),
                name=get_field(eq, "description") or code,
                code=code,
                utilization=round(usage / hours * 100, 2) if hours > 0 else 0.0,
                usage_hours=usage,
                breakdown_hours=round(lost, 2),
                status="ACTIVE" if get_field(eq, "isActive") else "INACTIVE",
            )
        )

    return results
