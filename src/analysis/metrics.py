"""Dashboard metrics aggregation.

Reduces the raw entity collections of the operations dashboard into one
namespaced ``MetricsSnapshot`` for the summary cards. Aggregation runs in two
passes: every area is first reduced from its own collections, then the
cross-collection metrics (rental utilization, profit margin) are derived
from those finished results.

The aggregator is read-only over its inputs and a pure function of
``(collections, rules, now)``.
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.config_loader import StatusSets, load_rules
from config.logging_config import get_logger
from src.records import (
    align_datetimes,
    ensure_records,
    get_children,
    get_field,
    normalize_status,
    stringify,
    to_date,
    to_datetime,
    to_number,
    to_optional_number,
)
from .classifiers import (
    DateWindowRule,
    PresenceRule,
    PresenceStatus,
    ScheduleStatus,
    SeverityRule,
    StockRule,
    StockStatus,
    classify_presence,
    classify_schedule,
    classify_stock,
    inventory_value,
    is_critical,
    load_severity_rule,
    load_stock_rule,
    load_window_rules,
    resolve_now,
)

logger = get_logger("metrics")

COLLECTION_NAMES = (
    "orders",
    "equipment",
    "maintenance",
    "consumables",
    "alerts",
    "breakdowns",
    "inventory",
    "rentals",
    "employees",
    "transactions",
    "customers",
    "leads",
)


@dataclass(frozen=True)
class RuleSet:
    """Threshold rules and status sets used by one aggregation."""

    stock: StockRule = field(default_factory=StockRule)
    maintenance_window: DateWindowRule = field(
        default_factory=lambda: DateWindowRule("nextMaintenanceDate")
    )
    restock_window: DateWindowRule = field(
        default_factory=lambda: DateWindowRule("nextRestockDate")
    )
    severity: SeverityRule = field(default_factory=SeverityRule)
    presence: PresenceRule = field(default_factory=PresenceRule)
    status_sets: StatusSets = field(default_factory=lambda: StatusSets.from_rules({}))

    def statuses(self, name: str) -> frozenset:
        """Get the upper-cased members of a named status set."""
        return self.status_sets.members(name)


def load_rule_set(rules: Optional[Dict[str, Any]] = None) -> RuleSet:
    """
    Build a RuleSet from the rules configuration.

    Args:
        rules: Already-loaded rules mapping (defaults to ``config/rules.yaml``).

    Returns:
        RuleSet with code defaults for anything not configured.
    """
    data = load_rules() if rules is None else rules
    windows = load_window_rules(data)
    return RuleSet(
        stock=load_stock_rule(data),
        maintenance_window=windows["maintenance"],
        restock_window=windows["restock"],
        severity=load_severity_rule(data),
        status_sets=StatusSets.from_rules(data),
    )


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class OrderMetrics:
    total: int = 0
    active: int = 0
    pending_approval: int = 0
    completed_this_month: int = 0


@dataclass(frozen=True)
class OperationsMetrics:
    total_equipment: int = 0
    maintenance_due: int = 0
    consumables_due: int = 0
    critical_alerts: int = 0
    active_breakdowns: int = 0


@dataclass(frozen=True)
class InventoryMetrics:
    total_items: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    total_value: float = 0.0


@dataclass(frozen=True)
class RentalMetrics:
    total: int = 0
    active: int = 0
    overdue: int = 0
    total_revenue: float = 0.0
    utilization: float = 0.0


@dataclass(frozen=True)
class HRMetrics:
    total: int = 0
    active: int = 0
    on_leave: int = 0
    present_today: int = 0
    average_attendance: float = 0.0
    monthly_payroll: float = 0.0


@dataclass(frozen=True)
class FinanceMetrics:
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    pending_count: int = 0
    pending_amount: float = 0.0
    profit_margin: float = 0.0


@dataclass(frozen=True)
class CRMMetrics:
    total_customers: int = 0
    active_customers: int = 0
    total_leads: int = 0
    leads_by_status: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricsSnapshot:
    """Aggregated dashboard metrics at one point in time."""

    generated_at: datetime
    orders: OrderMetrics = field(default_factory=OrderMetrics)
    operations: OperationsMetrics = field(default_factory=OperationsMetrics)
    inventory: InventoryMetrics = field(default_factory=InventoryMetrics)
    rental: RentalMetrics = field(default_factory=RentalMetrics)
    hr: HRMetrics = field(default_factory=HRMetrics)
    finance: FinanceMetrics = field(default_factory=FinanceMetrics)
    crm: CRMMetrics = field(default_factory=CRMMetrics)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain nested dictionary."""
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        return data


# =============================================================================
# Helpers
# =============================================================================


def count_where(records: Iterable[Any], predicate) -> int:
    """Count records satisfying a predicate."""
    return sum(1 for record in records if predicate(record))


def count_status(records: Iterable[Any], statuses: frozenset, status_field: str = "status") -> int:
    """Count records whose lifecycle status is in ``statuses`` (case-insensitive)."""
    return count_where(
        records, lambda r: normalize_status(get_field(r, status_field)) in statuses
    )


def count_by(records: Iterable[Any], field_name: str) -> Dict[str, int]:
    """Group records by a field and count each group (missing values are 'unknown')."""
    counts: Dict[str, int] = {}
    for record in records:
        key = stringify(get_field(record, field_name)) or "unknown"
        counts[key] = counts.get(key, 0) + 1
    return counts


def sum_field(records: Iterable[Any], field_name: str) -> float:
    """Sum a numeric field; non-numeric values count as 0."""
    return sum(to_number(get_field(record, field_name)) for record in records)


def in_same_month(value: Any, now: datetime) -> bool:
    """Check whether a timestamp falls in the calendar month and year of ``now``."""
    moment = to_datetime(value)
    if moment is None:
        return False
    moment, now = align_datetimes(moment, now)
    return moment.year == now.year and moment.month == now.month


def percentage(part: float, whole: float) -> float:
    """``part / whole`` as a percentage clamped to [0, 100] (0 when whole is 0)."""
    if whole <= 0:
        return 0.0
    return max(0.0, min(100.0, part / whole * 100))


# =============================================================================
# Aggregator
# =============================================================================


class MetricsAggregator:
    """
    Computes a MetricsSnapshot from named record collections.

    Example:
        aggregator = MetricsAggregator(load_rule_set())
        snapshot = aggregator.aggregate({"orders": orders}, now=datetime(2024, 3, 1))
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        self.rules = rules or RuleSet()

    def aggregate(
        self,
        collections: Optional[Mapping[str, Optional[Iterable[Any]]]] = None,
        now: Optional[datetime] = None,
    ) -> MetricsSnapshot:
        """
        Aggregate all dashboard metrics.

        Args:
            collections: Mapping of collection name to records. Missing or
                None collections are treated as empty.
            now: Reference time for time-windowed metrics.

        Returns:
            MetricsSnapshot
        """
        now = resolve_now(now)
        data = self._collect(collections or {})

        orders = self.order_metrics(data["orders"], now)
        operations = self.operations_metrics(
            data["equipment"],
            data["maintenance"],
            data["consumables"],
            data["alerts"],
            data["breakdowns"],
            now,
        )
        inventory = self.inventory_metrics(data["inventory"])
        rental = self.rental_metrics(data["rentals"])
        hr = self.hr_metrics(data["employees"], now)
        finance = self.finance_metrics(data["transactions"])
        crm = self.crm_metrics(data["customers"], data["leads"])

        # Cross-collection metrics read only the finished per-area results
        rental = replace(
            rental, utilization=percentage(rental.active, operations.total_equipment)
        )
        finance = replace(
            finance,
            profit_margin=round(finance.net / finance.income * 100, 2) if finance.income > 0 else 0.0,
        )

        snapshot = MetricsSnapshot(
            generated_at=now,
            orders=orders,
            operations=operations,
            inventory=inventory,
            rental=rental,
            hr=hr,
            finance=finance,
            crm=crm,
        )

        logger.debug(
            f"Aggregated metrics: {orders.total} orders, {inventory.total_items} items, "
            f"{operations.total_equipment} equipment, {rental.total} rentals"
        )
        return snapshot

    def _collect(self, collections: Mapping[str, Any]) -> Dict[str, List[Any]]:
        unknown = set(collections) - set(COLLECTION_NAMES)
        if unknown:
            logger.debug(f"Ignoring unrecognised collections: {', '.join(sorted(unknown))}")
        return {name: ensure_records(collections.get(name)) for name in COLLECTION_NAMES}

    # -------------------------------------------------------------------------
    # Per-area reductions
    # -------------------------------------------------------------------------

    def order_metrics(self, orders: List[Any], now: datetime) -> OrderMetrics:
        completed = self.rules.statuses("order_completed")
        return OrderMetrics(
            total=len(orders),
            active=count_status(orders, self.rules.statuses("order_active")),
            pending_approval=count_status(orders, self.rules.statuses("order_pending_approval")),
            completed_this_month=count_where(
                orders,
                lambda o: normalize_status(get_field(o, "status")) in completed
                and in_same_month(get_field(o, "createdAt"), now),
            ),
        )

    def operations_metrics(
        self,
        equipment: List[Any],
        maintenance: List[Any],
        consumables: List[Any],
        alerts: List[Any],
        breakdowns: List[Any],
        now: datetime,
    ) -> OperationsMetrics:
        return OperationsMetrics(
            total_equipment=len(equipment),
            maintenance_due=count_where(
                maintenance,
                lambda s: classify_schedule(s, self.rules.maintenance_window, now)
                is ScheduleStatus.DUE,
            ),
            consumables_due=count_where(
                consumables,
                lambda c: classify_schedule(c, self.rules.restock_window, now)
                is ScheduleStatus.DUE,
            ),
            critical_alerts=count_where(alerts, lambda a: is_critical(a, self.rules.severity)),
            active_breakdowns=count_where(breakdowns, lambda b: get_field(b, "endAt") is None),
        )

    def inventory_metrics(self, items: List[Any]) -> InventoryMetrics:
        statuses = [classify_stock(item, self.rules.stock) for item in items]
        return InventoryMetrics(
            total_items=len(items),
            low_stock=statuses.count(StockStatus.LOW),
            out_of_stock=statuses.count(StockStatus.OUT),
            total_value=sum(inventory_value(item, self.rules.stock) for item in items),
        )

    def rental_metrics(self, rentals: List[Any]) -> RentalMetrics:
        revenue = 0.0
        for rental in rentals:
            revenue += sum_field(get_children(rental, "rentalBills"), "totalAmount")
        return RentalMetrics(
            total=len(rentals),
            active=count_status(rentals, self.rules.statuses("rental_active")),
            overdue=count_status(rentals, self.rules.statuses("rental_overdue")),
            total_revenue=revenue,
        )

    def hr_metrics(self, employees: List[Any], now: datetime) -> HRMetrics:
        active_statuses = self.rules.statuses("employee_active")
        active = [e for e in employees if normalize_status(get_field(e, "status")) in active_statuses]

        def present_today(employee) -> bool:
            if classify_presence(employee, self.rules.presence) is not PresenceStatus.PRESENT:
                return False
            check_in = to_date(get_field(employee, self.rules.presence.check_in_field))
            return check_in is None or check_in == now.date()

        attendance = [
            value
            for value in (to_optional_number(get_field(e, "attendance")) for e in employees)
            if value is not None
        ]

        return HRMetrics(
            total=len(employees),
            active=len(active),
            on_leave=count_status(employees, self.rules.statuses("employee_on_leave")),
            present_today=count_where(employees, present_today),
            average_attendance=round(sum(attendance) / len(attendance), 2) if attendance else 0.0,
            monthly_payroll=sum_field(active, "salary"),
        )

    def finance_metrics(self, transactions: List[Any]) -> FinanceMetrics:
        income_types = self.rules.statuses("transaction_income")
        expense_types = self.rules.statuses("transaction_expense")
        pending_statuses = self.rules.statuses("transaction_pending")

        income = 0.0
        expenses = 0.0
        pending_count = 0
        pending_amount = 0.0
        for transaction in transactions:
            amount = abs(to_number(get_field(transaction, "amount")))
            kind = normalize_status(get_field(transaction, "type"))
            if kind in income_types:
                income += amount
            elif kind in expense_types:
                expenses += amount
            if normalize_status(get_field(transaction, "status")) in pending_statuses:
                pending_count += 1
                pending_amount += amount

        return FinanceMetrics(
            income=income,
            expenses=expenses,
            net=income - expenses,
            pending_count=pending_count,
            pending_amount=pending_amount,
        )

    def crm_metrics(self, customers: List[Any], leads: List[Any]) -> CRMMetrics:
        return CRMMetrics(
            total_customers=len(customers),
            active_customers=count_status(customers, self.rules.statuses("customer_active")),
            total_leads=len(leads),
            leads_by_status=count_by(leads, "status"),
        )


def aggregate(
    collections: Optional[Mapping[str, Optional[Iterable[Any]]]] = None,
    rules: Optional[RuleSet] = None,
    now: Optional[datetime] = None,
) -> MetricsSnapshot:
    """Aggregate dashboard metrics (see ``MetricsAggregator.aggregate``)."""
    return MetricsAggregator(rules).aggregate(collections, now=now)
