"""Pytest configuration and fixtures for the operations dashboard engine tests."""

import pytest
from datetime import datetime
from pathlib import Path

CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture
def now():
    """Fixed reference time for time-windowed metrics."""
    return datetime(2024, 3, 15, 10, 0, 0)


@pytest.fixture
def rules_data():
    """Rules loaded straight from the shipped rules file."""
    from config.config_loader import load_rules_file

    return load_rules_file(CONFIG_DIR / "rules.yaml")


@pytest.fixture
def inventory_items():
    """Flat inventory items (one low, one normal, one out of stock)."""
    return [
        {
            "id": "1",
            "name": "Hydraulic Pump Assembly",
            "code": "HYD-002",
            "category": "Hydraulics",
            "location": "Warehouse A",
            "quantity": 3,
            "minQuantity": 5,
            "averageCost": 250.0,
        },
        {
            "id": "2",
            "name": "Engine Oil Filter",
            "code": "ENG-003",
            "category": "Filters",
            "location": "Warehouse B",
            "quantity": 15,
            "minQuantity": 10,
            "averageCost": 12.5,
        },
        {
            "id": "3",
            "name": "Brake Pad Set",
            "code": "BRK-010",
            "category": "Brakes",
            "location": "warehouse a annex",
            "quantity": 0,
            "minQuantity": 4,
            "averageCost": "n/a",
        },
    ]


@pytest.fixture
def hierarchical_items():
    """Inventory items stocked per branch and location."""
    return [
        {
            "id": "h1",
            "item": {"number": "ITM-100", "description": "Bearing 6204"},
            "branches": [
                {
                    "name": "North",
                    "reorderPoint": 10,
                    "locations": [
                        {"bin": "A1", "quantity": 4, "averageCost": 2.5},
                        {"bin": "A2", "quantity": 20, "averageCost": 2.5},
                    ],
                }
            ],
        },
        {
            "id": "h2",
            "item": {"number": "ITM-200", "description": "V-Belt"},
            "branches": [
                {
                    "name": "North",
                    "reorderPoint": 5,
                    "locations": [{"bin": "B1", "quantity": 30, "averageCost": "bad"}],
                },
                {
                    "name": "South",
                    "reorderPoint": 5,
                    "locations": [
                        {"bin": "C1", "quantity": 12, "averageCost": 4, "reorderPoint": 2}
                    ],
                },
            ],
        },
        {
            "id": "h3",
            "item": {"number": "ITM-300", "description": "Gasket"},
            "branches": [{"name": "East", "reorderPoint": 5, "locations": []}],
        },
    ]


@pytest.fixture
def orders():
    """Orders across the current month, last month and last year."""
    return [
        {
            "id": "o1",
            "orderNumber": "ORD-2024-001",
            "status": "COMPLETED",
            "createdAt": "2024-03-02T09:00:00Z",
            "customer": {"name": "ABC Company"},
        },
        {
            "id": "o2",
            "orderNumber": "ORD-2024-002",
            "status": "COMPLETED",
            "createdAt": "2024-03-28T17:30:00",
            "customer": {"name": "XYZ Corp"},
        },
        {
            "id": "o3",
            "orderNumber": "ORD-2024-003",
            "status": "COMPLETED",
            "createdAt": "2024-02-28T12:00:00",
            "customer": {"name": "DEF Ltd"},
        },
        {
            "id": "o4",
            "orderNumber": "ORD-2023-004",
            "status": "COMPLETED",
            "createdAt": "2023-03-10T08:00:00",
            "customer": {"name": "ABC Company"},
        },
        {
            "id": "o5",
            "orderNumber": "ORD-2024-005",
            "status": "PROCESSING",
            "createdAt": "2024-03-05",
            "customer": {"name": "XYZ Corp"},
        },
        {
            "id": "o6",
            "orderNumber": "ORD-2024-006",
            "status": "pending_approval",
            "createdAt": "2024-03-06",
            "customer": {"name": "GHI Industries"},
        },
        {
            "id": "o7",
            "orderNumber": "ORD-2024-007",
            "status": "CONFIRMED",
            "createdAt": None,
            "customer": {"name": "ABC Company"},
        },
    ]


@pytest.fixture
def equipment():
    """Equipment master records, one with usage logs and breakdowns."""
    return [
        {
            "id": "e1",
            "code": "EXC-01",
            "name": "Excavator",
            "description": "Excavator 20t",
            "type": "HEAVY",
            "status": "ACTIVE",
            "rentalRate": 1500,
            "isActive": True,
            "usageLogs": [
                {"shiftDate": "2024-03-01", "hoursUsed": 8},
                {"shiftDate": "2024-03-02", "hoursUsed": "6.5"},
                {"shiftDate": "2024-02-01", "hoursUsed": 10},
            ],
            "breakdowns": [
                {"startAt": "2024-03-03T08:00:00", "endAt": "2024-03-03T12:00:00"},
            ],
        },
        {
            "id": "e2",
            "code": "CRN-02",
            "name": "Crane",
            "type": "HEAVY",
            "status": "RENTED",
            "rentalRate": 1500.0,
            "isActive": False,
        },
        {
            "id": "e3",
            "code": "GEN-03",
            "name": "Generator",
            "type": "LIGHT",
            "status": "ACTIVE",
            "rentalRate": 250.5,
            "isActive": True,
        },
        {
            "id": "e4",
            "code": "CMP-04",
            "name": "Compressor",
            "type": "LIGHT",
            "status": "MAINTENANCE",
            "rentalRate": 300,
            "isActive": True,
        },
    ]


@pytest.fixture
def rentals():
    """Rental contracts with their bills."""
    return [
        {
            "id": "r1",
            "rentalNumber": "RNT-001",
            "status": "ACTIVE",
            "startDate": "2024-03-01",
            "dailyRate": 1500,
            "customer": {"name": "ABC Company"},
            "equipment": {"code": "EXC-01"},
            "rentalBills": [{"totalAmount": 3000}, {"totalAmount": "1500.50"}],
        },
        {
            "id": "r2",
            "rentalNumber": "RNT-002",
            "status": "OVERDUE",
            "startDate": "2024-02-01",
            "dailyRate": 1500,
            "customer": {"name": "XYZ Corp"},
            "equipment": {"code": "CRN-02"},
            "rentalBills": [{"totalAmount": "n/a"}],
        },
        {
            "id": "r3",
            "rentalNumber": "RNT-003",
            "status": "active",
            "startDate": "2024-03-10",
            "dailyRate": 250.5,
            "customer": {"name": "DEF Ltd"},
            "equipment": {"code": "GEN-03"},
            "rentalBills": [],
        },
        {
            "id": "r4",
            "rentalNumber": "RNT-004",
            "status": "COMPLETED",
            "startDate": "2024-01-15",
            "dailyRate": 300,
            "customer": {"name": "ABC Company"},
            "equipment": {"code": "CMP-04"},
            "rentalBills": [{"totalAmount": 800}],
        },
    ]


@pytest.fixture
def maintenance_schedules():
    """Maintenance schedules relative to the fixed ``now`` (2024-03-15)."""
    return [
        {"id": "m1", "equipmentId": "e1", "nextMaintenanceDate": "2024-03-20"},  # +5 days
        {"id": "m2", "equipmentId": "e2", "nextMaintenanceDate": "2024-03-25"},  # +10 days
        {"id": "m3", "equipmentId": "e3", "nextMaintenanceDate": "2024-03-01"},  # overdue
        {"id": "m4", "equipmentId": "e4", "nextMaintenanceDate": None},
    ]


@pytest.fixture
def consumables():
    """Consumables with restock dates."""
    return [
        {"id": "c1", "name": "Hydraulic Oil", "nextRestockDate": "2024-03-18"},
        {"id": "c2", "name": "Grease", "nextRestockDate": "2024-04-30"},
    ]


@pytest.fixture
def work_orders():
    """Work orders of mixed priority, type and status."""
    return [
        {
            "id": "w1",
            "number": "WO-001",
            "title": "Replace hydraulic hose",
            "priority": "CRITICAL",
            "status": "OPEN",
            "workOrderType": "CORRECTIVE",
            "scheduledDate": "2024-03-04",
        },
        {
            "id": "w2",
            "number": "WO-002",
            "title": "Engine service",
            "priority": "critical",
            "status": "in_progress",
            "workOrderType": "PREVENTIVE",
            "scheduledDate": "2024-03-05",
        },
        {
            "id": "w3",
            "number": "WO-003",
            "title": "Crane inspection",
            "priority": "CRITICAL",
            "status": "COMPLETED",
            "workOrderType": "PREVENTIVE",
            "scheduledDate": "2024-03-11",
        },
        {
            "id": "w4",
            "number": "WO-004",
            "title": "Generator load test",
            "priority": "HIGH",
            "status": "OPEN",
            "workOrderType": "PREVENTIVE",
            "scheduledDate": "2024-03-12",
        },
        {
            "id": "w5",
            "number": "WO-005",
            "title": "Compressor filter change",
            "priority": "LOW",
            "status": "CANCELED",
            "workOrderType": "PREVENTIVE",
            "scheduledDate": "2024-02-20",
        },
    ]


@pytest.fixture
def breakdowns():
    """Two resolved breakdowns (4h and 2h) and one still active."""
    return [
        {"id": "b1", "startAt": "2024-03-01T08:00:00", "endAt": "2024-03-01T12:00:00"},
        {"id": "b2", "startAt": "2024-03-03T08:00:00", "endAt": "2024-03-03T10:00:00"},
        {"id": "b3", "startAt": "2024-03-05T08:00:00", "endAt": None},
    ]


@pytest.fixture
def employees():
    """Employees with attendance and check-in data."""
    return [
        {
            "id": "p1",
            "name": "Siti Rahma",
            "employeeId": "EMP-001",
            "email": "siti@example.com",
            "position": "Technician",
            "department": "Operations",
            "status": "ACTIVE",
            "location": "Jakarta HQ",
            "salary": 8000,
            "attendance": 95,
            "checkIn": "2024-03-15T07:55:00",
        },
        {
            "id": "p2",
            "name": "Budi Santoso",
            "employeeId": "EMP-002",
            "email": "budi@example.com",
            "position": "Mechanic",
            "department": "Maintenance",
            "status": "on-leave",
            "location": "Surabaya Depot",
            "salary": 7000,
            "attendance": "80",
            "checkIn": None,
        },
        {
            "id": "p3",
            "name": "Dewi Lestari",
            "employeeId": "EMP-003",
            "email": "dewi@example.com",
            "position": "Planner",
            "department": "Operations",
            "status": "ACTIVE",
            "location": "jakarta hq",
            "salary": "9000",
            "attendance": None,
            "checkIn": "2024-03-14T08:10:00",
        },
        {
            "id": "p4",
            "name": "Agus Wijaya",
            "employeeId": "EMP-004",
            "email": "agus@example.com",
            "position": "Driver",
            "department": "Logistics",
            "status": "INACTIVE",
            "location": "Bandung",
            "salary": 5000,
            "checkIn": "08:00",
        },
    ]


@pytest.fixture
def transactions():
    """Finance transactions (signed, string and malformed amounts)."""
    return [
        {
            "id": "t1",
            "type": "INCOME",
            "amount": 10000,
            "status": "COMPLETED",
            "category": "Rental",
            "description": "Rental income March",
            "reference": "INV-001",
            "date": "2024-03-10",
        },
        {
            "id": "t2",
            "type": "EXPENSE",
            "amount": -2500,
            "status": "COMPLETED",
            "category": "Maintenance",
            "description": "Spare parts",
            "reference": "PO-014",
            "date": "2024-03-11",
        },
        {
            "id": "t3",
            "type": "expense",
            "amount": "1500",
            "status": "PENDING",
            "category": "Fuel",
            "description": "Diesel delivery",
            "reference": "PO-015",
            "date": "2024-03-12",
        },
        {
            "id": "t4",
            "type": "INCOME",
            "amount": "abc",
            "status": "pending",
            "category": "Rental",
            "description": "Disputed invoice",
            "reference": "INV-002",
            "date": "2024-03-13",
        },
    ]


@pytest.fixture
def customers():
    return [
        {"id": "cu1", "name": "ABC Company", "type": "CORPORATE", "status": "ACTIVE"},
        {"id": "cu2", "name": "XYZ Corp", "type": "CORPORATE", "status": "INACTIVE"},
        {"id": "cu3", "name": "DEF Ltd", "type": "SME", "status": "active"},
    ]


@pytest.fixture
def leads():
    return [
        {"id": "l1", "status": "NEW"},
        {"id": "l2", "status": "NEW"},
        {"id": "l3", "status": "QUALIFIED"},
        {"id": "l4"},
    ]


@pytest.fixture
def dashboard_collections(
    orders,
    equipment,
    maintenance_schedules,
    consumables,
    work_orders,
    breakdowns,
    hierarchical_items,
    rentals,
    employees,
    transactions,
    customers,
    leads,
):
    """All collections the dashboard aggregates."""
    return {
        "orders": orders,
        "equipment": equipment,
        "maintenance": maintenance_schedules,
        "consumables": consumables,
        "alerts": work_orders,
        "breakdowns": breakdowns,
        "inventory": hierarchical_items,
        "rentals": rentals,
        "employees": employees,
        "transactions": transactions,
        "customers": customers,
        "leads": leads,
    }
