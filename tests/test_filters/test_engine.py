"""Tests for the record filtering engine."""

import logging
from datetime import date

import pytest


@pytest.fixture
def inventory_config(rules_data):
    from src.filters import load_filter_config

    return load_filter_config("inventory", rules_data)


@pytest.fixture
def engine(inventory_config):
    from src.filters import FilterEngine

    return FilterEngine(inventory_config)


class TestFilterProperties:
    """Tests for identity, idempotence and monotonicity."""

    def test_identity(self, engine, inventory_items):
        """An unconstrained state returns every record in order."""
        from src.filters import FilterState

        result = engine.filter(inventory_items, FilterState())

        assert result == inventory_items
        assert result is not inventory_items

    def test_identity_with_legacy_all_values(self, engine, inventory_items):
        from src.filters import FilterState

        state = FilterState.from_raw("", category="all", location="", quantity=None)

        assert engine.filter(inventory_items, state) == inventory_items

    @pytest.mark.parametrize(
        "raw",
        [
            {"search": "a"},
            {"search": "", "category": "Filters"},
            {"search": "warehouse", "location": "warehouse a"},
            {"search": "", "stock_status": "low"},
            {"search": "", "quantity": {"min": 1, "max": 20}},
        ],
    )
    def test_idempotence(self, engine, inventory_items, raw):
        from src.filters import FilterState

        fields = dict(raw)
        state = FilterState.from_raw(fields.pop("search"), **fields)
        once = engine.filter(inventory_items, state)

        assert engine.filter(once, state) == once

    def test_monotonicity(self, engine, inventory_items):
        """Each added constraint never grows the result."""
        from src.filters import FilterState

        states = [
            FilterState(),
            FilterState.from_raw("e"),
            FilterState.from_raw("e", location="warehouse"),
            FilterState.from_raw("e", location="warehouse", stock_status="low"),
            FilterState.from_raw("e", location="warehouse", stock_status="low", category="Brakes"),
        ]
        sizes = [len(engine.filter(inventory_items, s)) for s in states]

        assert sizes == sorted(sizes, reverse=True)
        assert sizes[0] == 3
        assert sizes[-1] == 0

    def test_preserves_order(self, engine, inventory_items):
        from src.filters import FilterState

        reversed_items = list(reversed(inventory_items))
        result = engine.filter(reversed_items, FilterState.from_raw("", location="warehouse a"))

        assert [r["id"] for r in result] == ["3", "1"]


class TestSearch:
    """Tests for free-text search."""

    def test_substring_search(self, engine, inventory_items):
        """'hyd' matches only the hydraulic pump, by name or code."""
        from src.filters import FilterState

        result = engine.filter(inventory_items[:2], FilterState(search="hyd"))

        assert result == [inventory_items[0]]

    def test_search_is_case_insensitive(self, engine, inventory_items):
        from src.filters import FilterState

        assert engine.filter(inventory_items, FilterState(search="ENG-0")) == [inventory_items[1]]

    def test_search_nested_fields(self, engine, hierarchical_items):
        from src.filters import FilterState

        result = engine.filter(hierarchical_items, FilterState(search="itm-2"))

        assert [r["id"] for r in result] == ["h2"]

    def test_search_ignores_unsearchable_fields(self, engine, inventory_items):
        from src.filters import FilterState

        # category is filterable but not searchable
        assert engine.filter(inventory_items, FilterState(search="Hydraulics")) == []


class TestComparisonModes:
    """Tests for per-field comparison modes."""

    def test_equals_string(self, engine, inventory_items):
        from src.filters import FilterState

        assert engine.filter(inventory_items, FilterState.from_raw("", category="Filters")) == [
            inventory_items[1]
        ]
        assert engine.filter(inventory_items, FilterState.from_raw("", category="filters")) == []

    def test_case_insensitive_substring(self, engine, inventory_items):
        from src.filters import FilterState

        result = engine.filter(inventory_items, FilterState.from_raw("", location="WAREHOUSE A"))

        assert [r["id"] for r in result] == ["1", "3"]

    def test_numeric_equals_is_exact(self, engine, inventory_items):
        from src.filters import FilterState

        assert engine.filter(inventory_items, FilterState.from_raw("", quantity="15")) == [
            inventory_items[1]
        ]
        assert engine.filter(inventory_items, FilterState.from_raw("", quantity=15.0)) == [
            inventory_items[1]
        ]
        # Exact match, not a threshold
        assert engine.filter(inventory_items, FilterState.from_raw("", quantity="10")) == []

    def test_numeric_range_is_opt_in(self, engine, inventory_items):
        from src.filters import FilterState, Range

        state = FilterState(constraints={"quantity": Range(minimum=1, maximum=20)})

        assert [r["id"] for r in engine.filter(inventory_items, state)] == ["1", "2"]

    def test_date_equals(self, rules_data, rentals):
        from src.filters import FilterEngine, FilterState, load_filter_config

        engine = FilterEngine(load_filter_config("rentals", rules_data))

        by_date = engine.filter(rentals, FilterState.from_raw("", startDate=date(2024, 3, 1)))
        by_timestamp = engine.filter(
            rentals, FilterState.from_raw("", startDate="2024-03-01T15:30:00")
        )

        assert [r["id"] for r in by_date] == ["r1"]
        assert by_timestamp == by_date
        assert engine.filter(rentals, FilterState.from_raw("", startDate="soon")) == []

    def test_one_of(self, rules_data, rentals):
        from src.filters import FilterEngine, FilterState, load_filter_config

        engine = FilterEngine(load_filter_config("rentals", rules_data))
        result = engine.filter(rentals, FilterState.from_raw("", status=["ACTIVE", "OVERDUE"]))

        assert [r["id"] for r in result] == ["r1", "r2"]

    def test_explicit_all_value_is_a_real_value(self, engine):
        from src.filters import EqualTo, FilterState

        records = [{"id": 1, "category": "all"}, {"id": 2, "category": "Filters"}]
        state = FilterState(constraints={"category": EqualTo("all")})

        assert engine.filter(records, state) == [records[0]]


class TestDerivedFields:
    """Tests for classifier-backed filter fields."""

    def test_stock_status(self, engine, inventory_items):
        from src.filters import FilterState

        low = engine.filter(inventory_items, FilterState.from_raw("", stock_status="low"))
        out = engine.filter(inventory_items, FilterState.from_raw("", stock_status="out"))

        assert [r["id"] for r in low] == ["1"]
        assert [r["id"] for r in out] == ["3"]

    def test_critical_work_orders(self, rules_data, work_orders):
        from src.filters import FilterEngine, FilterState, load_filter_config

        engine = FilterEngine(load_filter_config("work_orders", rules_data))
        result = engine.filter(work_orders, FilterState.from_raw("", is_critical="true"))

        assert [r["id"] for r in result] == ["w1", "w2"]

    def test_unknown_derived_field_is_a_configuration_error(self):
        from config.config_loader import ConfigurationError
        from src.filters import FilterConfig

        with pytest.raises(ConfigurationError):
            FilterConfig.from_dict("inventory", {"derived": ["nonexistent"]}, {})


class TestEdgeCases:
    """Tests for absent input and misconfiguration."""

    def test_none_collection(self, engine):
        from src.filters import FilterState

        assert engine.filter(None, FilterState(search="hyd")) == []
        assert engine.filter(None) == []

    def test_no_match_is_empty_list(self, engine, inventory_items):
        from src.filters import FilterState

        result = engine.filter(inventory_items, FilterState(search="no such item"))

        assert result == []
        assert isinstance(result, list)

    def test_unconfigured_field_warns(self, engine, inventory_items, caplog):
        from src.filters import FilterState

        state = FilterState.from_raw("", name="Engine Oil Filter")
        with caplog.at_level(logging.WARNING, logger="ops_dashboard.filters"):
            result = engine.filter(inventory_items, state)

        assert result == [inventory_items[1]]
        assert "not configured" in caplog.text

    def test_missing_field_never_matches(self, engine):
        from src.filters import FilterState

        assert engine.filter([{"id": 1}], FilterState.from_raw("", location="warehouse")) == []

    def test_input_not_mutated(self, engine, inventory_items):
        import copy
        from src.filters import FilterState

        before = copy.deepcopy(inventory_items)
        engine.filter(inventory_items, FilterState.from_raw("a", stock_status="low"))

        assert inventory_items == before

    def test_unknown_comparison_mode(self):
        from config.config_loader import ConfigurationError
        from src.filters import FilterConfig

        with pytest.raises(ConfigurationError):
            FilterConfig(entity="x", fields={"status": "fuzzy"})

    def test_filter_records_and_count(self, inventory_config, inventory_items):
        from src.filters import FilterEngine, FilterState, filter_records

        state = FilterState(search="e")

        assert filter_records(inventory_items, state, inventory_config) == inventory_items
        assert FilterEngine(inventory_config).count(inventory_items, FilterState(search="hyd")) == 1

    def test_extreme_decimal_values(self):
        from decimal import Decimal
        from src.filters import FilterConfig, FilterEngine, FilterState

        config = FilterConfig(
            entity="transactions",
            search_fields=("amount",),
            fields={"amount": "numeric-equals"},
        )
        engine = FilterEngine(config)
        records = [
            {"amount": Decimal("1E+30")},
            {"amount": Decimal("5")},
            {"amount": Decimal("Infinity")},
        ]

        assert engine.filter(records, FilterState.from_raw("", amount="5")) == [records[1]]
        assert engine.filter(records, FilterState(search="inf")) == [records[2]]
        assert engine.filter(records, FilterState(search="1000000000000000000000")) == [records[0]]


class TestTableHelpers:
    """Tests for sorting and drop-down values."""

    def test_sort_by_quantity(self, inventory_items):
        from src.filters import sort_records

        ascending = sort_records(inventory_items, "quantity")
        descending = sort_records(inventory_items, "quantity", descending=True)

        assert [r["id"] for r in ascending] == ["3", "1", "2"]
        assert [r["id"] for r in descending] == ["2", "1", "3"]

    def test_missing_values_sort_last(self):
        from src.filters import sort_records

        records = [{"id": 1}, {"id": 2, "name": "beta"}, {"id": 3, "name": "Alpha"}]

        assert [r["id"] for r in sort_records(records, "name")] == [3, 2, 1]
        assert [r["id"] for r in sort_records(records, "name", descending=True)] == [2, 3, 1]

    def test_sort_by_derived_field(self, inventory_config, inventory_items):
        from src.filters import sort_records

        result = sort_records(inventory_items, "stock_status", config=inventory_config)

        assert [r["id"] for r in result] == ["1", "2", "3"]  # low, normal, out

    def test_distinct_values(self, inventory_items):
        from src.filters import distinct_values

        assert distinct_values(inventory_items, "category") == ["Brakes", "Filters", "Hydraulics"]
        assert distinct_values(None, "category") == []
