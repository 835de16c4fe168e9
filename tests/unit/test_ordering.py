"""
Unit tests for property order allocation.

Tests cover:
- Gap filling from 0 in caller order
- Explicit orders preserved
- Orders beyond the property count (widened)
- Rejection of duplicate and malformed explicit orders
- Append order for added properties
"""

import pytest

from resource_proxy.errors import ContractViolationError
from resource_proxy.schema.ordering import allocate_orders, next_append_order


def _orders(result):
    return {name: entry["order"] for name, entry in result.items()}


class TestAllocateOrders:
    """Tests for allocate_orders."""

    def test_no_explicit_orders(self):
        """Properties without orders get 0..N-1 in iteration order."""
        result = allocate_orders({
            "name": {"type": "string"},
            "foundation_year": {"type": "number"},
            "city": {"type": "string"},
        })

        assert _orders(result) == {"name": 0, "foundation_year": 1, "city": 2}
        assert list(result) == ["name", "foundation_year", "city"]

    def test_fills_gaps_around_explicit_orders(self):
        """Free slots skip the ones already claimed."""
        result = allocate_orders({
            "a": {},
            "b": {"order": 0},
            "c": {},
            "d": {"order": 2},
            "e": {},
        })

        assert _orders(result) == {"a": 1, "b": 0, "c": 3, "d": 2, "e": 4}

    def test_explicit_orders_never_renumbered(self):
        """Explicit orders come out exactly as they went in."""
        result = allocate_orders({"x": {"order": 3}, "y": {}, "z": {"order": 1}})

        assert result["x"]["order"] == 3
        assert result["z"]["order"] == 1
        assert result["y"]["order"] == 0

    def test_fully_ordered_input_unchanged(self):
        """With every order given, output equals input."""
        properties = {
            "title": {"type": "string", "order": 1},
            "body": {"type": "string", "order": 0},
        }

        assert allocate_orders(properties) == properties

    def test_orders_unique_and_bounded(self):
        """Without out-of-range orders, every order is unique and in [0, N-1]."""
        properties = {f"p{i}": ({"order": i * 2} if i < 3 else {}) for i in range(8)}

        orders = list(_orders(allocate_orders(properties)).values())

        assert sorted(orders) == list(range(8))

    def test_explicit_order_beyond_count_is_widened(self):
        """An explicit order >= N is kept; others still fill from 0."""
        result = allocate_orders({"a": {}, "b": {"order": 7}, "c": {}})

        assert _orders(result) == {"a": 0, "b": 7, "c": 1}

    def test_input_not_mutated(self):
        """The caller's mappings are left untouched."""
        partial = {"type": "string"}

        allocate_orders({"a": partial})

        assert "order" not in partial

    def test_empty(self):
        """No properties, no orders."""
        assert allocate_orders({}) == {}

    def test_duplicate_explicit_order_raises(self):
        """Two properties cannot claim the same order."""
        with pytest.raises(ContractViolationError, match="more than one property"):
            allocate_orders({"a": {"order": 1}, "b": {"order": 1}})

    @pytest.mark.parametrize("bad", [-1, 1.5, "2", True, None])
    def test_malformed_explicit_order_raises(self, bad):
        """Explicit orders must be non-negative integers."""
        with pytest.raises(ContractViolationError, match="invalid order"):
            allocate_orders({"a": {"order": bad}})


class TestNextAppendOrder:
    """Tests for next_append_order."""

    def test_empty_gives_zero(self):
        """First property of a collection gets order 0."""
        assert next_append_order([]) == 0

    def test_one_past_max(self):
        """Appended order is max + 1."""
        assert next_append_order([0, 1, 2]) == 3

    def test_gaps_not_reused(self):
        """Gaps below the maximum stay empty."""
        assert next_append_order([0, 5]) == 6

    def test_single_zero(self):
        """A lone property at 0 is followed by 1."""
        assert next_append_order([0]) == 1
