"""Unit tests for the in-memory predicate evaluator."""

from dataclasses import dataclass
from types import MappingProxyType

import pytest

from warden.core.scope import AllOf, AnyOf, Comparison, MatchNothing, ScopeError, evaluate


@dataclass
class Order:
    id: int
    ownerId: str | None
    baseId: int


class TestComparisons:
    """Single comparison nodes."""

    def test_equals(self):
        """Test equals matches only the same value."""
        node = Comparison("ownerId", "equals", "u1")
        assert evaluate(node, {"ownerId": "u1"}) is True
        assert evaluate(node, {"ownerId": "u2"}) is False

    def test_equals_never_matches_missing_field(self):
        """Test a missing field is None and None never equals a value."""
        assert evaluate(Comparison("ownerId", "equals", "u1"), {}) is False

    def test_not_equals_matches_missing_field(self):
        """Test notEquals matches a record without the field."""
        node = Comparison("ownerId", "notEquals", "u1")
        assert evaluate(node, {}) is True
        assert evaluate(node, {"ownerId": "u2"}) is True
        assert evaluate(node, {"ownerId": "u1"}) is False

    def test_in_and_not_in(self):
        """Test list membership operators."""
        assert evaluate(Comparison("baseId", "in", (1, 2)), {"baseId": 2}) is True
        assert evaluate(Comparison("baseId", "in", (1, 2)), {"baseId": 3}) is False
        assert evaluate(Comparison("baseId", "notIn", (1, 2)), {"baseId": 3}) is True
        assert evaluate(Comparison("baseId", "notIn", (1, 2)), {}) is True
        assert evaluate(Comparison("baseId", "in", (1, 2)), {}) is False

    def test_string_values_are_coerced_to_record_type(self):
        """Test fixed string literals compare against numeric and boolean fields."""
        assert evaluate(Comparison("baseId", "equals", "3"), {"baseId": 3}) is True
        assert evaluate(Comparison("baseId", "in", ("1", "3")), {"baseId": 3}) is True
        assert evaluate(Comparison("isActive", "equals", "true"), {"isActive": True}) is True
        assert evaluate(Comparison("price", "greaterThan", "9.5"), {"price": 10.0}) is True

    def test_ordering_operators(self):
        """Test greater/less than comparisons."""
        record = {"amount": 10}
        assert evaluate(Comparison("amount", "greaterThan", 5), record) is True
        assert evaluate(Comparison("amount", "greaterThanOrEqual", 10), record) is True
        assert evaluate(Comparison("amount", "lessThan", 10), record) is False
        assert evaluate(Comparison("amount", "lessThanOrEqual", 10), record) is True

    def test_ordering_never_matches_missing_or_incomparable(self):
        """Test ordering operators on None or mismatched types are False."""
        assert evaluate(Comparison("amount", "greaterThan", 5), {}) is False
        assert evaluate(Comparison("amount", "lessThan", 5), {"amount": "abc"}) is False

    def test_contains(self):
        """Test substring and list containment."""
        assert evaluate(Comparison("name", "contains", "cola"), {"name": "Coca cola"}) is True
        assert evaluate(Comparison("name", "contains", "tea"), {"name": "Coca cola"}) is False
        assert evaluate(Comparison("tags", "contains", "x"), {"tags": ["x", "y"]}) is True
        assert evaluate(Comparison("name", "contains", "x"), {}) is False

    def test_object_records(self):
        """Test records exposing fields as attributes."""
        order = Order(id=1, ownerId="u1", baseId=3)
        assert evaluate(Comparison("ownerId", "equals", "u1"), order) is True
        assert evaluate(Comparison("missing", "notEquals", "x"), order) is True

    def test_mapping_records(self):
        """Test read-only mappings resolve fields like dicts."""
        record = MappingProxyType({"ownerId": "u1", "baseId": 3})
        assert evaluate(Comparison("ownerId", "equals", "u1"), record) is True
        assert evaluate(Comparison("baseId", "in", (3, 4)), record) is True

    def test_unknown_operator_raises(self):
        """Test an unknown operator is rejected when the comparison is built."""
        with pytest.raises(ScopeError, match="between"):
            Comparison("amount", "between", 1)


class TestCompoundNodes:
    """AllOf, AnyOf and MatchNothing."""

    def test_all_of_requires_every_operand(self):
        """Test AND semantics."""
        node = AllOf((Comparison("ownerId", "equals", "u1"), Comparison("baseId", "equals", 3)))
        assert evaluate(node, {"ownerId": "u1", "baseId": 3}) is True
        assert evaluate(node, {"ownerId": "u1", "baseId": 4}) is False

    def test_any_of_requires_one_operand(self):
        """Test OR semantics."""
        node = AnyOf((Comparison("ownerId", "equals", "u1"), Comparison("baseId", "equals", 3)))
        assert evaluate(node, {"ownerId": "u2", "baseId": 3}) is True
        assert evaluate(node, {"ownerId": "u2", "baseId": 4}) is False

    def test_empty_nodes(self):
        """Test empty AND matches everything and empty OR matches nothing."""
        assert evaluate(AllOf(()), {}) is True
        assert evaluate(AnyOf(()), {}) is False

    def test_match_nothing(self):
        """Test MatchNothing never matches."""
        assert evaluate(MatchNothing(reason="test"), {"anything": 1}) is False
