"""In-memory evaluator for row filter predicates.

Used by resource providers that hold records in memory (and by tests) to
apply the same row filter a SQL query layer would apply.
"""

from collections.abc import Mapping
from typing import Any

from .ast import (
    CONTAINS,
    EQUALS,
    GREATER_THAN,
    GREATER_THAN_OR_EQUAL,
    IN,
    LESS_THAN,
    LESS_THAN_OR_EQUAL,
    NOT_EQUALS,
    NOT_IN,
    AllOf,
    AnyOf,
    Comparison,
    MatchNothing,
    Node,
)
from .exceptions import ScopeError

_MISSING = object()


class Evaluator:
    """Evaluates a predicate tree against a single record."""

    def __init__(self, record: Any):
        """Initialize the evaluator.

        Args:
            record: A mapping or an object exposing fields as attributes.
        """
        self.record = record

    def evaluate(self, node: Node) -> bool:
        """Evaluate a node."""
        if isinstance(node, Comparison):
            return self._evaluate_comparison(node)

        if isinstance(node, AllOf):
            return all(self.evaluate(operand) for operand in node.operands)

        if isinstance(node, AnyOf):
            return any(self.evaluate(operand) for operand in node.operands)

        if isinstance(node, MatchNothing):
            return False

        raise ScopeError(f"Unknown node type: {type(node).__name__}")

    def _resolve_field(self, name: str) -> Any:
        """Resolve a field from the record, None when absent."""
        if isinstance(self.record, Mapping):
            return self.record.get(name)
        value = getattr(self.record, name, _MISSING)
        return None if value is _MISSING else value

    def _evaluate_comparison(self, node: Comparison) -> bool:
        actual = self._resolve_field(node.field)
        op = node.operator

        if op in (IN, NOT_IN):
            candidates = [_coerce(actual, v) for v in node.value]
            if op == IN:
                return actual is not None and actual in candidates
            return actual is None or actual not in candidates

        expected = _coerce(actual, node.value)

        if op == EQUALS:
            return actual is not None and actual == expected
        if op == NOT_EQUALS:
            return actual is None or actual != expected
        if op == CONTAINS:
            if actual is None:
                return False
            if isinstance(actual, (list, tuple, set, frozenset)):
                return expected in actual
            return str(node.value) in str(actual)

        if actual is None:
            return False
        try:
            if op == GREATER_THAN:
                return actual > expected
            if op == GREATER_THAN_OR_EQUAL:
                return actual >= expected
            if op == LESS_THAN:
                return actual < expected
            if op == LESS_THAN_OR_EQUAL:
                return actual <= expected
        except TypeError:
            # Incomparable types never match
            return False

        raise ScopeError(f"Unknown operator: {op}")


def _coerce(actual: Any, value: Any) -> Any:
    """Coerce a rule value (often a string literal) to the record value's type."""
    if actual is None or value is None or not isinstance(value, str):
        return value
    if isinstance(actual, bool):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(actual, int):
        try:
            return int(value)
        except ValueError:
            return value
    if isinstance(actual, float):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def evaluate(node: Node, record: Any) -> bool:
    """Return True if the record satisfies the predicate."""
    return Evaluator(record).evaluate(node)
