"""Predicate tree nodes for row-level data scopes."""

from dataclasses import dataclass
from typing import Any

from .exceptions import ScopeError

EQUALS = "equals"
NOT_EQUALS = "notEquals"
IN = "in"
NOT_IN = "notIn"
GREATER_THAN = "greaterThan"
GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
LESS_THAN = "lessThan"
LESS_THAN_OR_EQUAL = "lessThanOrEqual"
CONTAINS = "contains"

COMPARISON_OPERATORS = frozenset(
    {
        EQUALS,
        NOT_EQUALS,
        IN,
        NOT_IN,
        GREATER_THAN,
        GREATER_THAN_OR_EQUAL,
        LESS_THAN,
        LESS_THAN_OR_EQUAL,
        CONTAINS,
    }
)

# Operators whose value is a sequence
LIST_OPERATORS = frozenset({IN, NOT_IN})


@dataclass(frozen=True)
class Node:
    """Base class for all predicate nodes."""
    pass


@dataclass(frozen=True)
class Comparison(Node):
    """Compares a record field with an already-resolved value."""
    field: str
    operator: str
    value: Any

    def __post_init__(self):
        if self.operator not in COMPARISON_OPERATORS:
            raise ScopeError(f"Unknown operator: {self.operator}")


@dataclass(frozen=True)
class AllOf(Node):
    """Logical AND of operands. An empty AllOf matches every row."""
    operands: tuple[Node, ...]


@dataclass(frozen=True)
class AnyOf(Node):
    """Logical OR of operands. An empty AnyOf matches no row."""
    operands: tuple[Node, ...]


@dataclass(frozen=True)
class MatchNothing(Node):
    """Matches no row at all. Used when a scope fails closed."""
    reason: str = ""
